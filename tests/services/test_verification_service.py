"""Tests for the verification service client."""

import json

import httpx
import pytest

from neet_cli.core.errors import RemoteError
from neet_cli.services.verification_service import VerificationClient

BASE_URL = "https://auth.example.test/api/"


def _client(handler):
    return VerificationClient(BASE_URL, transport=httpx.MockTransport(handler))


class TestVerificationClient:
    """Send-code and verify-code exchanges."""

    @pytest.mark.asyncio
    async def test_send_code_posts_email(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"success": True})

        await _client(handler).send_code("a@b.com")

        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url) == "https://auth.example.test/api/send-code"
        assert json.loads(request.content) == {"email": "a@b.com"}

    @pytest.mark.asyncio
    async def test_verify_code_posts_email_and_code(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(204)

        await _client(handler).verify_code("a@b.com", "1234")

        request = captured["request"]
        assert str(request.url) == "https://auth.example.test/api/verify-code"
        assert json.loads(request.content) == {"email": "a@b.com", "code": "1234"}

    @pytest.mark.asyncio
    async def test_rejection_message_surfaced(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Invalid or expired code"})

        with pytest.raises(RemoteError, match="Invalid or expired code"):
            await _client(handler).verify_code("a@b.com", "0000")

    @pytest.mark.asyncio
    async def test_rejection_without_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        with pytest.raises(RemoteError, match="500"):
            await _client(handler).send_code("a@b.com")

    @pytest.mark.asyncio
    async def test_success_false_is_rejection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "message": "Wrong code"})

        with pytest.raises(RemoteError, match="Wrong code"):
            await _client(handler).verify_code("a@b.com", "1111")

    @pytest.mark.asyncio
    async def test_transport_failure_is_remote_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteError, match="connection refused"):
            await _client(handler).send_code("a@b.com")
