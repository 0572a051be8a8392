"""Client for the email verification service (code issuance and check)."""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from ..core.errors import RemoteError

logger = logging.getLogger(__name__)

# Endpoint paths relative to the service base URL
SEND_CODE_PATH = "/send-code"
VERIFY_CODE_PATH = "/verify-code"


class VerificationClient:
    """Talks to the remote service that issues and checks one-time codes.

    Both calls POST JSON and treat any 2xx answer as success unless the body
    explicitly says ``{"success": false}``. Rejections carry a ``message``
    field which is surfaced verbatim.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Service base URL, e.g. https://auth.example.com/api
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the network
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def send_code(self, email: str) -> None:
        """Ask the service to email a one-time code.

        Raises:
            RemoteError: If the service rejects the request or is unreachable
        """
        await self._post(SEND_CODE_PATH, {"email": email})

    async def verify_code(self, email: str, code: str) -> None:
        """Check a one-time code for ``email``.

        Raises:
            RemoteError: If the code is rejected or the service is unreachable
        """
        await self._post(VERIFY_CODE_PATH, {"email": email, "code": code})

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload)
        except httpx.TransportError as e:
            logger.warning("Verification service unreachable: %s", e)
            raise RemoteError(str(e) or e.__class__.__name__) from e

        body = _parse_body(response)

        if not response.is_success:
            message = body.get("message") or (
                f"Verification service error: {response.status_code}"
            )
            logger.info("Verification request %s rejected: %s", path, message)
            raise RemoteError(str(message))

        if body.get("success") is False:
            message = body.get("message") or "Verification failed"
            logger.info("Verification request %s rejected: %s", path, message)
            raise RemoteError(str(message))

        return body


def _parse_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}
