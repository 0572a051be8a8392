"""Tests for the session controller."""

import asyncio

import pytest
from unittest.mock import AsyncMock, Mock

from neet_cli.config.providers import ProviderRegistry
from neet_cli.core.access_gate import AccessGate, AccessMode
from neet_cli.core.auth_store import AuthFlagStore
from neet_cli.core.errors import (
    AccessLockedError,
    NetworkError,
    ProtocolError,
    SessionBusyError,
    ValidationError,
)
from neet_cli.core.session_controller import SessionController
from neet_cli.services.backend_adapter import NO_CONTENT, ProviderReply
from neet_cli.session.models import Attachment, Sender


@pytest.fixture
def gate(tmp_path):
    """Unlocked API-key gate."""
    gate = AccessGate(flag_store=AuthFlagStore(tmp_path / "authenticated"))
    gate.request_unlock_with_secret("sk-test")
    return gate


@pytest.fixture
def adapter():
    mock_adapter = Mock()
    mock_adapter.complete = AsyncMock(return_value=ProviderReply(content="NEET is..."))
    return mock_adapter


@pytest.fixture
def controller(gate, adapter):
    return SessionController(gate, adapter, ProviderRegistry.DEEPSEEK)


@pytest.fixture
def image(tmp_path):
    path = tmp_path / "diagram.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    return Attachment.from_path(path)


def _entries(controller):
    return [(m.sender, m.text) for m in controller.transcript]


class TestSubmitValidation:
    """Preconditions checked before any state change."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_empty_submission_rejected(self, controller, adapter, text):
        with pytest.raises(ValidationError):
            await controller.submit(text)

        assert controller.transcript == ()
        assert controller.pending is False
        assert controller.last_error is not None
        assert controller.last_error.kind == "validation"
        adapter.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_attachment_alone_is_accepted(self, controller, adapter, image):
        await controller.submit("", image)

        user = controller.transcript[0]
        assert user.sender is Sender.USER
        assert user.text == ""
        assert user.attachment is image
        adapter.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_locked_gate_rejects(self, tmp_path, adapter):
        gate = AccessGate(flag_store=AuthFlagStore(tmp_path / "flag"))
        controller = SessionController(gate, adapter, ProviderRegistry.DEEPSEEK)

        with pytest.raises(AccessLockedError):
            await controller.submit("hello")

        assert controller.transcript == ()
        adapter.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_successful_submit_clears_last_error(self, controller):
        with pytest.raises(ValidationError):
            await controller.submit("")
        assert controller.last_error is not None

        await controller.submit("What is NEET?")

        assert controller.last_error is None


class TestSubmitExchange:
    """Accepted submissions."""

    @pytest.mark.asyncio
    async def test_reply_appended(self, controller, adapter):
        await controller.submit("  What is NEET?  ")

        assert _entries(controller) == [
            (Sender.USER, "What is NEET?"),
            (Sender.BOT, "NEET is..."),
        ]
        adapter.complete.assert_awaited_once_with(
            "What is NEET?", "sk-test", ProviderRegistry.DEEPSEEK
        )
        assert controller.pending is False

    @pytest.mark.asyncio
    async def test_missing_credential(self, tmp_path, adapter):
        gate = AccessGate(flag_store=AuthFlagStore(tmp_path / "flag"))
        gate.state.mode = AccessMode.UNLOCKED
        controller = SessionController(gate, adapter, ProviderRegistry.DEEPSEEK)

        await controller.submit("What is NEET?")

        assert _entries(controller) == [
            (Sender.USER, "What is NEET?"),
            (Sender.BOT, "API key missing."),
        ]
        assert controller.pending is False
        adapter.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_content_reply_uses_fallback(self, controller, adapter):
        adapter.complete.return_value = NO_CONTENT

        await controller.submit("What is NEET?")

        assert controller.transcript[-1].text == "Couldn't fetch an answer."

    @pytest.mark.asyncio
    async def test_network_error_becomes_bot_entry(self, controller, adapter):
        adapter.complete.side_effect = NetworkError("timeout")

        await controller.submit("What is NEET?")

        assert controller.transcript[-1].sender is Sender.BOT
        assert controller.transcript[-1].text == "Error: timeout"
        assert controller.pending is False
        assert controller.last_error is None

    @pytest.mark.asyncio
    async def test_protocol_error_includes_status(self, controller, adapter):
        adapter.complete.side_effect = ProtocolError("API error: 401", status_code=401)

        await controller.submit("What is NEET?")

        assert controller.transcript[-1].text == "Error: API error: 401"

    @pytest.mark.asyncio
    async def test_unexpected_exception_does_not_escape(self, controller, adapter):
        adapter.complete.side_effect = RuntimeError("boom")

        await controller.submit("What is NEET?")

        assert controller.transcript[-1].text == "Error: boom"
        assert controller.pending is False

    @pytest.mark.asyncio
    async def test_attachment_is_not_sent(self, controller, adapter, image):
        await controller.submit("Explain this", image)

        args = adapter.complete.await_args.args
        assert args[0] == "Explain this"
        assert image not in args

    @pytest.mark.asyncio
    async def test_user_echo_before_network(self, controller, adapter):
        observed = {}

        async def complete(prompt, credential, provider):
            observed["entries"] = _entries(controller)
            observed["pending"] = controller.pending
            return ProviderReply(content="ok")

        adapter.complete.side_effect = complete

        await controller.submit("What is NEET?")

        assert observed["entries"] == [(Sender.USER, "What is NEET?")]
        assert observed["pending"] is True

    @pytest.mark.asyncio
    async def test_input_cleared_after_echo(self, controller, image):
        controller.stage_attachment(image)
        controller.update_draft("What is NEET?")
        controller.on_input_cleared = Mock()

        await controller.submit("What is NEET?", image)

        controller.on_input_cleared.assert_called_once()
        assert controller.staged_attachment is None
        assert controller.draft == ""

    @pytest.mark.asyncio
    async def test_pending_toggles_exactly_once(self, controller, adapter):
        controller.on_pending_changed = Mock()
        adapter.complete.side_effect = NetworkError("timeout")

        await controller.submit("What is NEET?")

        calls = [c.args[0] for c in controller.on_pending_changed.call_args_list]
        assert calls == [True, False]

    @pytest.mark.asyncio
    async def test_callbacks_see_each_message(self, controller):
        controller.on_message_appended = Mock()

        await controller.submit("What is NEET?")

        appended = [c.args[0].text for c in controller.on_message_appended.call_args_list]
        assert appended == ["What is NEET?", "NEET is..."]


class TestSingleFlight:
    """Only one exchange at a time."""

    @pytest.mark.asyncio
    async def test_second_submit_rejected_while_pending(self, controller, adapter):
        release = asyncio.Event()

        async def slow_complete(prompt, credential, provider):
            await release.wait()
            return ProviderReply(content=f"answer to {prompt}")

        adapter.complete.side_effect = slow_complete

        first = asyncio.create_task(controller.submit("first"))
        await asyncio.sleep(0)
        assert controller.pending is True

        with pytest.raises(SessionBusyError):
            await controller.submit("second")

        assert _entries(controller) == [(Sender.USER, "first")]

        release.set()
        await first

        assert _entries(controller) == [
            (Sender.USER, "first"),
            (Sender.BOT, "answer to first"),
        ]
        assert controller.pending is False
        assert adapter.complete.await_count == 1

    @pytest.mark.asyncio
    async def test_transcript_is_append_only(self, controller, adapter):
        snapshots = []
        for prompt in ["one", "two", "three"]:
            await controller.submit(prompt)
            snapshots.append(controller.transcript)

        for earlier, later in zip(snapshots, snapshots[1:]):
            assert len(later) >= len(earlier)
            assert later[: len(earlier)] == earlier

    @pytest.mark.asyncio
    async def test_transcript_view_is_read_only(self, controller):
        await controller.submit("What is NEET?")

        assert isinstance(controller.transcript, tuple)


class TestReset:
    """Session reset on sign-out."""

    @pytest.mark.asyncio
    async def test_reset_clears_state(self, controller, image):
        await controller.submit("What is NEET?")
        controller.stage_attachment(image)
        controller.update_draft("half-typed")
        assert controller.draft == "half-typed"

        controller.reset()

        assert controller.transcript == ()
        assert controller.pending is False
        assert controller.staged_attachment is None
        assert controller.last_error is None
        assert controller.draft == ""

    @pytest.mark.asyncio
    async def test_reply_after_reset_is_dropped(self, controller, adapter):
        release = asyncio.Event()

        async def slow_complete(prompt, credential, provider):
            await release.wait()
            return ProviderReply(content="late answer")

        adapter.complete.side_effect = slow_complete
        controller.on_pending_changed = Mock()

        task = asyncio.create_task(controller.submit("What is NEET?"))
        await asyncio.sleep(0)

        controller.reset()
        controller.on_pending_changed.assert_called_with(False)

        release.set()
        await task

        assert controller.transcript == ()
        assert controller.pending is False
