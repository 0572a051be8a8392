"""Session controller owning the transcript and the request lifecycle."""

import logging
from typing import Callable, Optional, Tuple

from ..config.providers import ProviderConfig
from ..session.models import Attachment, ErrorInfo, Message, Sender, SessionState
from .access_gate import AccessGate
from .errors import AccessLockedError, NeetError, SessionBusyError, ValidationError

logger = logging.getLogger(__name__)


class SessionController:
    """Single-flight chat controller.

    A submission is handled in two phases: the user's message is appended to
    the transcript first, then the backend is called. The ``pending`` flag is
    the only synchronization primitive; a submission arriving while it is set
    is rejected, never queued.

    Request failures become BOT transcript entries. ``last_error`` only holds
    submission-time validation failures.
    """

    MISSING_CREDENTIAL_TEXT = "API key missing."
    NO_CONTENT_TEXT = "Couldn't fetch an answer."
    EMPTY_SUBMISSION_TEXT = "Please enter a message or attach an image."

    def __init__(self, gate: AccessGate, adapter, provider: ProviderConfig):
        """Initialize the controller.

        Args:
            gate: Access gate that must be unlocked before submissions
            adapter: Backend adapter exposing ``complete()``
            provider: Provider configuration passed to the adapter
        """
        self.gate = gate
        self.adapter = adapter
        self.provider = provider
        self.state = SessionState()
        self._generation = 0

        # Presentation callbacks
        self.on_message_appended: Optional[Callable[[Message], None]] = None
        self.on_pending_changed: Optional[Callable[[bool], None]] = None
        self.on_input_cleared: Optional[Callable[[], None]] = None

    @property
    def transcript(self) -> Tuple[Message, ...]:
        return tuple(self.state.transcript)

    @property
    def pending(self) -> bool:
        return self.state.pending

    @property
    def last_error(self) -> Optional[ErrorInfo]:
        return self.state.last_error

    @property
    def draft(self) -> str:
        return self.state.draft

    def update_draft(self, text: str) -> None:
        """Record the current input buffer."""
        self.state.draft = text or ""

    @property
    def staged_attachment(self) -> Optional[Attachment]:
        return self.state.staged_attachment

    def stage_attachment(self, attachment: Attachment) -> None:
        """Hold an attachment until the next submission."""
        self.state.staged_attachment = attachment

    def clear_staged_attachment(self) -> None:
        self.state.staged_attachment = None

    async def submit(self, text: str, attachment: Optional[Attachment] = None) -> None:
        """Submit a message and wait for the exchange to finish.

        Args:
            text: Raw input text; it is trimmed before use
            attachment: Optional local image shown with the message

        Raises:
            AccessLockedError: If the access gate is not unlocked
            SessionBusyError: If another exchange is in flight
            ValidationError: If both the text and the attachment are empty
        """
        if not self.gate.is_unlocked:
            raise AccessLockedError("Unlock the chat before sending messages.")
        if self.state.pending:
            raise SessionBusyError("Still waiting for the previous answer.")

        trimmed = (text or "").strip()
        if not trimmed and attachment is None:
            error = ValidationError(self.EMPTY_SUBMISSION_TEXT)
            self.state.last_error = ErrorInfo(kind=error.kind, message=error.message)
            raise error

        generation = self._generation
        self.state.last_error = None
        self._set_pending(True)
        try:
            self._append(Message(text=trimmed, sender=Sender.USER, attachment=attachment))
            self._clear_input()

            credential = self.gate.credential
            if not credential:
                logger.info("No credential available, skipping provider call")
                self._append(Message(text=self.MISSING_CREDENTIAL_TEXT, sender=Sender.BOT))
                return

            reply_text = await self._request_reply(trimmed, credential)
            if generation != self._generation:
                logger.debug("Session was reset while waiting, dropping reply")
                return
            self._append(Message(text=reply_text, sender=Sender.BOT))
        finally:
            if generation == self._generation:
                self._set_pending(False)

    async def _request_reply(self, prompt_text: str, credential: str) -> str:
        """Call the adapter and turn the outcome into BOT text."""
        try:
            reply = await self.adapter.complete(prompt_text, credential, self.provider)
        except NeetError as e:
            logger.warning("Chat request failed (%s): %s", e.kind, e.message)
            return f"Error: {e.message}"
        except Exception as e:
            logger.exception("Unexpected failure during chat request")
            return f"Error: {e}"

        if not reply.has_content:
            return self.NO_CONTENT_TEXT
        return reply.content

    def reset(self) -> None:
        """Discard the whole session (used on sign-out).

        An exchange still in flight keeps running, but its reply is dropped.
        """
        was_pending = self.state.pending
        self._generation += 1
        self.state = SessionState()
        logger.debug("Session reset")
        if was_pending and self.on_pending_changed:
            self.on_pending_changed(False)

    def _append(self, message: Message) -> None:
        self.state.transcript.append(message)
        if self.on_message_appended:
            self.on_message_appended(message)

    def _clear_input(self) -> None:
        self.state.draft = ""
        self.state.staged_attachment = None
        if self.on_input_cleared:
            self.on_input_cleared()

    def _set_pending(self, pending: bool) -> None:
        self.state.pending = pending
        if self.on_pending_changed:
            self.on_pending_changed(pending)
