"""Access gate state machine guarding the chat session.

Two variants unlock the gate:

* API key: the user supplies a secret which is kept in memory and used as the
  provider credential. No network call is made.
* Email: the user requests a one-time code for an email address and submits
  it back. A successful check persists a durable "authenticated" flag so the
  next process start skips the gate.

The durable flag has no expiry. Its presence at startup unlocks the gate
without re-verification.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .auth_store import AuthFlagStore
from .errors import GateBusyError, RemoteError, ValidationError

logger = logging.getLogger(__name__)


class AccessMode(Enum):
    """Whether chat intents are accepted."""

    LOCKED = "locked"
    UNLOCKING = "unlocking"  # Verification check in flight
    UNLOCKED = "unlocked"


class VerificationStep(Enum):
    """Position in the email verification exchange."""

    ENTER_EMAIL = "enter_email"
    ENTER_CODE = "enter_code"


class GateVariant(Enum):
    """How the gate is unlocked."""

    API_KEY = "api_key"
    EMAIL = "email"


@dataclass
class AccessState:
    """Observable state of the access gate."""

    mode: AccessMode = AccessMode.LOCKED
    credential: Optional[str] = None
    email: Optional[str] = None
    pending_code: Optional[str] = None
    step: VerificationStep = VerificationStep.ENTER_EMAIL


class AccessGate:
    """State machine deciding whether the session is unlocked."""

    CODE_LENGTH = 4

    def __init__(
        self,
        variant: GateVariant = GateVariant.API_KEY,
        flag_store: Optional[AuthFlagStore] = None,
        verification_client=None,
        fallback_credential: Optional[str] = None,
    ):
        """Initialize the gate and read the durable flag once.

        Args:
            variant: Unlock variant
            flag_store: Durable "authenticated" flag storage
            verification_client: Client for the verification service (email variant)
            fallback_credential: Provider API key used when no secret was entered
        """
        self.variant = variant
        self.flag_store = flag_store or AuthFlagStore()
        self.verification_client = verification_client
        self.fallback_credential = fallback_credential
        self.state = AccessState()
        self._in_flight = False

        # Called with the new AccessState after every transition
        self.on_change: Optional[Callable[[AccessState], None]] = None

        self.init()

    def init(self) -> None:
        """Reset in-memory state and apply the durable flag."""
        self.state = AccessState()
        if self.flag_store.is_set():
            logger.info("Authenticated flag present, skipping access gate")
            self.state.mode = AccessMode.UNLOCKED

    @property
    def mode(self) -> AccessMode:
        return self.state.mode

    @property
    def step(self) -> VerificationStep:
        return self.state.step

    @property
    def is_unlocked(self) -> bool:
        return self.state.mode is AccessMode.UNLOCKED

    @property
    def busy(self) -> bool:
        """True while a verification exchange is in flight."""
        return self._in_flight

    @property
    def credential(self) -> Optional[str]:
        """Credential for the completion provider, if any."""
        return self.state.credential or self.fallback_credential

    def request_unlock_with_secret(self, secret: str) -> None:
        """Unlock with an API key.

        Calling this on an unlocked gate is a no-op.

        Raises:
            ValidationError: If the secret is empty or whitespace
        """
        if self.is_unlocked:
            return

        secret = (secret or "").strip()
        if not secret:
            raise ValidationError("Please enter your API key.")

        self.state.credential = secret
        self.state.mode = AccessMode.UNLOCKED
        logger.info("Access gate unlocked with API key")
        self._notify()

    async def send_code(self, email: str) -> None:
        """Request a one-time code for ``email``.

        Raises:
            ValidationError: If the email is empty
            RemoteError: If the verification service rejects the request
            GateBusyError: If another verification exchange is in flight
        """
        if self.is_unlocked:
            return

        email = (email or "").strip()
        if not email:
            raise ValidationError("Please enter your email address.")
        self._ensure_idle()
        client = self._require_client()

        self._in_flight = True
        try:
            await client.send_code(email)
        finally:
            self._in_flight = False

        self.state.email = email
        self.state.step = VerificationStep.ENTER_CODE
        logger.info("Verification code requested")
        self._notify()

    async def verify_code(self, email: str, code: str) -> None:
        """Check a one-time code and unlock on success.

        Raises:
            ValidationError: If the code is not exactly four characters or no
                email is known
            RemoteError: If the verification service rejects the code
            GateBusyError: If another verification exchange is in flight
        """
        if self.is_unlocked:
            return

        code = (code or "").strip()
        if len(code) != self.CODE_LENGTH:
            raise ValidationError(
                f"The verification code must be {self.CODE_LENGTH} characters."
            )
        email = (email or self.state.email or "").strip()
        if not email:
            raise ValidationError("Please enter your email address.")
        self._ensure_idle()
        client = self._require_client()

        previous_mode = self.state.mode
        previous_code = self.state.pending_code
        self._in_flight = True
        self.state.mode = AccessMode.UNLOCKING
        self.state.pending_code = code
        self._notify()
        try:
            await client.verify_code(email, code)
        except Exception:
            self.state.mode = previous_mode
            self.state.pending_code = previous_code
            self._notify()
            raise
        finally:
            self._in_flight = False

        self.state.email = email
        self.state.mode = AccessMode.UNLOCKED
        try:
            self.flag_store.set()
        except OSError as e:
            logger.warning(f"Could not persist authenticated flag: {e}")
        logger.info("Access gate unlocked by email verification")
        self._notify()

    def sign_out(self) -> None:
        """Clear the durable flag and lock the gate again."""
        self.flag_store.clear()
        self.state = AccessState()
        logger.info("Signed out")
        self._notify()

    def _ensure_idle(self) -> None:
        if self._in_flight:
            raise GateBusyError("A verification request is already in progress.")

    def _require_client(self):
        if self.verification_client is None:
            raise RemoteError("Verification service is not configured.")
        return self.verification_client

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self.state)
