"""Error taxonomy shared by the access gate, session controller and adapters."""

from typing import Optional


class NeetError(Exception):
    """Base class for all NEET CLI errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(NeetError):
    """Bad or missing local input, raised before any network activity."""

    kind = "validation"


class NetworkError(NeetError):
    """Transport-level failure (DNS, connection refused, timeout)."""

    kind = "network"


class ProtocolError(NeetError):
    """The provider answered with a non-success HTTP status."""

    kind = "protocol"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteError(NeetError):
    """The verification service rejected a request."""

    kind = "remote"


class AccessLockedError(NeetError):
    """A chat intent arrived while the access gate is not unlocked."""

    kind = "locked"


class SessionBusyError(NeetError):
    """A submission arrived while another exchange is still in flight."""

    kind = "busy"


class GateBusyError(NeetError):
    """A gate exchange arrived while another one is still in flight."""

    kind = "busy"
