"""Data models for the in-memory chat session."""

import mimetypes
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..core.errors import ValidationError


class Sender(Enum):
    """Author of a transcript entry."""

    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class Attachment:
    """A local image the user attached to a message.

    The ``handle`` is only meaningful inside the current process. The file is
    shown alongside the message but never uploaded to the provider.
    """

    path: Path
    mime_type: str
    size_bytes: int
    handle: str = field(default_factory=lambda: f"local://{uuid.uuid4()}")

    @property
    def name(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path) -> "Attachment":
        """Create an attachment for an image file on disk.

        Raises:
            ValidationError: If the path is not an existing image file
        """
        path = Path(path).expanduser()
        if not path.is_file():
            raise ValidationError(f"No such file: {path}")

        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith("image/"):
            raise ValidationError(f"Not an image file: {path.name}")

        return cls(path=path, mime_type=mime_type, size_bytes=path.stat().st_size)


@dataclass(frozen=True)
class Message:
    """One transcript entry. Entries are immutable once appended."""

    text: str
    sender: Sender
    attachment: Optional[Attachment] = None
    timestamp: datetime = field(default_factory=datetime.now)
    message_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_user(self) -> bool:
        return self.sender is Sender.USER


@dataclass(frozen=True)
class ErrorInfo:
    """A submission-time failure shown next to the input."""

    kind: str
    message: str


@dataclass
class SessionState:
    """Mutable state owned by the session controller."""

    transcript: List[Message] = field(default_factory=list)
    pending: bool = False
    last_error: Optional[ErrorInfo] = None
    draft: str = ""
    staged_attachment: Optional[Attachment] = None
