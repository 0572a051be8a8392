"""In-memory chat session models and transcript export."""

from .models import (
    Attachment,
    ErrorInfo,
    Message,
    Sender,
    SessionState,
)
from .exporter import TranscriptExporter

__all__ = [
    "Attachment",
    "ErrorInfo",
    "Message",
    "Sender",
    "SessionState",
    "TranscriptExporter",
]
