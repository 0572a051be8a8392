"""Transcript export to markdown and plain text."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from .models import Message

logger = logging.getLogger(__name__)


class TranscriptExporter:
    """Renders the in-memory transcript for copying and exporting.

    Nothing is written unless an export is explicitly requested; transcripts
    are never reloaded.
    """

    def __init__(self, title: str = "NEET AI"):
        self.title = title

    def to_plain_text(self, messages: Iterable[Message]) -> str:
        """Render messages as ``Speaker: text`` blocks."""
        blocks = []
        for message in messages:
            speaker = "You" if message.is_user else "NEET AI"
            text = message.text
            if message.attachment:
                text = f"{text}\n[image: {message.attachment.name}]".lstrip("\n")
            blocks.append(f"{speaker}: {text}")
        return "\n\n".join(blocks)

    def export_markdown(
        self,
        messages: Iterable[Message],
        output_path: Optional[Path] = None,
        started: Optional[datetime] = None,
    ) -> str:
        """Export messages to markdown format.

        Args:
            messages: Transcript entries in order
            output_path: Optional path to write markdown file
            started: Session start time for the header

        Returns:
            Markdown content as string
        """
        messages = list(messages)
        if started is None and messages:
            started = messages[0].timestamp

        lines = [f"# {self.title} Session\n"]
        if started:
            lines.append(f"**Started:** {started.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"**Messages:** {len(messages)}\n")
        lines.append("---\n")

        for message in messages:
            time_str = message.timestamp.strftime("%H:%M:%S")
            if message.is_user:
                lines.append(f"## [{time_str}] You\n")
            else:
                lines.append(f"## [{time_str}] NEET AI\n")
            if message.attachment:
                lines.append(f"*Attached image: {message.attachment.name}*\n")
            if message.text:
                lines.append(f"{message.text}\n")

        markdown = "\n".join(lines)

        if output_path:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(markdown, encoding="utf-8")
            logger.info("Transcript exported to %s", output_path)

        return markdown
