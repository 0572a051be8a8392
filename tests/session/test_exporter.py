"""Tests for transcript export."""

from datetime import datetime

import pytest

from neet_cli.session.exporter import TranscriptExporter
from neet_cli.session.models import Attachment, Message, Sender


@pytest.fixture
def messages(tmp_path):
    image_path = tmp_path / "heart.png"
    image_path.write_bytes(b"x")
    return [
        Message(
            text="What is NEET?",
            sender=Sender.USER,
            timestamp=datetime(2024, 5, 1, 9, 30, 0),
        ),
        Message(
            text="NEET is an entrance exam.",
            sender=Sender.BOT,
            timestamp=datetime(2024, 5, 1, 9, 30, 5),
        ),
        Message(
            text="",
            sender=Sender.USER,
            attachment=Attachment.from_path(image_path),
            timestamp=datetime(2024, 5, 1, 9, 31, 0),
        ),
    ]


class TestPlainText:
    def test_speakers_and_order(self, messages):
        text = TranscriptExporter().to_plain_text(messages)

        assert text == (
            "You: What is NEET?\n\n"
            "NEET AI: NEET is an entrance exam.\n\n"
            "You: [image: heart.png]"
        )

    def test_empty_transcript(self):
        assert TranscriptExporter().to_plain_text([]) == ""


class TestMarkdown:
    def test_header(self, messages):
        markdown = TranscriptExporter().export_markdown(messages)

        assert markdown.startswith("# NEET AI Session\n")
        assert "**Started:** 2024-05-01 09:30:00" in markdown
        assert "**Messages:** 3" in markdown

    def test_message_sections(self, messages):
        markdown = TranscriptExporter().export_markdown(messages)

        assert "## [09:30:00] You" in markdown
        assert "## [09:30:05] NEET AI" in markdown
        assert "*Attached image: heart.png*" in markdown
        assert markdown.index("What is NEET?") < markdown.index(
            "NEET is an entrance exam."
        )

    def test_explicit_start_time(self, messages):
        markdown = TranscriptExporter().export_markdown(
            messages, started=datetime(2024, 4, 30, 8, 0, 0)
        )

        assert "**Started:** 2024-04-30 08:00:00" in markdown

    def test_empty_transcript_has_no_start(self):
        markdown = TranscriptExporter().export_markdown([])

        assert "**Started:**" not in markdown
        assert "**Messages:** 0" in markdown

    def test_writes_file(self, messages, tmp_path):
        output = tmp_path / "exports" / "session.md"

        markdown = TranscriptExporter().export_markdown(messages, output_path=output)

        assert output.read_text(encoding="utf-8") == markdown

    def test_no_file_without_path(self, messages, tmp_path):
        before = set(tmp_path.iterdir())

        TranscriptExporter().export_markdown(messages)

        assert set(tmp_path.iterdir()) == before

    def test_custom_title(self, messages):
        markdown = TranscriptExporter(title="Biology Revision").export_markdown(
            messages
        )

        assert markdown.startswith("# Biology Revision Session\n")
