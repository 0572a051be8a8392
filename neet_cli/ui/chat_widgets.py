"""Custom widgets for transcript messages with copy functionality."""

import pyperclip

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Static
from rich.markdown import Markdown

from ..session.models import Message


class BotMessage(Vertical):
    """Assistant reply with markdown rendering and a copy button."""

    DEFAULT_CSS = """
    BotMessage {
        width: 100%;
        height: auto;
        margin: 0 0 1 0;
        border: solid $accent;
        background: $surface;
    }

    BotMessage .message-header {
        layout: horizontal;
        width: 100%;
        height: auto;
        padding: 0 1;
        background: $boost;
    }

    BotMessage .message-title {
        width: 1fr;
        content-align: left middle;
        padding: 0 1;
    }

    BotMessage .copy-button {
        min-width: 10;
        height: auto;
        padding: 0 1;
        margin: 0;
    }

    BotMessage .message-content {
        width: 100%;
        padding: 1 2;
    }
    """

    def __init__(self, content: str, **kwargs):
        """Initialize a bot message.

        Args:
            content: Reply text (markdown)
            **kwargs: Additional arguments
        """
        super().__init__(**kwargs)
        self.message_content = str(content) if content is not None else ""

    def compose(self) -> ComposeResult:
        """Compose the message widget."""
        with Horizontal(classes="message-header"):
            yield Static("🤖 NEET AI", classes="message-title")
            yield Button("📋 Copy", classes="copy-button", variant="primary")
        try:
            yield Static(Markdown(self.message_content), classes="message-content")
        except Exception:
            # Malformed markdown from the model must not break the transcript
            yield Static(self.message_content, classes="message-content", markup=False)

    @on(Button.Pressed, ".copy-button")
    def copy_message(self, event: Button.Pressed) -> None:
        """Handle copy button press."""
        event.stop()
        try:
            pyperclip.copy(self.message_content)
            self.app.notify("Message copied to clipboard", title="Success")
        except pyperclip.PyperclipException as e:
            self.app.notify(f"Failed to copy: {e}", title="Error", severity="error")


class UserMessage(Vertical):
    """Simple user message display, with the attached image name if any."""

    DEFAULT_CSS = """
    UserMessage {
        width: 100%;
        height: auto;
        padding: 1 2;
        margin: 0 0 1 0;
        background: $panel;
        border-left: thick $primary;
    }

    UserMessage .user-label {
        color: $primary;
        text-style: bold;
    }

    UserMessage .user-attachment {
        color: $text-muted;
        text-style: italic;
    }
    """

    def __init__(self, content: str, attachment_name: str = None, **kwargs):
        """Initialize a user message.

        Args:
            content: User message content
            attachment_name: File name of the attached image, if any
            **kwargs: Additional arguments
        """
        self.message_content = str(content) if content is not None else ""
        self.attachment_name = attachment_name
        super().__init__(**kwargs)

    def compose(self) -> ComposeResult:
        """Compose the user message widget."""
        yield Static("You", classes="user-label")
        if self.attachment_name:
            yield Static(
                f"🖼 {self.attachment_name}", classes="user-attachment", markup=False
            )
        if self.message_content:
            yield Static(self.message_content, classes="user-content", markup=False)


def widget_for(message: Message):
    """Return the transcript widget for ``message``."""
    if message.is_user:
        return UserMessage(
            content=message.text,
            attachment_name=message.attachment.name if message.attachment else None,
        )
    return BotMessage(content=message.text)
