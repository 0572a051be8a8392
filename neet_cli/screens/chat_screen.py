"""Chat screen rendering the session transcript."""

from datetime import datetime
from typing import Optional

import pyperclip
from rich.text import Text
from textual import events, on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.screen import Screen
from textual.widgets import Input, Static, TextArea

from ..core.config_paths import ConfigPaths
from ..core.errors import NeetError, SessionBusyError, ValidationError
from ..core.session_controller import SessionController
from ..session.exporter import TranscriptExporter
from ..session.models import Attachment, Message
from ..ui.chat_widgets import widget_for


class ChatTextArea(TextArea):
    """Custom TextArea that submits on Enter and inserts newline on Shift+Enter."""

    async def _on_key(self, event: events.Key) -> None:
        """Handle Enter / Shift+Enter to support submissions and newlines."""
        key = event.key.lower()

        if key in {"enter", "return"}:
            if getattr(event, "shift", False):
                if self.read_only:
                    return
                event.stop()
                event.prevent_default()
                self.insert("\n")
                return

            event.stop()
            event.prevent_default()
            self.post_message(self.Submitted(self))
            return

        if key in {"ctrl+j", "newline"}:
            if self.read_only:
                return
            event.stop()
            event.prevent_default()
            self.insert("\n")
            return

        await super()._on_key(event)

    class Submitted(TextArea.Changed):
        """Message sent when user presses Enter."""

        pass


class ChatScreen(Screen):
    """Transcript view with message input and image attachment."""

    BASE_TITLE = "NEET AI"

    DEFAULT_INPUT_TITLE = "Ask me anything about NEET... (Enter to send, Shift+Enter for new line)"

    CSS = """
    ChatScreen {
        layout: vertical;
    }

    #chat-container {
        height: 1fr;
        width: 100%;
        padding: 1 2 0 2;
    }

    #chat-log {
        height: 100%;
        width: 100%;
        border: solid $border;
        border-title-align: center;
        padding: 1 2;
        background: $surface;
    }

    #chat-error {
        color: $error;
        margin: 0 2;
        height: auto;
    }

    #attach-input {
        margin: 0 2;
        border: solid $border;
    }

    #chat-input {
        width: 100%;
        height: auto;
        max-height: 10;
        margin: 0 2 1 2;
        border: solid $border;
        background: $panel;
    }

    #chat-input:focus {
        border: solid $primary;
    }

    .info-message {
        color: $text-muted;
        padding: 0 0 1 0;
    }
    """

    BINDINGS = [
        Binding("ctrl+o", "attach_image", "Attach Image"),
        Binding("ctrl+y", "copy_chat", "Copy Chat"),
        Binding("ctrl+e", "export_session", "Export Session"),
        Binding("ctrl+l", "sign_out", "Sign Out"),
    ]

    def __init__(self, controller: SessionController):
        """Initialize the chat screen.

        Args:
            controller: Session controller owning the transcript
        """
        super().__init__()
        self.controller = controller
        self.exporter = TranscriptExporter()
        self.chat_log: Optional[VerticalScroll] = None
        self.chat_input: Optional[ChatTextArea] = None

    def compose(self) -> ComposeResult:
        """Create child widgets for the chat screen."""
        with Container(id="chat-container"):
            with VerticalScroll(id="chat-log") as vs:
                vs.can_focus = True

        yield Static("", id="chat-error")

        attach_input = Input(
            placeholder="Path to an image file (Enter to attach, empty to remove)",
            id="attach-input",
        )
        attach_input.display = False
        yield attach_input

        text_area = ChatTextArea(id="chat-input")
        text_area.show_line_numbers = False
        text_area.border_title = self.DEFAULT_INPUT_TITLE
        yield text_area

    def on_mount(self) -> None:
        """Bind controller callbacks and render the existing transcript."""
        self.chat_log = self.query_one("#chat-log", VerticalScroll)
        self.chat_input = self.query_one("#chat-input", ChatTextArea)

        self.controller.on_message_appended = self.on_message_appended
        self.controller.on_pending_changed = self.on_pending_changed
        self.controller.on_input_cleared = self.on_input_cleared

        self._show_keyboard_shortcuts()
        for message in self.controller.transcript:
            self.on_message_appended(message)

        self._update_chat_title()
        self._update_input_title()
        self.chat_input.focus()

    def on_unmount(self) -> None:
        """Detach controller callbacks."""
        self.controller.on_message_appended = None
        self.controller.on_pending_changed = None
        self.controller.on_input_cleared = None

    def _show_keyboard_shortcuts(self) -> None:
        """Display keyboard shortcuts in the chat log."""
        shortcuts = Text()
        shortcuts.append("Keyboard shortcuts: ", style="dim")
        shortcuts.append("Enter", style="bold")
        shortcuts.append(" send | ", style="dim")
        shortcuts.append("Ctrl+O", style="bold")
        shortcuts.append(" attach image | ", style="dim")
        shortcuts.append("Ctrl+Y", style="bold")
        shortcuts.append(" copy | ", style="dim")
        shortcuts.append("Ctrl+E", style="bold")
        shortcuts.append(" export | ", style="dim")
        shortcuts.append("Ctrl+L", style="bold")
        shortcuts.append(" sign out", style="dim")
        self._mount_info_message(shortcuts)

    @on(ChatTextArea.Submitted, "#chat-input")
    def on_input_submitted(self, event: ChatTextArea.Submitted) -> None:
        """Handle message submission when Enter is pressed."""
        if self.controller.pending:
            self.notify("Still waiting for the previous answer", severity="warning")
            return

        text = self.chat_input.text
        attachment = self.controller.staged_attachment
        self.controller.update_draft(text)
        self.run_worker(self.send_message(text, attachment), exclusive=False)

    async def send_message(self, text: str, attachment: Optional[Attachment]) -> None:
        """Submit through the controller and surface submission errors."""
        try:
            await self.controller.submit(text, attachment)
        except ValidationError as e:
            self._show_error(e.message)
        except SessionBusyError as e:
            self.notify(e.message, severity="warning")
        except NeetError as e:
            self.notify(e.message, severity="error")

    @on(Input.Submitted, "#attach-input")
    def on_attach_submitted(self, event: Input.Submitted) -> None:
        """Stage the image at the entered path."""
        attach_input = self.query_one("#attach-input", Input)
        path = event.value.strip()
        if not path:
            self.controller.clear_staged_attachment()
        else:
            try:
                self.controller.stage_attachment(Attachment.from_path(path))
            except ValidationError as e:
                self._show_error(e.message)
                return
        self._show_error("")
        attach_input.value = ""
        attach_input.display = False
        self._update_input_title()
        self.chat_input.focus()

    # Controller callbacks

    def on_message_appended(self, message: Message) -> None:
        """Mount a widget for a new transcript entry."""
        self._show_error("")
        self.chat_log.mount(widget_for(message))
        self.chat_log.scroll_end(animate=False)

    def on_pending_changed(self, pending: bool) -> None:
        """Reflect the in-flight state in the titles."""
        self._update_chat_title()
        self.chat_input.read_only = pending

    def on_input_cleared(self) -> None:
        """Clear the input buffer and staged attachment display."""
        self.chat_input.clear()
        self._update_input_title()

    def _update_chat_title(self) -> None:
        """Update the chat log border title with status information."""
        title_parts = [self.BASE_TITLE, self.controller.provider.label]
        if self.controller.pending:
            title_parts.append("⏳ Typing...")
        self.chat_log.border_title = " • ".join(title_parts)

    def _update_input_title(self) -> None:
        staged = self.controller.staged_attachment
        if staged:
            self.chat_input.border_title = f"🖼 {staged.name} attached"
        else:
            self.chat_input.border_title = self.DEFAULT_INPUT_TITLE

    def _show_error(self, message: str) -> None:
        self.query_one("#chat-error", Static).update(message)

    def _mount_info_message(self, content) -> None:
        """Mount an info message to the chat log.

        Args:
            content: Rich renderable or markup string
        """
        info_widget = Static(content, classes="info-message")
        self.chat_log.mount(info_widget)
        self.chat_log.scroll_end(animate=False)

    # Actions

    def action_attach_image(self) -> None:
        """Show the attachment path input."""
        attach_input = self.query_one("#attach-input", Input)
        attach_input.display = True
        staged = self.controller.staged_attachment
        attach_input.value = str(staged.path) if staged else ""
        attach_input.focus()

    def action_copy_chat(self) -> None:
        """Copy the entire transcript to clipboard."""
        transcript = self.controller.transcript
        if not transcript:
            self.notify("No messages to copy", title="Info", severity="information")
            return

        try:
            pyperclip.copy(self.exporter.to_plain_text(transcript))
            self.notify(f"Copied {len(transcript)} messages to clipboard", title="Success")
        except pyperclip.PyperclipException as e:
            self.notify(f"Failed to copy: {e}", title="Error", severity="error")

    def action_export_session(self) -> None:
        """Export the current transcript to a markdown file."""
        transcript = self.controller.transcript
        if not transcript:
            self.notify("No messages to export", title="Info", severity="information")
            return

        try:
            stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
            output_file = ConfigPaths.get_exports_dir() / f"session_{stamp}.md"
            self.exporter.export_markdown(transcript, output_file)
            self.notify(f"Session exported to {output_file}", title="Export Complete", timeout=10)
        except (IOError, OSError) as e:
            self.notify(f"Failed to export: {e}", title="Error", severity="error")

    def action_sign_out(self) -> None:
        """Sign out and return to the access gate."""
        self.app.sign_out()
