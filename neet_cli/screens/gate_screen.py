"""Unlock screen shown while the access gate is locked."""

from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Input, Static

from ..core.access_gate import AccessGate, GateVariant, VerificationStep
from ..core.errors import NeetError


class GateScreen(Screen):
    """API key or email verification entry."""

    TITLE_TEXT = "Welcome to NEET AI - An AI Assistant for your NEET Exams"

    CSS = """
    GateScreen {
        align: center middle;
    }

    #gate-container {
        width: 70;
        height: auto;
        padding: 2;
        border: solid $border;
        background: $surface;
    }

    #gate-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }

    #gate-container Input {
        width: 100%;
        margin-bottom: 1;
    }

    #gate-container Button {
        width: 100%;
        margin-bottom: 1;
    }

    #gate-error {
        color: $error;
    }
    """

    BINDINGS = [
        Binding("escape", "app.quit", "Quit"),
    ]

    def __init__(self, gate: AccessGate):
        """Initialize the gate screen.

        Args:
            gate: The access gate this screen drives
        """
        super().__init__()
        self.gate = gate

    def compose(self) -> ComposeResult:
        """Create child widgets for the gate screen."""
        with Container(id="gate-container"):
            yield Static(self.TITLE_TEXT, id="gate-title")
            if self.gate.variant is GateVariant.API_KEY:
                yield Input(
                    placeholder="Enter your API Key", password=True, id="api-key-input"
                )
                yield Button("Unlock Chat", id="btn-unlock", variant="primary")
            else:
                yield Input(placeholder="Enter your email address", id="email-input")
                yield Button("Send code", id="btn-send-code", variant="primary")
                yield Input(
                    placeholder="4-character code", max_length=4, id="code-input"
                )
                yield Button("Verify", id="btn-verify", variant="primary")
            yield Static("", id="gate-error")

    def on_mount(self) -> None:
        """Show the widgets for the current verification step."""
        self._sync_step()

    def _sync_step(self) -> None:
        if self.gate.variant is not GateVariant.EMAIL:
            return
        entering_code = self.gate.step is VerificationStep.ENTER_CODE
        self.query_one("#code-input", Input).display = entering_code
        self.query_one("#btn-verify", Button).display = entering_code
        if entering_code:
            self.query_one("#btn-send-code", Button).label = "Resend code"
            self.query_one("#code-input", Input).focus()

    def _show_error(self, message: str) -> None:
        self.query_one("#gate-error", Static).update(message)

    def _set_busy(self, busy: bool) -> None:
        for button in self.query(Button):
            button.disabled = busy

    @on(Button.Pressed, "#btn-unlock")
    @on(Input.Submitted, "#api-key-input")
    def on_unlock(self) -> None:
        """Unlock with the entered API key."""
        secret = self.query_one("#api-key-input", Input).value
        try:
            self.gate.request_unlock_with_secret(secret)
        except NeetError as e:
            self._show_error(e.message)
            return
        self._show_error("")
        self.app.show_chat()

    @on(Button.Pressed, "#btn-send-code")
    @on(Input.Submitted, "#email-input")
    def on_send_code(self) -> None:
        """Request a verification code for the entered email."""
        if self.gate.busy:
            return
        email = self.query_one("#email-input", Input).value
        self.run_worker(self.send_code(email))

    @on(Button.Pressed, "#btn-verify")
    @on(Input.Submitted, "#code-input")
    def on_verify(self) -> None:
        """Check the entered verification code."""
        if self.gate.busy:
            return
        email = self.query_one("#email-input", Input).value
        code = self.query_one("#code-input", Input).value
        self.run_worker(self.verify_code(email, code))

    async def send_code(self, email: str) -> None:
        """Run the send-code exchange and update the form."""
        if self.gate.busy:
            return
        self._set_busy(True)
        try:
            await self.gate.send_code(email)
        except NeetError as e:
            self._show_error(e.message)
            return
        finally:
            self._set_busy(False)
        self._show_error("")
        self.notify(f"Verification code sent to {self.gate.state.email}")
        self._sync_step()

    async def verify_code(self, email: str, code: str) -> None:
        """Run the verification exchange and open the chat on success."""
        if self.gate.busy:
            return
        self._set_busy(True)
        try:
            await self.gate.verify_code(email, code)
        except NeetError as e:
            self._show_error(e.message)
            return
        finally:
            self._set_busy(False)
        self._show_error("")
        self.app.show_chat()
