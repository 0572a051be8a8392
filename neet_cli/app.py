"""Main application module for NEET CLI."""

import logging
from typing import List, Optional

from dotenv import load_dotenv
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .config.providers import ProviderConfig, ProviderRegistry, get_default_provider
from .config.settings_manager import (
    get_gate_setting,
    get_request_timeout,
    get_theme_setting,
    get_verification_url,
    set_settings,
)
from .core.access_gate import AccessGate, GateVariant
from .core.auth_store import AuthFlagStore
from .core.session_controller import SessionController
from .screens.chat_screen import ChatScreen
from .screens.gate_screen import GateScreen
from .services.backend_adapter import BackendAdapter
from .services.verification_service import VerificationClient

logger = logging.getLogger(__name__)


def get_chat_commands_provider():
    """Lazy load chat command provider.

    Returns:
        ChatCommandProvider class
    """
    from .commands import ChatCommandProvider

    return ChatCommandProvider


def get_provider_commands_provider():
    """Lazy load provider switching command provider.

    Returns:
        ProviderCommandProvider class
    """
    from .commands import ProviderCommandProvider

    return ProviderCommandProvider


class NeetApp(App):
    """NEET AI terminal assistant."""

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+t", "toggle_dark", "Toggle Dark Mode"),
    ]

    COMMANDS = App.COMMANDS | {
        get_chat_commands_provider,
        get_provider_commands_provider,
    }

    TITLE = "NEET AI"
    SUB_TITLE = "An AI Assistant for your NEET Exams"

    def __init__(
        self,
        provider_name: Optional[str] = None,
        gate: Optional[str] = None,
        verification_url: Optional[str] = None,
    ):
        """Initialize the application.

        Args:
            provider_name: Provider to use instead of the configured one
            gate: Gate variant ("api_key" or "email") instead of the configured one
            verification_url: Verification service base URL override
        """
        super().__init__()

        self.theme = get_theme_setting()
        self.startup_warnings: List[str] = []

        # Pick up provider keys from .env before resolving credentials
        load_dotenv()

        self.provider = self._resolve_provider(provider_name)
        self.gate = self._build_gate(gate or get_gate_setting(), verification_url)
        self.adapter = BackendAdapter(timeout=get_request_timeout())
        self.controller = SessionController(self.gate, self.adapter, self.provider)

    @property
    def theme(self) -> str:
        """Get current theme."""
        return super().theme

    @theme.setter
    def theme(self, value: str) -> None:
        """Set theme and persist to settings.

        Raises:
            IOError, OSError: If saving the theme preference fails
        """
        App.theme.__set__(self, value)
        set_settings({"theme": value})

    def _resolve_provider(self, provider_name: Optional[str]) -> ProviderConfig:
        if provider_name:
            is_valid, error = ProviderRegistry.validate_name(provider_name)
            if is_valid:
                return ProviderRegistry.get(provider_name)
            self.startup_warnings.append(f"{error}. Using default instead.")
        return get_default_provider()

    def _build_gate(self, variant_name: str, verification_url: Optional[str]) -> AccessGate:
        """Create the access gate for the configured variant."""
        variant = GateVariant(variant_name)
        client = None

        if variant is GateVariant.EMAIL:
            url = verification_url or get_verification_url()
            if url:
                client = VerificationClient(url)
            else:
                self.startup_warnings.append(
                    "Email verification needs a verification URL. Falling back to API key entry."
                )
                variant = GateVariant.API_KEY

        return AccessGate(
            variant=variant,
            flag_store=AuthFlagStore(),
            verification_client=client,
            fallback_credential=self.provider.resolve_api_key(),
        )

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        yield Header()
        yield Footer()

    def on_mount(self) -> None:
        """Show the gate or, when already unlocked, the chat."""
        for warning in self.startup_warnings:
            self.notify(warning, severity="warning")

        if self.gate.is_unlocked:
            self.push_screen(ChatScreen(self.controller))
        else:
            self.push_screen(GateScreen(self.gate))

    def show_chat(self) -> None:
        """Replace the gate screen with the chat screen."""
        self.switch_screen(ChatScreen(self.controller))

    def sign_out(self) -> None:
        """Sign out, discard the session and return to the gate."""
        self.gate.sign_out()
        self.controller.reset()
        self.switch_screen(GateScreen(self.gate))
        self.notify("Signed out", severity="information")

    def action_use_provider(self, name: str) -> None:
        """Switch the completion provider and remember the choice.

        Args:
            name: Provider name
        """
        is_valid, error = ProviderRegistry.validate_name(name)
        if not is_valid:
            self.notify(error, severity="error")
            return

        provider = ProviderRegistry.get(name)

        self.provider = provider
        self.controller.provider = provider
        self.gate.fallback_credential = provider.resolve_api_key()
        set_settings({"provider": name})
        logger.info("Switched provider to %s", name)
        self.notify(f"Using {provider.label}", severity="information")

    def action_toggle_dark(self) -> None:
        """Toggle dark mode (theme property setter handles persistence)."""
        new_theme = "textual-dark" if self.theme == "textual-light" else "textual-light"
        self.theme = new_theme
