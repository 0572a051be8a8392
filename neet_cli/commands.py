"""Command palette providers for NEET CLI.

Adds NEET CLI actions to the Textual command palette while preserving
Textual's default commands (quit, theme, show/hide keys, etc.).
"""

from functools import partial

from textual.command import Hit, Hits, Provider

from .config.providers import ProviderRegistry


class ChatCommandProvider(Provider):
    """Command provider for chat screen actions.

    Provides commands for:
    - Attaching an image
    - Copying and exporting the transcript
    - Signing out
    """

    def _commands(self):
        return [
            ("Attach Image", "Attach an image to the next message", "attach_image"),
            ("Copy Transcript", "Copy the conversation to the clipboard", "copy_chat"),
            ("Export Transcript", "Save the conversation as markdown", "export_session"),
            ("Sign Out", "Forget the verification and lock the chat", "sign_out"),
        ]

    def _run_screen_action(self, action: str) -> None:
        """Run ``action_<action>`` on the active screen if it has one."""
        method = getattr(self.screen, f"action_{action}", None)
        if method is not None:
            method()

    async def discover(self) -> Hits:
        """Provide default commands when palette first opens (empty query).

        Yields:
            All chat commands for discoverability
        """
        for name, help_text, action in self._commands():
            yield Hit(1, name, partial(self._run_screen_action, action), help=help_text)

    async def search(self, query: str) -> Hits:
        """Search for chat commands matching the query.

        Args:
            query: The search query from command palette

        Yields:
            Command hits matching the query, scored by relevance
        """
        matcher = self.matcher(query)
        for name, help_text, action in self._commands():
            score = matcher.match(name)
            if score > 0:
                yield Hit(
                    score,
                    matcher.highlight(name),
                    partial(self._run_screen_action, action),
                    help=help_text,
                )


class ProviderCommandProvider(Provider):
    """Command provider for switching the completion provider."""

    def _commands(self):
        return [
            (f"Use Provider: {provider.label}", provider.name)
            for provider in ProviderRegistry.all_providers()
        ]

    def _use_provider(self, name: str) -> None:
        self.app.action_use_provider(name)

    async def discover(self) -> Hits:
        """Provide provider commands when palette first opens.

        Yields:
            One command per known provider
        """
        for title, name in self._commands():
            yield Hit(
                1,
                title,
                partial(self._use_provider, name),
                help=f"Send future messages to {name}",
            )

    async def search(self, query: str) -> Hits:
        """Search for provider commands.

        Args:
            query: The search query from command palette

        Yields:
            Provider command hits matching the query
        """
        matcher = self.matcher(query)
        for title, name in self._commands():
            score = matcher.match(title)
            if score > 0:
                yield Hit(
                    score,
                    matcher.highlight(title),
                    partial(self._use_provider, name),
                    help=f"Send future messages to {name}",
                )
