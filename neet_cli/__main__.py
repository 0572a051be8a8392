"""Main entry point for the NEET CLI application."""

import logging
import os
import sys

import click

from .config.settings_manager import VALID_GATES
from .core.auth_store import AuthFlagStore
from .core.config_paths import ConfigPaths


def _configure_logging(debug: bool) -> None:
    """Send logs to a file; Textual owns the terminal."""
    logging.basicConfig(
        filename=str(ConfigPaths.get_log_file()),
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.command()
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode and debug logging'
)
@click.option(
    '--provider',
    default=None,
    help='Completion provider to use (e.g. deepseek, openai, gemini)'
)
@click.option(
    '--gate',
    type=click.Choice(sorted(VALID_GATES)),
    default=None,
    help='How the chat is unlocked'
)
@click.option(
    '--verification-url',
    default=None,
    help='Base URL of the email verification service'
)
@click.option(
    '--sign-out',
    is_flag=True,
    help='Forget a previous email verification and exit'
)
def main(
    debug: bool,
    provider: str,
    gate: str,
    verification_url: str,
    sign_out: bool,
) -> None:
    """Launch the NEET AI assistant TUI."""
    _configure_logging(debug)

    if sign_out:
        AuthFlagStore().clear()
        click.echo("Signed out.")
        return

    if debug:
        os.environ['TEXTUAL_DEBUG'] = '1'

    try:
        from .app import NeetApp
        app = NeetApp(
            provider_name=provider,
            gate=gate,
            verification_url=verification_url,
        )
        app.run()

    except KeyboardInterrupt:
        click.echo("\nExiting...")
        sys.exit(0)
    except Exception as e:
        if debug:
            raise
        else:
            click.echo(click.style(f"Error: {e}", fg='red'))
            sys.exit(1)


if __name__ == "__main__":
    main()
