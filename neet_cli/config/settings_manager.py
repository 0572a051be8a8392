"""Centralized settings management for NEET CLI.

Settings Schema:
    {
        "provider": str,             # Provider name (e.g., "deepseek", "openai")
        "gate": str,                 # Access gate variant ("api_key" or "email")
        "verification_url": str,     # Base URL of the verification service
        "request_timeout": float,    # Optional completion timeout in seconds
        "theme": str,                # Theme name (e.g., "textual-dark", "nord")
    }
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from neet_cli.core.config_paths import ConfigPaths

LOGGER = logging.getLogger(__name__)

# Default theme if none is saved
DEFAULT_THEME = "textual-dark"

# Access gate variants
GATE_API_KEY = "api_key"
GATE_EMAIL = "email"
VALID_GATES = {GATE_API_KEY, GATE_EMAIL}
DEFAULT_GATE = GATE_API_KEY

# Environment override for the verification service base URL
VERIFICATION_URL_ENV = "NEET_VERIFICATION_URL"

# Valid Textual theme names (all built-in themes)
VALID_THEMES = {
    "textual-dark",
    "textual-light",
    "nord",
    "gruvbox",
    "dracula",
    "tokyo-night",
    "catppuccin-mocha",
    "catppuccin-latte",
    "monokai",
    "solarized-light",
    "flexoki",
    "textual-ansi",
}


def load_config_data() -> Dict[str, Any]:
    """Loads configuration data from config.json."""
    config_file = ConfigPaths.get_config_file()
    if not config_file.exists():
        return {}
    try:
        content = config_file.read_text(encoding="utf-8")
        if not content.strip():
            return {}
        data = json.loads(content)
    except (json.JSONDecodeError, IOError) as e:
        LOGGER.warning(
            f"Failed to load config file: {e}. Using empty configuration.",
            exc_info=True,
        )
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("Config file does not contain an object. Ignoring it.")
        return {}
    return data


def _save_config_data(data: Dict[str, Any]) -> None:
    """Saves the configuration data to config.json."""
    config_file = ConfigPaths.get_config_file()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(json.dumps(data, indent=4), encoding="utf-8")
    except IOError as e:
        LOGGER.error(f"Failed to save config file: {e}", exc_info=True)


def get_setting(key: str, default: Any = None) -> Any:
    """Retrieve a setting from the config file."""
    data = load_config_data()
    return data.get(key, default)


def set_settings(updates: Dict[str, Any]) -> None:
    """Load existing settings, apply updates, and save back."""
    data = load_config_data()
    data.update(updates)
    _save_config_data(data)


def validate_theme(theme: str) -> bool:
    """Check if a theme name is valid.

    Args:
        theme: Theme name to validate

    Returns:
        True if theme is a valid Textual theme name
    """
    return theme in VALID_THEMES


def get_theme_setting() -> str:
    """Retrieve the saved theme setting, falling back to default.

    Returns:
        A valid theme name. If the saved theme is invalid, returns DEFAULT_THEME.
    """
    theme = get_setting("theme", DEFAULT_THEME)
    return theme if validate_theme(theme) else DEFAULT_THEME


def get_gate_setting() -> str:
    """Retrieve the configured access gate variant.

    Returns:
        "api_key" or "email". Unknown values fall back to DEFAULT_GATE.
    """
    gate = get_setting("gate", DEFAULT_GATE)
    if gate not in VALID_GATES:
        LOGGER.warning("Unknown gate '%s' in configuration, using '%s'", gate, DEFAULT_GATE)
        return DEFAULT_GATE
    return gate


def get_verification_url() -> Optional[str]:
    """Resolve the verification service base URL.

    The environment variable wins over config.json so deployments can point
    at a different service without touching the user's settings.

    Returns:
        Base URL without trailing slash, or None when not configured
    """
    url = os.environ.get(VERIFICATION_URL_ENV) or get_setting("verification_url")
    if not url:
        return None
    return str(url).rstrip("/")


def get_request_timeout() -> Optional[float]:
    """Retrieve the optional completion request timeout.

    Returns:
        Timeout in seconds, or None for no timeout
    """
    value = get_setting("request_timeout")
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        LOGGER.warning("Invalid request_timeout '%s' in configuration, ignoring", value)
        return None
    return timeout if timeout > 0 else None
