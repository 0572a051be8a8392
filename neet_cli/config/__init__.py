"""Configuration utilities for the NEET CLI application."""

from .providers import ProviderConfig, ProviderRegistry, get_default_provider
from .settings_manager import (
    get_setting,
    set_settings,
    get_theme_setting,
    get_gate_setting,
    get_verification_url,
    get_request_timeout,
    load_config_data,
    validate_theme,
    DEFAULT_THEME,
    DEFAULT_GATE,
    VALID_THEMES,
    VALID_GATES,
)

__all__ = [
    # Provider configuration
    "ProviderConfig",
    "ProviderRegistry",
    "get_default_provider",
    # Settings management
    "get_setting",
    "set_settings",
    "get_theme_setting",
    "get_gate_setting",
    "get_verification_url",
    "get_request_timeout",
    "load_config_data",
    "validate_theme",
    "DEFAULT_THEME",
    "DEFAULT_GATE",
    "VALID_THEMES",
    "VALID_GATES",
]
