"""Centralized completion provider configuration for the NEET CLI application."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from neet_cli.config.settings_manager import get_setting
from neet_cli.core.config_paths import ConfigPaths

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Endpoint, model and auth conventions for one completion provider.

    Providers only differ in these values; the request/response handling in
    the backend adapter is the same for every provider.
    """

    name: str
    endpoint_url: str
    model_name: str
    display_name: str = ""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    auth_scheme: str = "Bearer"
    auth_header: str = "Authorization"
    cache_bust: bool = False
    api_key_env: Optional[str] = None

    @property
    def label(self) -> str:
        """Return the name shown in the UI."""

        return self.display_name or self.name

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the provider's environment variable."""

        if not self.api_key_env:
            return None
        value = os.environ.get(self.api_key_env, "").strip()
        return value or None


_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def _parse_bool(value: Any) -> bool:
    """Accept YAML booleans and their common quoted spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"Not a boolean: {value!r}")


# Field name -> cast function for user-supplied provider definitions
_FIELD_TYPES: Dict[str, Any] = {
    "endpoint_url": str,
    "model_name": str,
    "display_name": str,
    "temperature": float,
    "max_tokens": int,
    "auth_scheme": str,
    "auth_header": str,
    "cache_bust": _parse_bool,
    "api_key_env": str,
}


def _load_yaml_config(path: Path) -> Dict[str, Any]:
    """Loads and returns content of a YAML file."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        LOGGER.warning(f"Failed to load provider file: {path}", exc_info=True)
        return {}
    return data if isinstance(data, dict) else {}


def _parse_provider(
    name: str, raw: Any, base: Optional[ProviderConfig], source: str
) -> Optional[ProviderConfig]:
    """Build a ProviderConfig from a YAML mapping, layered over ``base``."""
    if not isinstance(raw, dict):
        LOGGER.warning("Invalid provider structure for '%s' in %s", name, source)
        return None

    values: Dict[str, Any] = {}
    for key, cast_func in _FIELD_TYPES.items():
        if key not in raw or raw[key] is None:
            continue
        try:
            values[key] = cast_func(raw[key])
        except (TypeError, ValueError):
            LOGGER.warning(
                "Invalid type for field '%s' in provider '%s' (%s)", key, name, source
            )

    if base is not None:
        return replace(base, **values)

    if "endpoint_url" not in values or "model_name" not in values:
        LOGGER.warning(
            "Provider '%s' in %s needs endpoint_url and model_name", name, source
        )
        return None
    return ProviderConfig(name=name, **values)


class ProviderRegistry:
    """Registry providing a single source of truth for completion providers."""

    OPENAI = ProviderConfig(
        name="openai",
        display_name="OpenAI (gpt-3.5-turbo)",
        endpoint_url="https://api.openai.com/v1/chat/completions",
        model_name="gpt-3.5-turbo",
        cache_bust=True,
        api_key_env="OPENAI_API_KEY",
    )

    DEEPSEEK = ProviderConfig(
        name="deepseek",
        display_name="DeepSeek Chat",
        endpoint_url="https://api.deepseek.com/v1/chat/completions",
        model_name="deepseek-chat",
        temperature=0.7,
        max_tokens=2000,
        api_key_env="DEEPSEEK_API_KEY",
    )

    GEMINI = ProviderConfig(
        name="gemini",
        display_name="Gemini Flash (OpenAI-compatible)",
        endpoint_url=(
            "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"
        ),
        model_name="gemini-flash-latest",
        temperature=0.7,
        max_tokens=2048,
        api_key_env="GEMINI_API_KEY",
    )

    _BUILTIN: Tuple[ProviderConfig, ...] = (DEEPSEEK, OPENAI, GEMINI)

    DEFAULT = DEEPSEEK

    @classmethod
    def _indexed_providers(cls) -> Dict[str, ProviderConfig]:
        """Return built-in providers merged with user definitions."""

        if hasattr(cls, "_cached_providers"):
            return cls._cached_providers

        providers = {provider.name: provider for provider in cls._BUILTIN}

        user_file = ConfigPaths.get_providers_file()
        user_data = _load_yaml_config(user_file)
        for name, raw in (user_data.get("providers") or {}).items():
            name = str(name)
            provider = _parse_provider(name, raw, providers.get(name), str(user_file))
            if provider:
                providers[name] = provider

        cls._cached_providers = providers
        return providers

    @classmethod
    def clear_cache(cls) -> None:
        """Forget loaded user providers so the next lookup re-reads the file."""

        if hasattr(cls, "_cached_providers"):
            del cls._cached_providers

    @classmethod
    def all_providers(cls) -> Tuple[ProviderConfig, ...]:
        """Return all known providers, built-ins first."""

        return tuple(cls._indexed_providers().values())

    @classmethod
    def names(cls) -> List[str]:
        """Return the names of all known providers."""

        return list(cls._indexed_providers())

    @classmethod
    def get(cls, name: Optional[str]) -> Optional[ProviderConfig]:
        """Return configuration for ``name`` if available."""

        if not name:
            return None
        return cls._indexed_providers().get(name)

    @classmethod
    def validate_name(cls, name: Optional[str]) -> Tuple[bool, Optional[str]]:
        """Validate ``name`` returning ``(is_valid, error_message)``."""

        if not name:
            return False, "Provider name cannot be empty"
        if cls.get(name) is None:
            return False, f"Unknown provider: {name}"
        return True, None


def get_default_provider() -> ProviderConfig:
    """Return the provider configured for the application."""

    env_provider = os.environ.get("NEET_PROVIDER")
    if env_provider:
        provider = ProviderRegistry.get(env_provider)
        if provider:
            return provider
        LOGGER.warning("Invalid NEET_PROVIDER=%s, falling back to defaults", env_provider)

    configured = ProviderRegistry.get(get_setting("provider"))
    if configured:
        return configured

    return ProviderRegistry.DEFAULT
