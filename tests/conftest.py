"""Shared fixtures for the NEET CLI test suite."""

import pytest

from neet_cli.config.providers import ProviderRegistry


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point every test at a throwaway configuration directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("NEET_CLI_CONFIG_DIR", str(config_dir))
    for var in (
        "NEET_PROVIDER",
        "NEET_VERIFICATION_URL",
        "OPENAI_API_KEY",
        "DEEPSEEK_API_KEY",
        "GEMINI_API_KEY",
    ):
        monkeypatch.delenv(var, raising=False)
    ProviderRegistry.clear_cache()
    yield config_dir
    ProviderRegistry.clear_cache()
