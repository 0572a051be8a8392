"""Centralized configuration path management for NEET CLI.

This module provides a single source of truth for all configuration and data
file paths, following XDG Base Directory specification.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Environment variable that relocates the whole configuration directory
CONFIG_DIR_ENV = "NEET_CLI_CONFIG_DIR"


class ConfigPaths:
    """Centralized configuration path management.

    All NEET CLI configuration and state files are stored in
    ~/.config/neet-cli/ unless NEET_CLI_CONFIG_DIR points elsewhere.
    """

    # XDG-compliant base directory
    BASE_DIR = Path.home() / ".config" / "neet-cli"

    # XDG data directory for user-facing exports
    DATA_DIR = Path.home() / ".local" / "share" / "neet-cli"

    @classmethod
    def _resolve_base_dir(cls) -> Path:
        override = os.environ.get(CONFIG_DIR_ENV)
        if override:
            return Path(override).expanduser()
        return cls.BASE_DIR

    @classmethod
    def get_base_dir(cls) -> Path:
        """Get base configuration directory, creating if needed.

        Returns:
            Path to ~/.config/neet-cli/ (or the override directory)
        """
        base_dir = cls._resolve_base_dir()
        base_dir.mkdir(parents=True, exist_ok=True)
        return base_dir

    @classmethod
    def get_config_file(cls) -> Path:
        """Get path to main configuration file.

        Returns:
            Path to config.json
        """
        return cls.get_base_dir() / "config.json"

    @classmethod
    def get_providers_file(cls) -> Path:
        """Get path to the user provider definitions.

        Returns:
            Path to providers.yaml
        """
        return cls.get_base_dir() / "providers.yaml"

    @classmethod
    def get_auth_flag_file(cls) -> Path:
        """Get path to the durable "authenticated" flag.

        The flag is a marker file: its presence means the email
        verification step was completed on this machine.

        Returns:
            Path to the authenticated marker
        """
        return cls.get_base_dir() / "authenticated"

    @classmethod
    def get_log_file(cls) -> Path:
        """Get path to the application log file.

        Returns:
            Path to neet-cli.log
        """
        return cls.get_base_dir() / "neet-cli.log"

    @classmethod
    def get_exports_dir(cls) -> Path:
        """Get path to the transcript export directory, creating if needed.

        Returns:
            Path to ~/.local/share/neet-cli/exports/
        """
        exports_dir = cls.DATA_DIR / "exports"
        exports_dir.mkdir(parents=True, exist_ok=True)
        return exports_dir
