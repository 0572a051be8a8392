"""Durable "authenticated" flag backing the email verification gate."""

import logging
from pathlib import Path
from typing import Optional

from .config_paths import ConfigPaths

logger = logging.getLogger(__name__)


class AuthFlagStore:
    """Marker-file persistence for the authenticated flag.

    The flag has a single writer (the access gate), so no locking is done.
    """

    def __init__(self, flag_file: Optional[Path] = None):
        """Initialize the store.

        Args:
            flag_file: Marker file location (default: config dir/authenticated)
        """
        self.flag_file = Path(flag_file) if flag_file else ConfigPaths.get_auth_flag_file()

    def is_set(self) -> bool:
        """Return True when the authenticated flag is present."""
        return self.flag_file.exists()

    def set(self) -> None:
        """Persist the authenticated flag.

        Raises:
            OSError: If the marker file cannot be written
        """
        self.flag_file.parent.mkdir(parents=True, exist_ok=True)
        self.flag_file.write_text("true\n", encoding="utf-8")
        logger.debug("Authenticated flag written to %s", self.flag_file)

    def clear(self) -> None:
        """Remove the authenticated flag if present."""
        try:
            self.flag_file.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning(f"Could not remove authenticated flag: {e}")
            return
        logger.debug("Authenticated flag cleared")
