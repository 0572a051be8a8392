"""Tests for the durable authenticated flag."""

from unittest.mock import patch

from neet_cli.core.auth_store import AuthFlagStore
from neet_cli.core.config_paths import ConfigPaths


def test_default_location():
    store = AuthFlagStore()

    assert store.flag_file == ConfigPaths.get_auth_flag_file()


def test_set_and_clear(tmp_path):
    store = AuthFlagStore(tmp_path / "nested" / "authenticated")
    assert store.is_set() is False

    store.set()
    assert store.is_set() is True
    assert store.flag_file.read_text(encoding="utf-8") == "true\n"

    store.clear()
    assert store.is_set() is False


def test_clear_when_missing(tmp_path):
    store = AuthFlagStore(tmp_path / "authenticated")

    store.clear()

    assert store.is_set() is False


def test_clear_failure_is_logged(tmp_path, caplog):
    store = AuthFlagStore(tmp_path / "authenticated")
    store.set()

    with patch("pathlib.Path.unlink", side_effect=PermissionError("denied")):
        store.clear()

    assert store.is_set() is True
    assert "Could not remove authenticated flag" in caplog.text


def test_flag_survives_new_store(tmp_path):
    AuthFlagStore(tmp_path / "authenticated").set()

    assert AuthFlagStore(tmp_path / "authenticated").is_set() is True
