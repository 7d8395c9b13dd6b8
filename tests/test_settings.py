"""Typed smoke tests for the settings loader.

These tests verify four guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) Directory settings resolve to the library/backup locations.
4) `get_logger()` respects the configured LOG_LEVEL when constructing loggers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from promptvault.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_env_overrides_with_cache_clear(monkeypatch: Any) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("PROMPTVAULT_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PROMPTVAULT_ARCHIVE_INDENT", "4")

    load_settings.cache_clear()
    s = load_settings()

    assert s.environment == "prod"
    assert not s.is_dev and not s.is_test
    assert s.log_level == "DEBUG"
    assert s.archive_indent == 4


def test_directories_come_from_env(tmp_path: Path) -> None:
    """The autouse fixture points both directories into `tmp_path`."""
    s = load_settings()
    assert s.is_test
    assert s.data_dir == tmp_path / "data"
    assert s.backup_dir == tmp_path / "backups"
    assert s.library_path == tmp_path / "data" / "library.json"


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`."""
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    load_settings.cache_clear()
    _ = load_settings()

    logger = get_logger("promptvault.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one StreamHandler to be attached."
    assert logger.propagate is False
