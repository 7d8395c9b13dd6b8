"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `PROMPTVAULT_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    data_dir : Path
        Directory holding the live `library.json`; maps from `PROMPTVAULT_DATA_DIR`.
    backup_dir : Path
        Default destination for exported archives; maps from `PROMPTVAULT_BACKUP_DIR`.
    archive_indent : int
        Pretty-print indentation of exported archives. Purely cosmetic: the
        checksum never covers whitespace. Maps from `PROMPTVAULT_ARCHIVE_INDENT`.
    """

    environment: EnvName = Field(default="dev", alias="PROMPTVAULT_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    data_dir: Path = Field(default=Path("data"), alias="PROMPTVAULT_DATA_DIR")
    backup_dir: Path = Field(default=Path("backups"), alias="PROMPTVAULT_BACKUP_DIR")
    archive_indent: int = Field(default=2, ge=0, le=8, alias="PROMPTVAULT_ARCHIVE_INDENT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    @property
    def library_path(self) -> Path:
        """Location of the persisted live data set."""
        return self.data_dir / "library.json"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Kept behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("PROMPTVAULT_ENV", "dev")
    return Settings()


# Ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "promptvault") -> logging.Logger:
    """Return a process-global logger configured to the current log level.

    The level is re-read through `load_settings()` so a cache clear in tests
    takes effect for loggers created afterwards.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
