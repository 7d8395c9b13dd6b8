"""Disk persistence for the live library and exported archives.

- Live library: ``<data_dir>/library.json``, the plain wire ``data`` object.
- Archives:     ``<backup_dir>/prompt-vault-backup_YYYY-MM-DD_HHMM.json``.

Writes go to a sibling temp file first and are moved into place with
``os.replace``, so a crash mid-write leaves the previous file intact.

Usage
-----
>>> storage = LibraryStorage()          # directories from settings
>>> state = storage.load_state()
>>> path = storage.write_archive(export_archive(state.snapshot()))
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from promptvault.core.backup.codec import archive_filename
from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.settings import get_logger, load_settings

from .state import LibraryState

log = get_logger(__name__)


class LibraryFileError(RuntimeError):
    """The persisted library file exists but cannot be read back."""


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    with tmp.open("w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


class LibraryStorage:
    """Read and write the library and its backups under configured directories."""

    def __init__(self, data_dir: Path | None = None, backup_dir: Path | None = None) -> None:
        cfg = load_settings()
        self.data_dir: Path = data_dir if data_dir is not None else cfg.data_dir
        self.backup_dir: Path = backup_dir if backup_dir is not None else cfg.backup_dir

    @property
    def library_path(self) -> Path:
        return self.data_dir / "library.json"

    # ------------------------------- Library --------------------------------

    def load(self) -> DataSnapshot:
        """Return the persisted library, or an empty one if none exists yet."""
        path = self.library_path
        if not path.exists():
            return DataSnapshot()
        try:
            with path.open("r", encoding="utf-8") as f:
                return DataSnapshot.from_wire(json.load(f))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise LibraryFileError(f"Cannot read library file {path}: {exc}") from exc

    def load_state(self) -> LibraryState:
        """Load the persisted library into a fresh `LibraryState`."""
        return LibraryState(self.load())

    def save(self, data: DataSnapshot) -> Path:
        """Persist ``data`` as the live library and return the file path."""
        path = self.library_path
        _atomic_write(path, json.dumps(data.to_wire(), ensure_ascii=False, indent=2) + "\n")
        log.debug("library saved to %s", path)
        return path

    # ------------------------------- Archives -------------------------------

    def write_archive(self, text: str, path: Path | None = None) -> Path:
        """Write archive ``text`` to ``path`` or a timestamped file in the backup dir."""
        target = path if path is not None else self.backup_dir / archive_filename(datetime.now())
        _atomic_write(target, text)
        log.info("archive written to %s", target)
        return target


__all__ = ["LibraryFileError", "LibraryStorage"]
