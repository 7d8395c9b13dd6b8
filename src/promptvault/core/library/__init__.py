"""Live library state handle and its on-disk persistence."""

from __future__ import annotations

from .state import CommitTrace, LibraryState, StaleStateError
from .storage import LibraryFileError, LibraryStorage

__all__ = ["CommitTrace", "LibraryFileError", "LibraryState", "LibraryStorage", "StaleStateError"]
