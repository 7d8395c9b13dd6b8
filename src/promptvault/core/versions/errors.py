"""Version store failure taxonomy.

Each error ends only the operation that produced it; other snapshots and the
live document are left as they were.
"""

from __future__ import annotations


class VersionError(Exception):
    """Base class for rejected version-history operations."""

    kind: str = "version_error"


class BaselineImmutable(VersionError):
    """Version 1 of a lineage cannot be deleted."""

    kind = "baseline_immutable"

    def __init__(self, snapshot_id: str) -> None:
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot {snapshot_id!r} is the baseline version and cannot be deleted.")


class VersionNotFound(VersionError):
    """A document or snapshot id does not exist in the requested lineage."""

    kind = "not_found"


class DuplicateVersionName(VersionError):
    """A named version already exists in this lineage (case-insensitive)."""

    kind = "duplicate_name"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"A version named {name!r} already exists for this prompt.")


__all__ = ["VersionError", "BaselineImmutable", "VersionNotFound", "DuplicateVersionName"]
