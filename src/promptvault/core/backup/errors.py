"""Import failure taxonomy.

All three kinds are terminal for the import attempt that raised them: nothing
is merged and the live library stays untouched.
"""

from __future__ import annotations


class ArchiveImportError(Exception):
    """Base class for every reason an archive cannot be imported."""

    kind: str = "import_error"


class MalformedEnvelope(ArchiveImportError):
    """The file is not an archive: bad JSON, or missing/mistyped fields."""

    kind = "malformed_envelope"


class UnsupportedVersion(ArchiveImportError):
    """The archive declares a format version this build cannot read."""

    kind = "unsupported_version"

    def __init__(self, found: object, supported: frozenset[int]) -> None:
        self.found = found
        self.supported = supported
        expected = ", ".join(str(v) for v in sorted(supported))
        super().__init__(f"Unsupported archive version: {found!r}. Expected {expected}.")


class IntegrityCheckFailed(ArchiveImportError):
    """The recomputed checksum of ``data`` differs from ``meta.checksum``."""

    kind = "integrity_check_failed"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Integrity check failed: archive declares checksum "
            f"{expected!r} but its data hashes to {actual!r}. "
            "The file is corrupted or was modified after export."
        )


__all__ = [
    "ArchiveImportError",
    "MalformedEnvelope",
    "UnsupportedVersion",
    "IntegrityCheckFailed",
]
