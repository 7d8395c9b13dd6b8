"""
In-memory library state with atomic commits and a commit trace.

`LibraryState` is the single owner of the live data set. Everything else
(the backup engine, the version store, the CLI) works like this:

1. ``snapshot()``: take an immutable `DataSnapshot` of the current library.
2. Compute a new `DataSnapshot` from it (merge, restore, new version, ...).
3. ``commit(new, note)``: swap it in as one reference assignment.

A reader therefore sees either the whole old library or the whole new one,
never prompts merged while skills are not. Each commit bumps a revision
counter and records a `CommitTrace` so a session's changes can be reviewed.

Design Goals
------------
- **Minimal API**: `snapshot` / `commit` / `traces`, plus `expect_revision`
  for callers that computed against an older snapshot.
- **No in-place mutation**: `DataSnapshot` and its records are frozen.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.settings import get_logger

log = get_logger(__name__)


class StaleStateError(RuntimeError):
    """A commit was computed against a revision that is no longer current."""


@dataclass(frozen=True, slots=True)
class CommitTrace:
    """
    Immutable record of one commit.

    Attributes
    ----------
    timestamp : str
        UTC ISO-8601 time of the commit with millisecond precision and a
        trailing ``Z`` (e.g. ``"2024-06-10T14:30:00.123Z"``).
    revision : int
        Revision number the commit produced.
    note : str | None
        Human-readable reason, e.g. ``"merge backup"``.
    counts : dict[str, int]
        Collection sizes after the commit.
    """

    timestamp: str
    revision: int
    note: str | None
    counts: dict[str, int]


class LibraryState:
    """
    Owner of the live library.

    Attributes
    ----------
    _data : DataSnapshot
        The current library. Replaced wholesale on every commit.
    _rev : int
        Monotonically increasing revision counter.
    _traces : list[CommitTrace]
        Commit history of this session.
    """

    __slots__ = ("_data", "_rev", "_traces")

    def __init__(self, data: DataSnapshot | None = None) -> None:
        self._data: DataSnapshot = data if data is not None else DataSnapshot()
        self._rev: int = 0
        self._traces: list[CommitTrace] = []

    @property
    def revision(self) -> int:
        return self._rev

    def snapshot(self) -> DataSnapshot:
        """
        Return the current library as an immutable value.

        The snapshot is frozen, so handing out the same object is safe; later
        commits replace ``_data`` rather than changing it.
        """
        return self._data

    def commit(
        self,
        data: DataSnapshot,
        note: str | None = None,
        *,
        expect_revision: int | None = None,
    ) -> CommitTrace:
        """
        Atomically replace the live library with ``data``.

        Parameters
        ----------
        data : DataSnapshot
            The complete new library.
        note : str | None
            Reason recorded in the trace.
        expect_revision : int | None
            When given, refuse the commit unless the state is still at this
            revision (the snapshot ``data`` was derived from is current).

        Raises
        ------
        StaleStateError
            If ``expect_revision`` does not match.
        """
        if expect_revision is not None and expect_revision != self._rev:
            raise StaleStateError(
                f"state moved from revision {expect_revision} to {self._rev}; recompute"
            )
        self._data = data
        self._rev += 1
        trace = CommitTrace(
            timestamp=datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            revision=self._rev,
            note=note,
            counts=data.counts(),
        )
        self._traces.append(trace)
        log.debug("commit rev=%d note=%s", self._rev, note)
        return trace

    def traces(self) -> tuple[CommitTrace, ...]:
        """Return all commits of this session (immutable tuple)."""
        return tuple(self._traces)


__all__ = ["CommitTrace", "LibraryState", "StaleStateError"]
