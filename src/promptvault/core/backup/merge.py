"""Identity merge engine: reconcile an imported snapshot with the live one.

Merge-by-identity
-----------------
For each identity-bearing collection:

1. Seed an ordered map ``id -> record`` from the local records.
2. Walk the incoming records in order. An id already seen *earlier in the
   incoming list* is skipped: the first occurrence wins. This protects
   against a hand-edited backup that repeats a record.
3. A known id is replaced wholesale by the incoming record (no field-level
   patching) and keeps its position; an unknown id is appended.
4. Local records absent from the incoming list are kept. Merging never
   deletes anything.

Folder names have no identity; they are unioned by value.

Inputs are assumed to have passed `import_archive`'s checks. Nothing here
validates or fails. A record without an id is a bug upstream.

Both functions build new lists and a new `DataSnapshot`; neither argument
is modified, so the caller can commit the result atomically or discard it.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from promptvault.core.contracts.records import LibraryRecord
from promptvault.core.contracts.report import (
    CollectionChange,
    FolderChange,
    RestoreMode,
    RestoreReport,
)
from promptvault.core.contracts.snapshot import RECORD_COLLECTIONS, DataSnapshot
from promptvault.core.settings import get_logger

R = TypeVar("R", bound=LibraryRecord)

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class MergeOutcome(Generic[R]):
    """Merged collection plus its change counters."""

    merged: list[R]
    added: int
    replaced: int

    def change(self) -> CollectionChange:
        return CollectionChange(added=self.added, replaced=self.replaced)


def merge_by_id(local: Sequence[R], incoming: Iterable[R]) -> MergeOutcome[R]:
    """Merge ``incoming`` into ``local`` by ``id``.

    Examples
    --------
    Disjoint ids are all added; an incoming duplicate is ignored after its
    first occurrence::

        local    = [a1]
        incoming = [b1, a2, b2]      # b2 repeats b1's id
        merged   = [a2, b1]          # added=1, replaced=1
    """
    by_id: dict[str, R] = {record.id: record for record in local}
    consumed: set[str] = set()
    added = replaced = 0

    for record in incoming:
        if record.id in consumed:
            continue
        consumed.add(record.id)
        if record.id in by_id:
            replaced += 1
        else:
            added += 1
        # dict assignment keeps the original slot for existing keys
        by_id[record.id] = record

    return MergeOutcome(merged=list(by_id.values()), added=added, replaced=replaced)


def merge_folders(local: Iterable[str], incoming: Iterable[str]) -> tuple[list[str], int]:
    """Ordered set union of folder names; returns ``(folders, newly_added)``."""
    folders = list(dict.fromkeys(local))
    known = set(folders)
    added = 0
    for name in incoming:
        if name not in known:
            known.add(name)
            folders.append(name)
            added += 1
    return folders, added


def merge_backup_data(
    current: DataSnapshot,
    incoming: DataSnapshot,
    *,
    mode: RestoreMode = "merge",
) -> tuple[DataSnapshot, RestoreReport]:
    """Run the per-collection merge for all six collections plus folders.

    Returns
    -------
    (merged, report)
        ``merged`` is a brand-new snapshot; ``report`` holds added/replaced
        counts per collection for the confirmation step.
    """
    merged: dict[str, list[LibraryRecord]] = {}
    changes: dict[str, CollectionChange] = {}
    for name in RECORD_COLLECTIONS:
        outcome = merge_by_id(getattr(current, name), getattr(incoming, name))
        merged[name] = outcome.merged
        changes[name] = outcome.change()

    folders, folders_added = merge_folders(current.folders, incoming.folders)

    snapshot = DataSnapshot.model_validate({**merged, "folders": folders})
    report = RestoreReport(mode=mode, folders=FolderChange(added=folders_added), **changes)
    log.info(
        "%s computed: added=%d replaced=%d folders_added=%d",
        mode,
        report.total_added,
        report.total_replaced,
        folders_added,
    )
    return snapshot, report


def replace_backup_data(incoming: DataSnapshot) -> tuple[DataSnapshot, RestoreReport]:
    """Replace-all restore: discard the local library and adopt ``incoming``.

    Implemented as a merge into an empty library, so the incoming data still
    gets first-occurrence-wins dedup and every record is reported as added.
    """
    return merge_backup_data(DataSnapshot(), incoming, mode="replace")


__all__ = [
    "MergeOutcome",
    "merge_by_id",
    "merge_folders",
    "merge_backup_data",
    "replace_backup_data",
]
