"""RestoreReport: what a merge or replace would change.

The confirmation layer shows this to the user before anything is committed,
so it is deliberately flat and easy to render: one `CollectionChange` per
identity-bearing collection, plus the number of folder names the union adds.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .snapshot import RECORD_COLLECTIONS

RestoreMode = Literal["merge", "replace"]


class CollectionChange(BaseModel):
    """Added/replaced counters for one collection."""

    added: int = Field(default=0, ge=0)
    replaced: int = Field(default=0, ge=0)


class FolderChange(BaseModel):
    """Folder names are merged by value, so only additions exist."""

    added: int = Field(default=0, ge=0)


class RestoreReport(BaseModel):
    """Aggregated change report for a whole restore."""

    mode: RestoreMode = "merge"
    prompts: CollectionChange = Field(default_factory=CollectionChange)
    skills: CollectionChange = Field(default_factory=CollectionChange)
    workflows: CollectionChange = Field(default_factory=CollectionChange)
    agents: CollectionChange = Field(default_factory=CollectionChange)
    history: CollectionChange = Field(default_factory=CollectionChange)
    snapshots: CollectionChange = Field(default_factory=CollectionChange)
    folders: FolderChange = Field(default_factory=FolderChange)

    def collection(self, name: str) -> CollectionChange:
        """Return the counters for an archive collection name."""
        if name not in RECORD_COLLECTIONS:
            raise KeyError(name)
        change: CollectionChange = getattr(self, name)
        return change

    @property
    def added(self) -> dict[str, int]:
        """``{collection: added}`` for the six record collections."""
        return {name: self.collection(name).added for name in RECORD_COLLECTIONS}

    @property
    def replaced(self) -> dict[str, int]:
        """``{collection: replaced}`` for the six record collections."""
        return {name: self.collection(name).replaced for name in RECORD_COLLECTIONS}

    @property
    def total_added(self) -> int:
        return sum(self.added.values())

    @property
    def total_replaced(self) -> int:
        return sum(self.replaced.values())

    def rows(self) -> list[tuple[str, int, int]]:
        """``(collection, added, replaced)`` rows in display order."""
        return [(name, *self.added_replaced(name)) for name in RECORD_COLLECTIONS]

    def added_replaced(self, name: str) -> tuple[int, int]:
        change = self.collection(name)
        return change.added, change.replaced


__all__ = ["RestoreMode", "CollectionChange", "FolderChange", "RestoreReport"]
