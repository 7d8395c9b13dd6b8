"""DataSnapshot: the whole library as one immutable value.

A snapshot aggregates the six identity-bearing collections plus the folder
name set. It is what the archive codec serializes, what the merge engine
consumes and produces, and what the library state handle commits atomically.

Folders are plain strings compared by value; they carry no id. The list keeps
first-seen order but callers must treat it as a set.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field

from .records import Agent, ExecutionRun, Prompt, Skill, VersionSnapshot, Workflow

# Archive keys of the identity-bearing collections, in report order.
RECORD_COLLECTIONS: Final[tuple[str, ...]] = (
    "prompts",
    "skills",
    "workflows",
    "agents",
    "history",
    "snapshots",
)
FOLDERS_KEY: Final[str] = "folders"
COLLECTION_KEYS: Final[tuple[str, ...]] = (*RECORD_COLLECTIONS, FOLDERS_KEY)


class DataSnapshot(BaseModel):
    """Read-only aggregate of every collection in a library."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prompts: list[Prompt] = Field(default_factory=list)
    folders: list[str] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    workflows: list[Workflow] = Field(default_factory=list)
    agents: list[Agent] = Field(default_factory=list)
    history: list[ExecutionRun] = Field(default_factory=list)
    snapshots: list[VersionSnapshot] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready ``data`` object of an archive (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> DataSnapshot:
        """Validate a decoded ``data`` object; raises ``pydantic.ValidationError``."""
        return cls.model_validate(data)

    def counts(self) -> dict[str, int]:
        """Number of entries per collection, keyed by archive name."""
        return {key: len(getattr(self, key)) for key in COLLECTION_KEYS}

    def is_empty(self) -> bool:
        """True when no collection holds anything."""
        return not any(self.counts().values())

    def find_prompt(self, prompt_id: str) -> Prompt | None:
        """Return the live prompt with ``prompt_id``, if any."""
        return next((p for p in self.prompts if p.id == prompt_id), None)


__all__ = ["DataSnapshot", "RECORD_COLLECTIONS", "FOLDERS_KEY", "COLLECTION_KEYS"]
