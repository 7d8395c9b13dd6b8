"""Identity-bearing library records.

This module defines the Pydantic v2 models for every entity kind stored in a
library and exchanged through backup archives:

- `Prompt`         : a reusable text artifact (the versioned "document").
- `Skill`          : a bundle of prompts with execution notes.
- `Workflow`       : an ordered sequence of skills.
- `Agent`          : an automated executor bound to a workflow.
- `ExecutionRun`   : one entry of the execution history.
- `VersionSnapshot`: an immutable copy of a prompt at a given version.

Identity
--------
Every record carries a globally unique `id` assigned at creation. It is the
only key the merge engine looks at; two records with the same id are the same
entity, whatever their other fields say.

Wire format
-----------
Archives use camelCase keys (`createdAt`, `inputsRequired`, ...). Python code
uses snake_case attributes. Both spellings are accepted on input, and
`model_dump(by_alias=True)` produces the wire spelling.

Unknown keys are kept (``extra="allow"``) and written back out unchanged, so a
record created by a newer editor survives an export/import cycle intact.

Notes
-----
- Records are frozen. "Editing" a record means `model_copy(update=...)`.
- Timestamps are epoch milliseconds (ints), matching the archive format.
"""

from __future__ import annotations

import secrets
import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PromptType = Literal["system", "user"]
TriggerType = Literal["manual", "scheduled", "event-based"]
AgentStatus = Literal["active", "paused", "error"]
ObjectType = Literal["prompt", "skill", "workflow", "agent"]
RunStatus = Literal["running", "completed", "failed"]


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_id() -> str:
    """Return a fresh random record id (URL-safe, 11 characters)."""
    return secrets.token_urlsafe(8)


class LibraryRecord(BaseModel):
    """Base model for every identity-bearing record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    id: str = Field(min_length=1, description="Globally unique, immutable identifier.")


class Prompt(LibraryRecord):
    """A reusable prompt; the document kind that carries a version history."""

    title: str = "Untitled"
    content: str = ""
    description: str = ""
    notes: str | None = None
    category: str = "Creative"
    tags: list[str] = Field(default_factory=list)
    folder: str = "General"
    type: PromptType = "user"
    version: int = Field(default=1, ge=1, description="Live document version number.")
    last_used_at: int = 0
    created_at: int = 0
    usage_count: int = 0
    is_pinned: bool = False
    variables: list[str] = Field(default_factory=list)
    parent_id: str | None = Field(
        default=None, description="Set on copies; snapshots are grouped under it."
    )

    @property
    def lineage_key(self) -> str:
        """Key grouping this prompt's version snapshots (`parentId` or `id`)."""
        return self.parent_id or self.id


class Skill(LibraryRecord):
    """Bundle of prompts with execution logic."""

    name: str
    description: str = ""
    category: str = ""
    folder: str = "General"
    tags: list[str] = Field(default_factory=list)
    inputs_required: list[str] = Field(default_factory=list)
    output_format: str = ""
    embedded_prompt_ids: list[str] = Field(default_factory=list)
    tools_used: list[str] = Field(default_factory=list)
    example_run: str | None = None
    execution_notes: str | None = None
    created_at: int = 0
    updated_at: int = 0
    usage_count: int = 0
    is_pinned: bool = False


class Workflow(LibraryRecord):
    """Ordered sequence of skills."""

    name: str
    description: str = ""
    category: str = ""
    folder: str = "General"
    tags: list[str] = Field(default_factory=list)
    trigger_type: TriggerType = "manual"
    input_source: str | None = None
    skill_ids: list[str] = Field(default_factory=list)
    output_deliverable: str | None = None
    human_review_step: bool = False
    execution_notes: str | None = None
    created_at: int = 0
    updated_at: int = 0
    usage_count: int = 0
    is_pinned: bool = False


class Agent(LibraryRecord):
    """Automated executor of a linked workflow."""

    name: str
    description: str = ""
    linked_workflow_id: str = ""
    trigger_type: TriggerType = "manual"
    data_sources: list[str] = Field(default_factory=list)
    tools_connected: list[str] = Field(default_factory=list)
    memory_enabled: bool = False
    notification_method: str | None = None
    failure_handling_instructions: str | None = None
    last_run_at: int | None = None
    status: AgentStatus = "active"
    category: str = ""
    folder: str = "General"
    tags: list[str] = Field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0
    is_pinned: bool = False


class ExecutionRun(LibraryRecord):
    """A single run of a prompt/skill/workflow/agent (the "history" collection)."""

    object_type: ObjectType
    object_id: str
    object_name: str = ""
    inputs: dict[str, str] = Field(default_factory=dict)
    outputs: str = ""
    error: str | None = None
    started_at: int = 0
    completed_at: int | None = None
    status: RunStatus = "completed"


class VersionSnapshot(LibraryRecord):
    """Immutable copy of a prompt's content and metadata at one version.

    `version` is the lineage version number: 1 is the baseline, later numbers
    strictly increase. `prompt_id` is the lineage key of the owning prompt.
    """

    prompt_id: str = Field(min_length=1)
    version: int = Field(ge=1)
    version_name: str | None = None
    commit_message: str = ""
    content: str = ""
    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: str = ""
    folder: str = ""
    variable_values: dict[str, str] | None = None
    created_at: int = 0

    @property
    def is_baseline(self) -> bool:
        """True for version 1 of a lineage, which can never be deleted."""
        return self.version == 1

    @property
    def label(self) -> str:
        """Display label: the version name, or ``v<N>``."""
        return self.version_name or f"v{self.version}"


__all__ = [
    "LibraryRecord",
    "Prompt",
    "Skill",
    "Workflow",
    "Agent",
    "ExecutionRun",
    "VersionSnapshot",
    "PromptType",
    "now_millis",
    "new_id",
]
