"""Pydantic contracts shared by the backup codec, merge engine and version store."""

from __future__ import annotations

from .envelope import AppInfo, ArchiveEnvelope, ArchiveMeta
from .records import (
    Agent,
    ExecutionRun,
    LibraryRecord,
    Prompt,
    Skill,
    VersionSnapshot,
    Workflow,
)
from .report import CollectionChange, FolderChange, RestoreMode, RestoreReport
from .snapshot import COLLECTION_KEYS, FOLDERS_KEY, RECORD_COLLECTIONS, DataSnapshot

__all__ = [
    "Agent",
    "AppInfo",
    "ArchiveEnvelope",
    "ArchiveMeta",
    "COLLECTION_KEYS",
    "CollectionChange",
    "DataSnapshot",
    "ExecutionRun",
    "FOLDERS_KEY",
    "FolderChange",
    "LibraryRecord",
    "Prompt",
    "RECORD_COLLECTIONS",
    "RestoreMode",
    "RestoreReport",
    "Skill",
    "VersionSnapshot",
    "Workflow",
]
