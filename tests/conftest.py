"""Shared fixtures: isolated settings and a small, realistic library.

Every test runs with `PROMPTVAULT_DATA_DIR` / `PROMPTVAULT_BACKUP_DIR`
pointing into its own `tmp_path`, so nothing touches the working directory.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from promptvault.core.contracts.records import (
    ExecutionRun,
    Prompt,
    Skill,
    VersionSnapshot,
)
from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.settings import load_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point data/backup directories at `tmp_path` and rebuild settings."""
    monkeypatch.setenv("PROMPTVAULT_ENV", "test")
    monkeypatch.setenv("PROMPTVAULT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PROMPTVAULT_BACKUP_DIR", str(tmp_path / "backups"))
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


def make_prompt(pid: str, **fields: object) -> Prompt:
    base: dict[str, object] = {
        "id": pid,
        "title": f"Prompt {pid}",
        "content": f"Write a summary of {pid} in three bullet points.",
        "category": "Writing",
        "folder": "General",
        "tags": ["summary"],
        "created_at": 1_700_000_000_000,
    }
    base.update(fields)
    return Prompt.model_validate(base)


def make_skill(sid: str, **fields: object) -> Skill:
    return Skill.model_validate({"id": sid, "name": f"Skill {sid}", **fields})


def make_run(rid: str, object_id: str = "p1") -> ExecutionRun:
    return ExecutionRun(
        id=rid,
        object_type="prompt",
        object_id=object_id,
        object_name=f"Prompt {object_id}",
        inputs={"TOPIC": "release notes"},
        outputs="- one\n- two",
        started_at=1_700_000_000_000,
        completed_at=1_700_000_001_000,
    )


def make_snapshot(sid: str, prompt_id: str, version: int, content: str = "") -> VersionSnapshot:
    return VersionSnapshot(
        id=sid,
        prompt_id=prompt_id,
        version=version,
        commit_message="Initial Version" if version == 1 else f"edit {version}",
        content=content or f"content of {prompt_id} at v{version}",
        title=f"Prompt {prompt_id}",
        category="Writing",
        folder="General",
        created_at=1_700_000_000_000 + version,
    )


@pytest.fixture
def library() -> DataSnapshot:
    """3 prompts, 2 skills, 0 workflows, 0 agents, 5 history entries, 4 snapshots."""
    return DataSnapshot(
        prompts=[make_prompt("p1"), make_prompt("p2", folder="Marketing"), make_prompt("p3")],
        folders=["General", "Marketing"],
        skills=[make_skill("s1", embedded_prompt_ids=["p1"]), make_skill("s2")],
        history=[make_run(f"r{i}") for i in range(1, 6)],
        snapshots=[
            make_snapshot("v1", "p1", 1),
            make_snapshot("v2", "p1", 2),
            make_snapshot("v3", "p1", 3),
            make_snapshot("w1", "p2", 1),
        ],
    )
