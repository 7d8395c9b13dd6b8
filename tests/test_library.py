"""Tests for the live library state and its on-disk storage."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from conftest import make_prompt

from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.library import LibraryFileError, LibraryState, LibraryStorage, StaleStateError
from promptvault.core.settings import load_settings


# ------------------------------- State ------------------------------------


def test_new_state_is_empty() -> None:
    state = LibraryState()
    assert state.revision == 0
    assert state.snapshot().is_empty()
    assert state.traces() == ()


def test_commit_swaps_whole_snapshot_and_traces(library: DataSnapshot) -> None:
    state = LibraryState(library)
    before = state.snapshot()
    updated = library.model_copy(update={"prompts": [make_prompt("only")]})

    trace = state.commit(updated, note="merge backup")

    assert state.snapshot() is updated
    assert before.prompts != updated.prompts  # old snapshot still intact
    assert len(before.prompts) == 3
    assert trace.revision == 1 == state.revision
    assert trace.note == "merge backup"
    assert trace.counts["prompts"] == 1 and trace.counts["history"] == 5
    assert trace.timestamp.endswith("Z")
    assert state.traces() == (trace,)


def test_commit_with_stale_revision_is_refused(library: DataSnapshot) -> None:
    state = LibraryState(library)
    rev = state.revision
    state.commit(DataSnapshot())

    with pytest.raises(StaleStateError):
        state.commit(library, expect_revision=rev)
    assert state.snapshot().is_empty()
    assert state.revision == 1


# ------------------------------- Storage ----------------------------------


def test_storage_defaults_to_configured_dirs(tmp_path: Path) -> None:
    storage = LibraryStorage()
    assert storage.data_dir == tmp_path / "data"
    assert storage.backup_dir == tmp_path / "backups"
    assert storage.library_path == load_settings().library_path


def test_missing_library_loads_empty() -> None:
    assert LibraryStorage().load() == DataSnapshot()


def test_save_then_load(library: DataSnapshot) -> None:
    storage = LibraryStorage()
    path = storage.save(library)

    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["prompts"][0]["id"] == "p1"
    assert storage.load() == library
    assert storage.load_state().snapshot() == library
    assert not list(path.parent.glob(".*.tmp"))


@pytest.mark.parametrize("body", ["{not json", '{"prompts": [{"title": "no id"}]}'])
def test_corrupt_library_raises(body: str) -> None:
    storage = LibraryStorage()
    storage.library_path.parent.mkdir(parents=True)
    storage.library_path.write_text(body, encoding="utf-8")

    with pytest.raises(LibraryFileError):
        storage.load()


def test_write_archive_default_and_explicit_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    storage = LibraryStorage()

    class _FixedDatetime(datetime):
        @classmethod
        def now(cls, tz=None):  # type: ignore[no-untyped-def, override]
            return datetime(2024, 6, 10, 14, 30)

    monkeypatch.setattr("promptvault.core.library.storage.datetime", _FixedDatetime)
    default = storage.write_archive('{"meta":{},"data":{}}\n')
    assert default == tmp_path / "backups" / "prompt-vault-backup_2024-06-10_1430.json"
    assert default.read_text(encoding="utf-8").startswith('{"meta"')

    explicit = storage.write_archive("x", tmp_path / "elsewhere" / "b.json")
    assert explicit.read_text(encoding="utf-8") == "x"
