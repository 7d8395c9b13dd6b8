"""Tests for the version snapshot store."""

from __future__ import annotations

from collections.abc import Callable
from itertools import count

import pytest
from conftest import make_prompt

from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.library.state import LibraryState
from promptvault.core.versions.errors import (
    BaselineImmutable,
    DuplicateVersionName,
    VersionNotFound,
)
from promptvault.core.versions.store import BASELINE_MESSAGE, VersionMetadata, VersionStore


def _ids() -> Callable[[], str]:
    seq = count(1)
    return lambda: f"new{next(seq)}"


@pytest.fixture
def state(library: DataSnapshot) -> LibraryState:
    return LibraryState(library)


@pytest.fixture
def store(state: LibraryState) -> VersionStore:
    return VersionStore(state, clock=lambda: 1_800_000_000_000, id_factory=_ids())


def _versions(store: VersionStore, doc: str) -> list[tuple[str, int]]:
    return [(s.id, s.version) for s in store.history(doc).unwrap()]


def test_history_is_ordered_and_scoped_to_lineage(store: VersionStore) -> None:
    assert _versions(store, "p1") == [("v1", 1), ("v2", 2), ("v3", 3)]
    assert _versions(store, "p2") == [("w1", 1)]
    assert _versions(store, "p3") == []


def test_commit_appends_next_version_and_updates_live_prompt(
    store: VersionStore, state: LibraryState
) -> None:
    result = store.commit_version("p1", "Summarize {{TOPIC}} in one paragraph.", name="Release")

    assert result.unwrap() == "new1"
    assert _versions(store, "p1")[-1] == ("new1", 4)
    snap = store.select_version("p1", "new1").unwrap()
    assert snap.commit_message == "Release"
    assert snap.created_at == 1_800_000_000_000
    assert snap.title == "Prompt p1"

    live = state.snapshot().find_prompt("p1")
    assert live is not None
    assert live.content == "Summarize {{TOPIC}} in one paragraph."
    assert live.version == 4


def test_commit_on_draft_lineage_gets_version_one(store: VersionStore) -> None:
    sid = store.commit_version("p3", "first words").unwrap()
    snap = store.select_version("p3", sid).unwrap()
    assert snap.version == 1
    assert snap.is_baseline


def test_commit_metadata_overrides(store: VersionStore, state: LibraryState) -> None:
    meta = VersionMetadata(title="Renamed", folder="Archive", tags=["final"])
    sid = store.commit_version("p2", "new body", meta, variable_values={"TOPIC": "q3"}).unwrap()

    snap = store.select_version("p2", sid).unwrap()
    assert (snap.title, snap.folder, snap.tags) == ("Renamed", "Archive", ["final"])
    assert snap.category == "Writing"
    assert snap.variable_values == {"TOPIC": "q3"}

    live = state.snapshot().find_prompt("p2")
    assert live is not None
    assert (live.title, live.folder, live.tags) == ("Renamed", "Archive", ["final"])


def test_duplicate_version_name_is_rejected(store: VersionStore, state: LibraryState) -> None:
    store.commit_version("p1", "a", name="Release").unwrap()
    rev = state.revision

    result = store.commit_version("p1", "b", name="  release ")

    assert result.is_err()
    assert isinstance(result.unwrap_err(), DuplicateVersionName)
    assert state.revision == rev
    # the same name in another lineage is fine
    assert store.commit_version("p2", "c", name="Release").is_ok()


def test_delete_middle_version_keeps_numbering(store: VersionStore) -> None:
    assert store.delete_version("p1", "v2").is_ok()
    assert _versions(store, "p1") == [("v1", 1), ("v3", 3)]

    store.commit_version("p1", "after delete").unwrap()
    assert _versions(store, "p1")[-1][1] == 4


def test_deleting_newest_version_never_frees_its_number(
    store: VersionStore, state: LibraryState
) -> None:
    newest = store.commit_version("p1", "fourth").unwrap()
    assert store.delete_version("p1", newest).is_ok()
    assert _versions(store, "p1")[-1] == ("v3", 3)

    store.commit_version("p1", "fifth").unwrap()

    assert [v for _, v in _versions(store, "p1")] == [1, 2, 3, 5]
    live = state.snapshot().find_prompt("p1")
    assert live is not None and live.version == 5


def test_delete_baseline_is_refused(store: VersionStore, state: LibraryState) -> None:
    before = state.snapshot()
    result = store.delete_version("p1", "v1")

    error = result.unwrap_err()
    assert isinstance(error, BaselineImmutable)
    assert error.snapshot_id == "v1"
    assert state.snapshot() is before
    assert state.revision == 0


def test_restore_copies_snapshot_onto_live_prompt(store: VersionStore, state: LibraryState) -> None:
    restored = store.restore_version("p1", "v2").unwrap()

    assert restored.content == "content of p1 at v2"
    assert restored.tags == []
    live = state.snapshot().find_prompt("p1")
    assert live == restored
    # no snapshot is created by a restore
    assert len(state.snapshot().snapshots) == 4


def test_restore_is_idempotent(store: VersionStore, state: LibraryState) -> None:
    store.restore_version("p1", "v2").unwrap()
    once = state.snapshot()
    store.restore_version("p1", "v2").unwrap()
    assert state.snapshot() == once


def test_select_has_no_side_effects(store: VersionStore, state: LibraryState) -> None:
    before = state.snapshot()
    snap = store.select_version("p1", "v3").unwrap()
    assert snap.version == 3
    assert state.snapshot() is before
    assert state.revision == 0


def test_unknown_ids_are_not_found(store: VersionStore) -> None:
    assert isinstance(store.history("missing").unwrap_err(), VersionNotFound)
    assert isinstance(store.select_version("p1", "nope").unwrap_err(), VersionNotFound)
    # w1 exists, but belongs to p2's lineage
    assert isinstance(store.restore_version("p1", "w1").unwrap_err(), VersionNotFound)
    assert isinstance(store.delete_version("missing", "v2").unwrap_err(), VersionNotFound)
    assert isinstance(store.commit_version("missing", "x").unwrap_err(), VersionNotFound)


def test_compare_reports_content_and_metadata(store: VersionStore) -> None:
    comparison = store.compare("p1", "v1").unwrap()
    assert comparison.can_restore
    assert comparison.metadata_changes == []

    sid = store.commit_version("p1", "fresh", VersionMetadata(folder="Archive")).unwrap()
    same = store.compare("p1", sid).unwrap()
    assert not same.can_restore

    old = store.compare("p1", "v1").unwrap()
    assert [(c.name, c.snapshot_value, c.current_value) for c in old.metadata_changes] == [
        ("folder", "General", "Archive")
    ]


def test_ensure_baseline_captures_draft_once(store: VersionStore, state: LibraryState) -> None:
    baseline = store.ensure_baseline("p3").unwrap()
    assert baseline.version == 1
    assert baseline.commit_message == BASELINE_MESSAGE
    assert baseline.content == make_prompt("p3").content
    rev = state.revision

    again = store.ensure_baseline("p3").unwrap()
    assert again == baseline
    assert state.revision == rev

    assert store.ensure_baseline("p1").unwrap().id == "v1"


def test_copies_share_the_parent_lineage(library: DataSnapshot) -> None:
    copy = make_prompt("p1-copy", parent_id="p1")
    state = LibraryState(library.model_copy(update={"prompts": [*library.prompts, copy]}))
    store = VersionStore(state, id_factory=_ids())

    assert [s.id for s in store.history("p1-copy").unwrap()] == ["v1", "v2", "v3"]
    sid = store.commit_version("p1-copy", "copy edit").unwrap()
    assert store.select_version("p1", sid).unwrap().version == 4
