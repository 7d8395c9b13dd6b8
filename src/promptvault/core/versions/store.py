"""
Version snapshot store: per-prompt linear history of immutable snapshots.

Lineage
-------
Snapshots belong to a prompt's *lineage key* (``parentId or id``), so an
edited copy of a prompt shares the history of the prompt it came from. A
lineage is in one of two states:

- **Draft**: no snapshot yet.
- **Versioned**: at least one snapshot; version 1 is the baseline.

Operations
----------
- ``commit_version``  append a snapshot numbered past every number used so far.
- ``ensure_baseline`` capture the live prompt as version 1 if still Draft.
- ``select_version``  pure read of one snapshot (no state change).
- ``compare``         word diff + metadata changes against the live prompt.
- ``restore_version`` copy a snapshot's fields onto the live prompt.
- ``delete_version``  drop a non-baseline snapshot.

Snapshots are never edited once written, and restoring never creates one.
Every mutating operation computes a new `DataSnapshot` and commits it through
`LibraryState` in one step. Failures come back as ``Err(VersionError)`` and
leave the state untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from promptvault.core.contracts.records import Prompt, VersionSnapshot, new_id, now_millis
from promptvault.core.contracts.snapshot import DataSnapshot
from promptvault.core.library.state import LibraryState
from promptvault.core.result import Result, err, ok
from promptvault.core.settings import get_logger

from .diff import DiffSpan, diff, has_changes
from .errors import BaselineImmutable, DuplicateVersionName, VersionError, VersionNotFound

log = get_logger(__name__)

BASELINE_MESSAGE = "Initial Version"

# Prompt fields a snapshot freezes and a restore copies back.
RESTORED_FIELDS: tuple[str, ...] = ("content", "title", "description", "tags", "category", "folder")
# Metadata shown next to the content diff.
COMPARED_METADATA: tuple[str, ...] = ("title", "category", "folder")


@dataclass(frozen=True, slots=True)
class VersionMetadata:
    """Optional overrides for the metadata frozen into a new snapshot.

    Unset fields are taken from the live prompt.
    """

    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    category: str | None = None
    folder: str | None = None

    def resolve(self, prompt: Prompt) -> dict[str, object]:
        values: dict[str, object] = {}
        for name in ("title", "description", "tags", "category", "folder"):
            override = getattr(self, name)
            values[name] = override if override is not None else getattr(prompt, name)
        values["tags"] = list(values["tags"])  # type: ignore[call-overload]
        return values


@dataclass(frozen=True, slots=True)
class MetadataChange:
    """A metadata field whose snapshot value differs from the live one."""

    name: str
    snapshot_value: str
    current_value: str


@dataclass(frozen=True, slots=True)
class VersionComparison:
    """A snapshot side by side with the live prompt."""

    snapshot: VersionSnapshot
    spans: list[DiffSpan]
    metadata_changes: list[MetadataChange] = field(default_factory=list)

    @property
    def can_restore(self) -> bool:
        """Restore is only offered when the content actually differs."""
        return has_changes(self.spans)

    @property
    def variable_values(self) -> dict[str, str]:
        return dict(self.snapshot.variable_values or {})


def _restored_fields(snap: VersionSnapshot) -> dict[str, object]:
    return {f: list(snap.tags) if f == "tags" else getattr(snap, f) for f in RESTORED_FIELDS}


def _replace_prompt(data: DataSnapshot, prompt: Prompt) -> list[Prompt]:
    return [prompt if p.id == prompt.id else p for p in data.prompts]


def lineage(snapshots: Sequence[VersionSnapshot], key: str) -> list[VersionSnapshot]:
    """Snapshots of lineage ``key``, oldest version first."""
    return sorted((s for s in snapshots if s.prompt_id == key), key=lambda s: s.version)


class VersionStore:
    """
    Version-history operations over a `LibraryState`.

    Parameters
    ----------
    state : LibraryState
        Owner of the live library; every change is committed through it.
    clock : Callable[[], int]
        Epoch-millis source for ``createdAt`` (injectable for tests).
    id_factory : Callable[[], str]
        Generator for new snapshot ids.
    """

    def __init__(
        self,
        state: LibraryState,
        *,
        clock: Callable[[], int] = now_millis,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.state = state
        self._clock = clock
        self._new_id = id_factory

    # ------------------------------- Lookups --------------------------------

    @staticmethod
    def _document(data: DataSnapshot, document_id: str) -> Prompt:
        prompt = data.find_prompt(document_id)
        if prompt is None:
            raise VersionNotFound(f"No prompt with id {document_id!r}.")
        return prompt

    @staticmethod
    def _snapshot(data: DataSnapshot, prompt: Prompt, snapshot_id: str) -> VersionSnapshot:
        for snap in data.snapshots:
            if snap.id == snapshot_id and snap.prompt_id == prompt.lineage_key:
                return snap
        raise VersionNotFound(
            f"No snapshot {snapshot_id!r} in the history of prompt {prompt.id!r}."
        )

    def history(self, document_id: str) -> Result[list[VersionSnapshot], VersionError]:
        """Return the prompt's snapshots ordered by version (baseline first)."""
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
        except VersionError as exc:
            return err(exc)
        return ok(lineage(data.snapshots, prompt.lineage_key))

    def select_version(
        self, document_id: str, snapshot_id: str
    ) -> Result[VersionSnapshot, VersionError]:
        """Return one snapshot for preview. Never changes stored data."""
        data = self.state.snapshot()
        try:
            return ok(self._snapshot(data, self._document(data, document_id), snapshot_id))
        except VersionError as exc:
            return err(exc)

    def compare(self, document_id: str, snapshot_id: str) -> Result[VersionComparison, VersionError]:
        """Diff a snapshot against the live prompt (content and metadata)."""
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
            snap = self._snapshot(data, prompt, snapshot_id)
        except VersionError as exc:
            return err(exc)

        changes = [
            MetadataChange(name, str(getattr(snap, name)), str(getattr(prompt, name)))
            for name in COMPARED_METADATA
            if getattr(snap, name) != getattr(prompt, name)
        ]
        return ok(VersionComparison(snap, diff(snap.content, prompt.content), changes))

    # ------------------------------- Mutations ------------------------------

    def _build_snapshot(
        self,
        prompt: Prompt,
        version: int,
        content: str,
        metadata: VersionMetadata,
        *,
        name: str | None,
        message: str,
        variable_values: dict[str, str] | None,
    ) -> VersionSnapshot:
        return VersionSnapshot(
            id=self._new_id(),
            prompt_id=prompt.lineage_key,
            version=version,
            version_name=name,
            commit_message=message,
            content=content,
            variable_values=dict(variable_values) if variable_values is not None else None,
            created_at=self._clock(),
            **metadata.resolve(prompt),
        )

    def ensure_baseline(self, document_id: str) -> Result[VersionSnapshot, VersionError]:
        """Capture the live prompt as version 1 unless the lineage has one.

        Returns the baseline snapshot, new or existing.
        """
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
        except VersionError as exc:
            return err(exc)

        existing = lineage(data.snapshots, prompt.lineage_key)
        if existing:
            return ok(existing[0])

        baseline = self._build_snapshot(
            prompt,
            1,
            prompt.content,
            VersionMetadata(),
            name=None,
            message=BASELINE_MESSAGE,
            variable_values={},
        )
        self.state.commit(
            data.model_copy(update={"snapshots": [*data.snapshots, baseline]}),
            note=f"baseline {prompt.id}",
        )
        log.info("baseline captured for prompt=%s snapshot=%s", prompt.id, baseline.id)
        return ok(baseline)

    def commit_version(
        self,
        document_id: str,
        content: str,
        metadata: VersionMetadata | None = None,
        name: str | None = None,
        *,
        message: str | None = None,
        variable_values: dict[str, str] | None = None,
    ) -> Result[str, VersionError]:
        """
        Append a new immutable snapshot and make it the live prompt state.

        The new version number is one past both the newest snapshot and the live
        ``version``, so a deleted newest number is never reused; 1 for a Draft
        lineage. The live prompt takes the committed content/metadata and
        its ``version`` is set to the new number.

        Returns
        -------
        Result[str, VersionError]
            The new snapshot id, or ``DuplicateVersionName`` when ``name``
            matches an existing version name (trimmed, case-insensitive).
        """
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
        except VersionError as exc:
            return err(exc)

        existing = lineage(data.snapshots, prompt.lineage_key)
        label = name.strip() if name and name.strip() else None
        if label is not None:
            taken = {(s.version_name or "").strip().lower() for s in existing}
            if label.lower() in taken:
                return err(DuplicateVersionName(label))

        version = 1
        if existing:
            # live versions of the lineage still count a deleted newest snapshot
            live = (p.version for p in data.prompts if p.lineage_key == prompt.lineage_key)
            version = max(existing[-1].version, *live) + 1
        snap = self._build_snapshot(
            prompt,
            version,
            content,
            metadata or VersionMetadata(),
            name=label,
            message=message if message is not None else (label or ""),
            variable_values=variable_values,
        )
        live = prompt.model_copy(
            update={**_restored_fields(snap), "version": version}
        )
        self.state.commit(
            data.model_copy(
                update={
                    "prompts": _replace_prompt(data, live),
                    "snapshots": [*data.snapshots, snap],
                }
            ),
            note=f"commit {prompt.id} v{version}",
        )
        log.info("version committed prompt=%s version=%d snapshot=%s", prompt.id, version, snap.id)
        return ok(snap.id)

    def restore_version(self, document_id: str, snapshot_id: str) -> Result[Prompt, VersionError]:
        """
        Copy a snapshot's content and metadata onto the live prompt.

        Creates no snapshot and leaves the snapshot itself untouched.
        Restoring the same snapshot twice yields the same live prompt.
        """
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
            snap = self._snapshot(data, prompt, snapshot_id)
        except VersionError as exc:
            return err(exc)

        restored = prompt.model_copy(update=_restored_fields(snap))
        self.state.commit(
            data.model_copy(update={"prompts": _replace_prompt(data, restored)}),
            note=f"restore {prompt.id} from {snap.label}",
        )
        log.info("prompt=%s restored from snapshot=%s (%s)", prompt.id, snap.id, snap.label)
        return ok(restored)

    def delete_version(self, document_id: str, snapshot_id: str) -> Result[None, VersionError]:
        """Remove a snapshot from the lineage; the baseline is refused."""
        data = self.state.snapshot()
        try:
            prompt = self._document(data, document_id)
            snap = self._snapshot(data, prompt, snapshot_id)
        except VersionError as exc:
            return err(exc)

        if snap.is_baseline:
            return err(BaselineImmutable(snap.id))

        self.state.commit(
            data.model_copy(update={"snapshots": [s for s in data.snapshots if s.id != snap.id]}),
            note=f"delete {snap.label} of {prompt.id}",
        )
        log.info("snapshot=%s (%s) deleted from prompt=%s", snap.id, snap.label, prompt.id)
        return ok(None)


__all__ = [
    "BASELINE_MESSAGE",
    "MetadataChange",
    "VersionComparison",
    "VersionMetadata",
    "VersionStore",
    "lineage",
]
