"""Archive codec: DataSnapshot <-> tamper-detectable JSON archive.

Export
------
1. Dump the snapshot to its wire ``data`` object.
2. Serialize it canonically (sorted keys, compact separators, UTF-8).
3. ``checksum = digest(canonical)`` and wrap everything in an envelope with
   the current format version and export time.

Import
------
Every step is a hard gate; the first failure is returned as an ``Err`` and
nothing later runs:

1. decode + parse, check the envelope shape       -> ``MalformedEnvelope``
2. check ``meta.version`` against supported ones   -> ``UnsupportedVersion``
3. recompute the checksum over ``data``            -> ``IntegrityCheckFailed``
4. validate collections and records                -> ``MalformedEnvelope``

The checksum is recomputed over the parsed ``data`` object, re-serialized the
same canonical way. Re-indenting the file or re-ordering keys is therefore
harmless, while any change to a value is caught. It runs *before* record
validation so a tampered file is reported as such even when the edit also
broke a record's shape.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Final

from pydantic import ValidationError

from promptvault import APP_NAME, __version__
from promptvault.core.contracts.envelope import AppInfo, ArchiveEnvelope, ArchiveMeta
from promptvault.core.contracts.records import now_millis
from promptvault.core.contracts.snapshot import COLLECTION_KEYS, DataSnapshot
from promptvault.core.result import Result, err, ok
from promptvault.core.settings import get_logger

from .checksum import digest
from .errors import (
    ArchiveImportError,
    IntegrityCheckFailed,
    MalformedEnvelope,
    UnsupportedVersion,
)

FORMAT_VERSION: Final[int] = 1
SUPPORTED_VERSIONS: Final[frozenset[int]] = frozenset({FORMAT_VERSION})
ARCHIVE_PREFIX: Final[str] = "prompt-vault-backup"

log = get_logger(__name__)


# --------------------------------------------------------------------------- #
# Canonical form
# --------------------------------------------------------------------------- #


def canonical_json(data: Any) -> str:
    """Serialize ``data`` the one way the checksum is computed over.

    Sorted keys and fixed separators make the text independent of dict
    insertion order and of any pretty-printing; ``allow_nan=False`` keeps the
    output strict JSON.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def checksum_of(data: Any) -> str:
    """Digest of the canonical serialization of an archive ``data`` object."""
    return digest(canonical_json(data))


# --------------------------------------------------------------------------- #
# Export
# --------------------------------------------------------------------------- #


def build_envelope(snapshot: DataSnapshot, exported_at: int | None = None) -> ArchiveEnvelope:
    """Wrap ``snapshot`` with integrity metadata.

    Parameters
    ----------
    snapshot : DataSnapshot
        The library to export (a copy; it is not retained).
    exported_at : int | None
        Export time in epoch millis; defaults to now.
    """
    data = snapshot.to_wire()
    meta = ArchiveMeta(
        version=FORMAT_VERSION,
        exported_at=exported_at if exported_at is not None else now_millis(),
        checksum=checksum_of(data),
        app=AppInfo(name=APP_NAME, build=__version__),
    )
    return ArchiveEnvelope(meta=meta, data=data)


def export_archive(
    snapshot: DataSnapshot,
    *,
    indent: int | None = 2,
    exported_at: int | None = None,
) -> str:
    """Return the archive text for ``snapshot``.

    ``indent`` only affects layout; the digest is identical for any value.
    """
    envelope = build_envelope(snapshot, exported_at=exported_at)
    text = json.dumps(envelope.to_wire(), indent=indent, ensure_ascii=False)
    counts = snapshot.counts()
    log.info(
        "exported archive checksum=%s prompts=%d skills=%d snapshots=%d",
        envelope.meta.checksum,
        counts["prompts"],
        counts["skills"],
        counts["snapshots"],
    )
    return text + "\n"


def archive_filename(when: datetime | None = None) -> str:
    """Conventional download name, e.g. ``prompt-vault-backup_2024-06-10_1430.json``."""
    stamp = (when or datetime.now()).strftime("%Y-%m-%d_%H%M")
    return f"{ARCHIVE_PREFIX}_{stamp}.json"


# --------------------------------------------------------------------------- #
# Import
# --------------------------------------------------------------------------- #


def _reject_constant(name: str) -> Any:
    # NaN/Infinity are not JSON; canonical_json could not re-serialize them.
    raise MalformedEnvelope(f"Archive contains a non-JSON number: {name}")


def _parse_envelope(raw: str | bytes) -> ArchiveEnvelope:
    """Decode ``raw`` and check the envelope shape; raise ``MalformedEnvelope``."""
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        obj = json.loads(text, parse_constant=_reject_constant)
    except UnicodeDecodeError as exc:
        raise MalformedEnvelope(f"Archive is not valid UTF-8 text: {exc}") from exc
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError, oversized integer literals, runaway nesting
        raise MalformedEnvelope(f"Archive is not valid JSON: {exc}") from exc

    if not isinstance(obj, dict):
        raise MalformedEnvelope("Archive does not contain a JSON object.")
    if not isinstance(obj.get("meta"), dict):
        raise MalformedEnvelope('Missing or invalid "meta" object in archive.')
    if not isinstance(obj.get("data"), dict):
        raise MalformedEnvelope('Missing or invalid "data" object in archive.')

    try:
        return ArchiveEnvelope.model_validate(obj)
    except ValidationError as exc:
        raise MalformedEnvelope(f"Invalid archive metadata: {_first_error(exc)}") from exc
    except RecursionError as exc:
        raise MalformedEnvelope("Archive data is nested too deeply.") from exc


def _validate_data(data: dict[str, Any]) -> DataSnapshot:
    """Check collection presence and record shapes; raise ``MalformedEnvelope``."""
    for key in COLLECTION_KEYS:
        if not isinstance(data.get(key), list):
            raise MalformedEnvelope(f'Missing or invalid "data.{key}" array.')
    try:
        return DataSnapshot.from_wire(data)
    except ValidationError as exc:
        raise MalformedEnvelope(f"Invalid record in archive: {_first_error(exc)}") from exc
    except RecursionError as exc:
        raise MalformedEnvelope("Archive data is nested too deeply.") from exc


def _first_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ()))
    return f"{where}: {first.get('msg', 'invalid value')}" if where else str(first.get("msg"))


def read_envelope(raw: str | bytes) -> Result[ArchiveEnvelope, ArchiveImportError]:
    """Parse and authenticate an archive without validating its records.

    Useful for inspecting ``meta`` of a file; `import_archive` builds on it.
    """
    try:
        envelope = _parse_envelope(raw)
    except MalformedEnvelope as exc:
        return err(exc)

    found = envelope.meta.version
    if found not in SUPPORTED_VERSIONS:
        return err(UnsupportedVersion(found, SUPPORTED_VERSIONS))

    try:
        actual = checksum_of(envelope.data)
    except (ValueError, RecursionError) as exc:  # e.g. 1e999 parses as inf
        return err(MalformedEnvelope(f"Archive data is not strict JSON: {exc}"))
    if actual != envelope.meta.checksum:
        return err(IntegrityCheckFailed(expected=envelope.meta.checksum, actual=actual))
    return ok(envelope)


def _decode_data(envelope: ArchiveEnvelope) -> Result[DataSnapshot, ArchiveImportError]:
    try:
        return ok(_validate_data(envelope.data))
    except MalformedEnvelope as exc:
        return err(exc)


def import_archive(raw: str | bytes) -> Result[DataSnapshot, ArchiveImportError]:
    """Parse, authenticate and decode an archive into a `DataSnapshot`.

    Returns
    -------
    Result[DataSnapshot, ArchiveImportError]
        ``Ok(snapshot)`` only when every gate passed. The caller must not
        merge anything on ``Err``.
    """
    outcome = read_envelope(raw).flat_map(_decode_data)
    if outcome.is_err():
        error = outcome.unwrap_err()
        log.warning("archive rejected (%s): %s", error.kind, error)
    else:
        log.info("archive accepted: %s", summarize(outcome.unwrap()))
    return outcome


def summarize(snapshot: DataSnapshot) -> str:
    """One-line description of an accepted archive's contents."""
    c = snapshot.counts()
    return (
        f"Valid backup found! Contains {c['prompts']} prompts, {c['skills']} skills, "
        f"{c['workflows']} workflows, {c['agents']} agents, "
        f"{c['history']} history entries, {c['snapshots']} versions."
    )


__all__ = [
    "FORMAT_VERSION",
    "SUPPORTED_VERSIONS",
    "archive_filename",
    "build_envelope",
    "canonical_json",
    "checksum_of",
    "export_archive",
    "import_archive",
    "read_envelope",
    "summarize",
]
