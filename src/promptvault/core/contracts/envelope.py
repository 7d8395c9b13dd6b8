"""Archive envelope contracts.

An archive file is a two-part JSON object::

    {"meta": {"version": 1, "exportedAt": 1718000000000, "checksum": "1a2b3c4d",
              "app": {"name": "Prompt Vault", "build": "0.3.0"}},
     "data": {...}}

`meta.checksum` always covers the canonical serialization of ``data`` alone.
Humans and tools may re-indent or re-order the envelope freely; only an edit
to the library contents invalidates it.

`ArchiveMeta` is validated strictly: a string where an integer version is
expected is a malformed envelope, not something to coerce.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel


class AppInfo(BaseModel):
    """Producer information stamped into exports (informational only)."""

    name: str | None = None
    build: str | None = None


class ArchiveMeta(BaseModel):
    """Integrity metadata of an archive."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    version: StrictInt = Field(description="Archive format version.")
    exported_at: StrictInt = Field(default=0, description="Export time, epoch millis.")
    checksum: StrictStr = Field(description="Digest of the canonical `data` object.")
    app: AppInfo | None = None


class ArchiveEnvelope(BaseModel):
    """Top-level archive object: metadata plus the raw ``data`` payload.

    ``data`` stays a plain dict here. The digest must be recomputed over the
    exact object that was read, before any model defaults are applied.
    """

    meta: ArchiveMeta
    data: dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready envelope with camelCase meta keys; `None` fields dropped."""
        return {
            "meta": self.meta.model_dump(mode="json", by_alias=True, exclude_none=True),
            "data": self.data,
        }


__all__ = ["AppInfo", "ArchiveMeta", "ArchiveEnvelope"]
