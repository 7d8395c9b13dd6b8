"""Checksum function used to detect accidental corruption of archives.

Adler-32: two running sums modulo the prime 65521, packed into 32 bits and
rendered as eight lowercase hex digits. This guards against truncated files,
hand edits and bad copies. It is not an authentication code and makes no
claim against deliberate tampering.
"""

from __future__ import annotations

import zlib
from typing import Final

DIGEST_LENGTH: Final[int] = 8


def digest(payload: str) -> str:
    """Return the Adler-32 digest of ``payload``'s UTF-8 bytes as 8 hex chars.

    Pure and total: the same text yields the same digest on every platform.

    >>> digest("Wikipedia")
    '11e60398'
    """
    return f"{zlib.adler32(payload.encode('utf-8')) & 0xFFFFFFFF:08x}"


__all__ = ["digest", "DIGEST_LENGTH"]
