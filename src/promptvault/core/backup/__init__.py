"""Backup & restore engine.

- `checksum`: Adler-32 digest of canonical payloads.
- `codec`   : archive export and authenticated import.
- `merge`   : merge-by-identity reconciliation of an imported snapshot.
- `errors`  : import failure taxonomy.
"""
