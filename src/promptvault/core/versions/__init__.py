"""Per-document version history: snapshots, comparison and restore."""
