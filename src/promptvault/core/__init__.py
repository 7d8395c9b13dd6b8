"""Core package initializer for Prompt Vault.

Downstream code imports the concrete modules directly, e.g.:
    from promptvault.core.settings import settings, load_settings, Settings, get_logger
    from promptvault.core.backup.codec import export_archive, import_archive
"""

from __future__ import annotations

__all__ = ["__doc__"]
