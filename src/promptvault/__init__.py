"""Prompt Vault package bootstrap.

The interesting code lives under :mod:`promptvault.core`; the CLI entry point
is :mod:`promptvault.cli`.
"""

from __future__ import annotations

__all__ = ["__version__", "APP_NAME"]
__version__ = "0.3.0"
APP_NAME = "Prompt Vault"
