"""
Geode Discord Bot - Mod Index Package
=====================================

Client for the Geode mod index API used by the /index commands.
"""

from .client import (
    DOWNLOAD_FAILED,
    MISSING_MOD_ID,
    MISSING_MOD_JSON,
    IndexClient,
    IndexMod,
    ModDependency,
    ModDeveloper,
    ModVersion,
    PendingMod,
    PendingPage,
    format_error,
    read_mod_id,
)

__all__ = [
    "IndexClient",
    "IndexMod",
    "ModVersion",
    "ModDependency",
    "ModDeveloper",
    "PendingMod",
    "PendingPage",
    "format_error",
    "read_mod_id",
    "DOWNLOAD_FAILED",
    "MISSING_MOD_JSON",
    "MISSING_MOD_ID",
]
