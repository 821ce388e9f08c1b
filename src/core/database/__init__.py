"""
Geode Discord Bot - Database Module
===================================

SQLite storage for quotes, guesses, sticky roles and mod index tokens.

The manager is assembled from one mixin per table group; import
get_db() from here rather than reaching into the mixins.
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)

from src.core.database.models import (
    AttachmentRecord,
    QuoteRecord,
    GuessRecord,
    GuessStatsRecord,
    GuessProfileRecord,
    AuthorCountRecord,
    StickyRoleRecord,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "AttachmentRecord",
    "QuoteRecord",
    "GuessRecord",
    "GuessStatsRecord",
    "GuessProfileRecord",
    "AuthorCountRecord",
    "StickyRoleRecord",
]
