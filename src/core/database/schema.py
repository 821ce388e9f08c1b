"""
Geode Discord Bot - Database Schema Module
==========================================

Table definitions and migrations.
"""

import sqlite3
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Columns added after the first release are migrated with
        ALTER TABLE and ignored when already present.
        """
        conn = self._ensure_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Bot State Table
        # DESIGN: Key-value store for small bits of persisted state
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS bot_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        # -----------------------------------------------------------------
        # Quotes Table
        # DESIGN: Keyed by the quoted message so re-quoting is detected.
        # `id` is the public number and is never reused.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS quotes (
                message_id INTEGER PRIMARY KEY,
                id INTEGER NOT NULL UNIQUE,
                name TEXT NOT NULL UNIQUE,
                channel_id INTEGER NOT NULL DEFAULT 0,
                author_id INTEGER NOT NULL,
                quoter_id INTEGER NOT NULL DEFAULT 0,
                created_at REAL NOT NULL,
                last_edited_at REAL,
                jump_url TEXT,
                reply_author_id INTEGER NOT NULL DEFAULT 0,
                reply_message_id INTEGER NOT NULL DEFAULT 0,
                content TEXT NOT NULL DEFAULT ''
            )
        """)
        for col in [
            "reply_content TEXT NOT NULL DEFAULT ''",
            "attachments TEXT NOT NULL DEFAULT '[]'",
            "embeds TEXT NOT NULL DEFAULT '[]'",
            "components TEXT NOT NULL DEFAULT '[]'",
        ]:
            try:
                cursor.execute(f"ALTER TABLE quotes ADD COLUMN {col}")
            except sqlite3.OperationalError:
                pass
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_quotes_author ON quotes(author_id)"
        )

        # -----------------------------------------------------------------
        # Guesses Table
        # DESIGN: One row per finished round, removed with its quote.
        # guess_id 0 means the round timed out.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guesses (
                message_id INTEGER PRIMARY KEY,
                started_at REAL NOT NULL,
                guessed_at REAL NOT NULL,
                user_id INTEGER NOT NULL,
                guess_id INTEGER NOT NULL,
                quote_message_id INTEGER NOT NULL
                    REFERENCES quotes(message_id) ON DELETE CASCADE
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_guesses_user ON guesses(user_id, guessed_at)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_guesses_guess ON guesses(guess_id)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_guesses_quote ON guesses(quote_message_id)"
        )

        # -----------------------------------------------------------------
        # Guess Stats Table
        # DESIGN: Incremental counters, updated in the same transaction
        # that inserts the guess row.
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guess_stats (
                user_id INTEGER PRIMARY KEY,
                total INTEGER NOT NULL DEFAULT 0,
                correct INTEGER NOT NULL DEFAULT 0,
                streak INTEGER NOT NULL DEFAULT 0,
                max_streak INTEGER NOT NULL DEFAULT 0,
                updated_at REAL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_guess_stats_correct ON guess_stats(correct DESC)"
        )
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_guess_stats_streak ON guess_stats(max_streak DESC)"
        )

        # -----------------------------------------------------------------
        # Sticky Roles Table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS sticky_roles (
                user_id INTEGER NOT NULL,
                role_id INTEGER NOT NULL,
                added_at REAL NOT NULL,
                PRIMARY KEY (user_id, role_id)
            )
        """)

        # -----------------------------------------------------------------
        # Index Tokens Table
        # DESIGN: Mod index bearer token per Discord user
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS index_tokens (
                user_id INTEGER PRIMARY KEY,
                token TEXT NOT NULL,
                updated_at REAL NOT NULL
            )
        """)

        conn.commit()


__all__ = ["SchemaMixin"]
