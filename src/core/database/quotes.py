"""
Geode Discord Bot - Quote Operations Mixin
==========================================

Storage for quoted message snapshots.

DESIGN:
    Quotes are keyed by the quoted message id, which is also what
    guesses reference. Rename and update rewrite the row in place so
    that key never changes and existing guesses stay attached.
    Public ids come from a high-water mark kept in bot_state, so an
    id freed by a delete is never handed out again.
"""

import json
import sqlite3
import time
from typing import TYPE_CHECKING, List, Optional

from src.core.logger import logger
from src.core.database.base import _safe_json_loads
from src.core.database.models import AuthorCountRecord, QuoteRecord

if TYPE_CHECKING:
    from .manager import DatabaseManager


QUOTE_ID_COUNTER_KEY = "quote_id_counter"

_JSON_COLUMNS = ("attachments", "embeds", "components")


def _row_to_quote(row: sqlite3.Row) -> QuoteRecord:
    """Convert a quotes row into a QuoteRecord, decoding JSON columns."""
    quote: QuoteRecord = dict(row)  # type: ignore[assignment]
    for column in _JSON_COLUMNS:
        quote[column] = _safe_json_loads(row[column], [])
    return quote


def _quote_values(quote: QuoteRecord) -> tuple:
    """Column values shared by insert and replace, in schema order."""
    return (
        quote.get("channel_id", 0),
        quote["author_id"],
        quote.get("quoter_id", 0),
        quote["created_at"],
        quote.get("last_edited_at"),
        quote.get("jump_url"),
        quote.get("reply_author_id", 0),
        quote.get("reply_message_id", 0),
        quote.get("reply_content", ""),
        json.dumps(quote.get("attachments", [])),
        json.dumps(quote.get("embeds", [])),
        json.dumps(quote.get("components", [])),
        quote.get("content", ""),
    )


class QuotesMixin:
    """Mixin for quote storage operations."""

    # =========================================================================
    # Create
    # =========================================================================

    def add_quote(self: "DatabaseManager", quote: QuoteRecord) -> QuoteRecord:
        """
        Insert a new quote and assign it the next public id.

        Args:
            quote: Quote to insert. Any `id` it carries is ignored.

        Returns:
            The stored quote including its assigned id.

        Raises:
            sqlite3.IntegrityError: If the message or name is already quoted.
        """
        with self.transaction() as tx:
            tx.execute("SELECT COALESCE(MAX(id), 0) AS max_id FROM quotes")
            max_id = tx.fetchone()["max_id"]
            tx.execute("SELECT value FROM bot_state WHERE key = ?", (QUOTE_ID_COUNTER_KEY,))
            counter_row = tx.fetchone()
            counter = int(counter_row["value"]) if counter_row else 0
            new_id = max(max_id, counter) + 1

            tx.execute(
                """INSERT INTO quotes
                   (message_id, id, name, channel_id, author_id, quoter_id,
                    created_at, last_edited_at, jump_url, reply_author_id,
                    reply_message_id, reply_content, attachments, embeds,
                    components, content)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (quote["message_id"], new_id, quote["name"]) + _quote_values(quote)
            )
            tx.execute(
                "INSERT OR REPLACE INTO bot_state (key, value, updated_at) VALUES (?, ?, ?)",
                (QUOTE_ID_COUNTER_KEY, json.dumps(new_id), time.time())
            )

        stored = dict(quote)
        stored["id"] = new_id
        return stored  # type: ignore[return-value]

    # =========================================================================
    # Read
    # =========================================================================

    def get_quote(self: "DatabaseManager", message_id: int) -> Optional[QuoteRecord]:
        """Get a quote by the id of the quoted message."""
        row = self.fetchone("SELECT * FROM quotes WHERE message_id = ?", (message_id,))
        return _row_to_quote(row) if row else None

    def get_quote_by_id(self: "DatabaseManager", quote_id: int) -> Optional[QuoteRecord]:
        """Get a quote by its public number."""
        row = self.fetchone("SELECT * FROM quotes WHERE id = ?", (quote_id,))
        return _row_to_quote(row) if row else None

    def get_quote_by_name(self: "DatabaseManager", name: str) -> Optional[QuoteRecord]:
        """Get a quote by its display name."""
        row = self.fetchone("SELECT * FROM quotes WHERE name = ?", (name,))
        return _row_to_quote(row) if row else None

    def find_quote(self: "DatabaseManager", key: str) -> Optional[QuoteRecord]:
        """
        Look up a quote by name, falling back to its public number.

        Args:
            key: A quote name or number as typed by a user.

        Returns:
            The matching quote or None.
        """
        key = key.strip()
        quote = self.get_quote_by_name(key)
        if quote is None and key.isdigit():
            quote = self.get_quote_by_id(int(key))
        return quote

    def quote_exists(self: "DatabaseManager", message_id: int) -> bool:
        """Check whether a message has already been quoted."""
        return self.fetchone(
            "SELECT 1 FROM quotes WHERE message_id = ?", (message_id,)
        ) is not None

    def quote_name_exists(self: "DatabaseManager", name: str) -> bool:
        """Check whether a quote name is taken."""
        return self.fetchone(
            "SELECT 1 FROM quotes WHERE name = ?", (name,)
        ) is not None

    def search_quotes(self: "DatabaseManager", current: str, limit: int = 25) -> List[QuoteRecord]:
        """
        Find quotes whose name or number contains the given text.

        Args:
            current: Partial text typed by the user.
            limit: Maximum number of results.

        Returns:
            Matching quotes, newest first.
        """
        pattern = f"%{current.strip()}%"
        rows = self.fetchall(
            """SELECT * FROM quotes
               WHERE name LIKE ? OR CAST(id AS TEXT) LIKE ?
               ORDER BY id DESC LIMIT ?""",
            (pattern, pattern, limit)
        )
        return [_row_to_quote(row) for row in rows]

    def count_quotes(self: "DatabaseManager", author_id: Optional[int] = None) -> int:
        """Count all quotes, or only those by one author."""
        if author_id is None:
            row = self.fetchone("SELECT COUNT(*) AS c FROM quotes")
        else:
            row = self.fetchone("SELECT COUNT(*) AS c FROM quotes WHERE author_id = ?", (author_id,))
        return row["c"] if row else 0

    def random_quotes(self: "DatabaseManager", limit: int = 1) -> List[QuoteRecord]:
        """Get up to `limit` distinct quotes in random order."""
        rows = self.fetchall("SELECT * FROM quotes ORDER BY RANDOM() LIMIT ?", (limit,))
        return [_row_to_quote(row) for row in rows]

    def get_author_quote_counts(self: "DatabaseManager") -> List[AuthorCountRecord]:
        """
        Get the number of quotes per author, most quoted first.

        Returns:
            List of {author_id, count} records.
        """
        rows = self.fetchall(
            """SELECT author_id, COUNT(*) AS count FROM quotes
               GROUP BY author_id
               ORDER BY count DESC, author_id ASC"""
        )
        return [{"author_id": row["author_id"], "count": row["count"]} for row in rows]

    # =========================================================================
    # Update
    # =========================================================================

    def replace_quote(self: "DatabaseManager", quote: QuoteRecord) -> bool:
        """
        Overwrite a quote's contents, keeping its message id and number.

        Args:
            quote: New contents. `message_id` selects the row; `id` is not changed.

        Returns:
            True if a row was updated.

        Raises:
            sqlite3.IntegrityError: If the new name collides with another quote.
        """
        with self.transaction() as tx:
            cursor = tx.execute(
                """UPDATE quotes SET
                   name = ?, channel_id = ?, author_id = ?, quoter_id = ?,
                   created_at = ?, last_edited_at = ?, jump_url = ?,
                   reply_author_id = ?, reply_message_id = ?, reply_content = ?,
                   attachments = ?, embeds = ?, components = ?, content = ?
                   WHERE message_id = ?""",
                (quote["name"],) + _quote_values(quote) + (quote["message_id"],)
            )
            return cursor.rowcount > 0

    def rename_quote(self: "DatabaseManager", message_id: int, new_name: str) -> bool:
        """
        Rename a quote.

        Raises:
            sqlite3.IntegrityError: If the name is already taken.
        """
        cursor = self.execute(
            "UPDATE quotes SET name = ? WHERE message_id = ?",
            (new_name, message_id)
        )
        return cursor.rowcount > 0

    def set_quote_quoter(self: "DatabaseManager", message_id: int, quoter_id: int) -> bool:
        """Change who is recorded as having created a quote."""
        cursor = self.execute(
            "UPDATE quotes SET quoter_id = ? WHERE message_id = ?",
            (quoter_id, message_id)
        )
        return cursor.rowcount > 0

    def set_quote_author(self: "DatabaseManager", message_id: int, author_id: int) -> bool:
        """Change the recorded author of a quote."""
        cursor = self.execute(
            "UPDATE quotes SET author_id = ? WHERE message_id = ?",
            (author_id, message_id)
        )
        return cursor.rowcount > 0

    def clear_quote_last_edited(self: "DatabaseManager", message_id: int) -> bool:
        """Forget when a quote was last edited."""
        cursor = self.execute(
            "UPDATE quotes SET last_edited_at = NULL WHERE message_id = ?",
            (message_id,)
        )
        return cursor.rowcount > 0

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_quote(self: "DatabaseManager", message_id: int) -> bool:
        """
        Delete a quote. Guesses on it are removed by the foreign key cascade.

        Returns:
            True if a quote was deleted.
        """
        cursor = self.execute("DELETE FROM quotes WHERE message_id = ?", (message_id,))
        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(f"Quote row {message_id} deleted")
        return deleted


__all__ = ["QuotesMixin", "QUOTE_ID_COUNTER_KEY"]
