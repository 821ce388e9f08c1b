"""
Geode Discord Bot - Index Token Operations Mixin
================================================

Mod index bearer tokens, one per Discord user.
"""

import time
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .manager import DatabaseManager


class IndexTokensMixin:
    """Mixin for stored mod index tokens."""

    def get_index_token(self: "DatabaseManager", user_id: int) -> Optional[str]:
        """Get the stored token for a user, if logged in."""
        row = self.fetchone("SELECT token FROM index_tokens WHERE user_id = ?", (user_id,))
        return row["token"] if row else None

    def set_index_token(self: "DatabaseManager", user_id: int, token: str) -> None:
        """Store or replace a user's token."""
        self.execute(
            """INSERT INTO index_tokens (user_id, token, updated_at) VALUES (?, ?, ?)
               ON CONFLICT(user_id) DO UPDATE SET
                   token = excluded.token,
                   updated_at = excluded.updated_at""",
            (user_id, token, time.time())
        )

    def delete_index_token(self: "DatabaseManager", user_id: int) -> Optional[str]:
        """
        Remove a user's token.

        Returns:
            The removed token, or None if the user was not logged in.
        """
        with self.transaction() as tx:
            tx.execute("SELECT token FROM index_tokens WHERE user_id = ?", (user_id,))
            row = tx.fetchone()
            if not row:
                return None
            tx.execute("DELETE FROM index_tokens WHERE user_id = ?", (user_id,))
            return row["token"]


__all__ = ["IndexTokensMixin"]
