"""
Geode Discord Bot - Sticky Role Operations Mixin
================================================

Roles that are reapplied when a member rejoins.
"""

import time
from typing import TYPE_CHECKING, List

from src.core.logger import logger

if TYPE_CHECKING:
    from .manager import DatabaseManager


class StickyMixin:
    """Mixin for sticky role operations."""

    def add_sticky_role(self: "DatabaseManager", user_id: int, role_id: int) -> bool:
        """
        Remember a role as sticky for a user.

        Returns:
            True if added, False if the pair already existed.
        """
        cursor = self.execute(
            "INSERT OR IGNORE INTO sticky_roles (user_id, role_id, added_at) VALUES (?, ?, ?)",
            (user_id, role_id, time.time())
        )
        added = cursor.rowcount > 0
        if added:
            logger.tree("Sticky Role Saved", [
                ("User ID", str(user_id)),
                ("Role ID", str(role_id)),
            ], emoji="📌")
        return added

    def remove_sticky_role(self: "DatabaseManager", user_id: int, role_id: int) -> bool:
        """
        Forget a sticky role.

        Returns:
            True if a row was removed.
        """
        cursor = self.execute(
            "DELETE FROM sticky_roles WHERE user_id = ? AND role_id = ?",
            (user_id, role_id)
        )
        return cursor.rowcount > 0

    def has_sticky_role(self: "DatabaseManager", user_id: int, role_id: int) -> bool:
        """Check whether a role is sticky for a user."""
        return self.fetchone(
            "SELECT 1 FROM sticky_roles WHERE user_id = ? AND role_id = ?",
            (user_id, role_id)
        ) is not None

    def get_sticky_roles(self: "DatabaseManager", user_id: int) -> List[int]:
        """Get a user's sticky role IDs in the order they were added."""
        rows = self.fetchall(
            "SELECT role_id FROM sticky_roles WHERE user_id = ? ORDER BY added_at ASC, role_id ASC",
            (user_id,)
        )
        return [row["role_id"] for row in rows]


__all__ = ["StickyMixin"]
