"""
Geode Discord Bot - Sticky Package
==================================

Roles that survive leaving and rejoining the server.
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import StickyCog, restore_sticky_roles

if TYPE_CHECKING:
    from src.bot import GeodeBot

__all__ = ["StickyCog", "restore_sticky_roles"]


async def setup(bot: "GeodeBot") -> None:
    """Load the StickyCog."""
    await bot.add_cog(StickyCog(bot))
    logger.tree("Sticky Cog Loaded", [
        ("Commands", "/sticky add, remove, list, restore"),
    ], emoji="📌")
