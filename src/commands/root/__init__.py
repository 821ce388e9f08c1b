"""
Geode Discord Bot - Root Package
================================

Top-level commands that belong to no group.
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import RootCog

if TYPE_CHECKING:
    from src.bot import GeodeBot

__all__ = ["RootCog"]


async def setup(bot: "GeodeBot") -> None:
    """Load the RootCog."""
    await bot.add_cog(RootCog(bot))
    logger.tree("Root Cog Loaded", [
        ("Commands", "/say, /crash"),
    ], emoji="💬")
