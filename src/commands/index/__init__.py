"""
Geode Discord Bot - Index Package
=================================

Geode mod index account and mod management.

Structure:
    - views.py: ModPaginatorView for pending/published mods, stored_token()
    - admin_views.py: PendingReviewView review queue and require_admin()
    - cog.py: IndexCog with /index, /index profile, /index mods, /index admin
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import IndexCog

if TYPE_CHECKING:
    from src.bot import GeodeBot

__all__ = ["IndexCog"]


async def setup(bot: "GeodeBot") -> None:
    """Load the IndexCog."""
    await bot.add_cog(IndexCog(bot))
    logger.tree("Index Cog Loaded", [
        ("Commands", "/index login, logout, invalidate, profile, mods, admin"),
        ("API", bot.index_client.api_url),
    ], emoji="📦")
