"""
Geode Discord Bot - Quote Package
=================================

Quote messages and browse saved quotes.

Structure:
    - views.py: Rename/Delete dynamic buttons and the rename modal
    - cog.py: QuoteCog with the context menu and slash commands
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import QuoteCog
from .views import QuoteDeleteButton, QuoteRenameButton

if TYPE_CHECKING:
    from src.bot import GeodeBot

__all__ = ["QuoteCog"]


async def setup(bot: "GeodeBot") -> None:
    """Load the QuoteCog and register its persistent buttons."""
    bot.add_dynamic_items(QuoteRenameButton, QuoteDeleteButton)
    await bot.add_cog(QuoteCog(bot))
    logger.tree("Quote Cog Loaded", [
        ("Commands", "Quote (context menu), /quote, /quote-admin"),
        ("Buttons", "Rename, Delete"),
    ], emoji="💬")
