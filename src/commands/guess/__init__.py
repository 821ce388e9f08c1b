"""
Geode Discord Bot - Guess Package
=================================

"Who said this" rounds over saved quotes.

Structure:
    - views.py: Answer buttons, Guess again and Fix names
    - cog.py: GuessCog with /guess play, stats, leaderboards, audit
"""

from typing import TYPE_CHECKING

from src.core.logger import logger

from .cog import GuessCog
from .views import GuessAgainButton

if TYPE_CHECKING:
    from src.bot import GeodeBot

__all__ = ["GuessCog"]


async def setup(bot: "GeodeBot") -> None:
    """Load the GuessCog and register the Guess again button."""
    bot.add_dynamic_items(GuessAgainButton)
    await bot.add_cog(GuessCog(bot))
    logger.tree("Guess Cog Loaded", [
        ("Commands", "/guess play, stats, leaderboards, audit"),
        ("Timeout", f"{bot.config.guess_timeout}s"),
        ("Options", str(bot.config.guess_options)),
    ], emoji="❓")
