"""
Geode Discord Bot - Member Events
=================================

Restores sticky roles on join and keeps cached user names fresh.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.commands.sticky import restore_sticky_roles
from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import GeodeBot


class MemberEvents(commands.Cog):
    """Member event handlers."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        """Silently give back the member's sticky roles."""
        restored = await restore_sticky_roles(self.bot.db, member)
        if restored:
            logger.tree("Sticky Roles Restored On Join", [
                ("Member", f"{member} ({member.id})"),
                ("Guild", member.guild.name),
                ("Roles", str(restored)),
            ], emoji="📌")

    @commands.Cog.listener()
    async def on_user_update(self, before: discord.User, after: discord.User) -> None:
        """Drop the cached display name when a user renames."""
        if before.name != after.name or before.global_name != after.global_name:
            if self.bot.resolver.invalidate(after.id):
                logger.debug(f"User name cache invalidated for {after.id}")

    @commands.Cog.listener()
    async def on_resumed(self) -> None:
        """Forget cached names; renames sent while disconnected were missed."""
        cached = len(self.bot.resolver.cache)
        self.bot.resolver.clear()
        logger.info(f"Bot Connection Resumed (dropped {cached} cached names)")


async def setup(bot: "GeodeBot") -> None:
    """Add the member events cog to the bot."""
    await bot.add_cog(MemberEvents(bot))
    logger.debug("Member Events Loaded")
