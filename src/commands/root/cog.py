"""
Geode Discord Bot - Root Cog
============================

/say and /crash.

DESIGN:
    /say prefixes the text with the caller's name so the bot never
    speaks anonymously, and it cannot ping @everyone or roles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from src.core.constants import CRASH_IMAGE_URL
from src.core.logger import logger
from src.utils.interaction import safe_respond

if TYPE_CHECKING:
    from src.bot import GeodeBot


SAY_ALLOWED_MENTIONS = discord.AllowedMentions(everyone=False, roles=False, users=True)


class RootCog(commands.Cog):
    """Ungrouped server commands."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot

    @app_commands.command(name="say", description="Make the bot say something as you.")
    @app_commands.describe(message="What to say.")
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    async def say(self, interaction: discord.Interaction, message: str) -> None:
        name = interaction.user.global_name or interaction.user.name
        logger.tree("Say Command", [
            ("User", f"{interaction.user} ({interaction.user.id})"),
            ("Channel", str(interaction.channel_id)),
            ("Message", message[:100]),
        ], emoji="💬")
        await safe_respond(
            interaction,
            f"`@{name}`: {message}",
            ephemeral=False,
            allowed_mentions=SAY_ALLOWED_MENTIONS,
        )

    @app_commands.command(name="crash", description="my mod is crashing")
    @app_commands.guild_only()
    async def crash(self, interaction: discord.Interaction) -> None:
        await safe_respond(interaction, CRASH_IMAGE_URL, ephemeral=False)


__all__ = ["RootCog"]
