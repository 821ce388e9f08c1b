"""
Geode Discord Bot - Guess Cog
=============================

/guess play, stats, leaderboards and audit.

DESIGN:
    A round is one coroutine: post the censored quote with answer
    buttons, wait on the view, record the outcome through
    GuessService, then edit the same message into the result. The
    wait is bounded by the configured guess timeout, and an unanswered
    round is recorded as a timeout.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import EmbedColors, get_config, is_admin
from src.core.constants import LEADERBOARD_SIZE
from src.core.logger import logger
from src.services.guess.messages import (
    NO_STATS_MESSAGE,
    audit_message,
    correct_leaderboard_message,
    profile_message,
    prompt_message,
    result_message,
    streak_leaderboard_message,
)
from src.services.quotes import render_quote, render_quote_censored, send_rendered
from src.services.users import display_name_of
from src.utils.interaction import safe_respond

from .views import GuessResultView, GuessRoundView

if TYPE_CHECKING:
    from src.bot import GeodeBot


NO_QUOTE_MESSAGE = "❌ Couldn't find a quote!"


class GuessCog(commands.Cog):
    """The "who said this" game."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot
        self.config = get_config()
        self.db = bot.db
        self.service = bot.guess_service

    # =========================================================================
    # Command Groups
    # =========================================================================

    guess_group = app_commands.Group(
        name="guess",
        description="Play guess with quotes!",
        guild_only=True,
    )

    leaderboards_group = app_commands.Group(
        name="leaderboards",
        description="Guess leaderboards.",
        parent=guess_group,
    )

    # =========================================================================
    # Rounds
    # =========================================================================

    async def run_round(self, interaction: discord.Interaction) -> None:
        """Play one round for the interaction's user."""
        await interaction.response.defer()

        guess_round = await self.service.start_round()
        if guess_round is None:
            await interaction.followup.send(NO_QUOTE_MESSAGE, ephemeral=True)
            return

        player = interaction.user
        quote = guess_round.quote
        timeout = self.config.guess_timeout

        view = GuessRoundView(player.id, guess_round.candidates, timeout=timeout)
        started_at = time.time()
        message = await send_rendered(
            interaction,
            render_quote_censored(quote),
            content=prompt_message(player.mention),
            view=view,
        )

        await view.wait()
        guessed_at = view.guessed_at or started_at + timeout

        outcome = await self.service.record(
            user_id=player.id,
            quote=quote,
            guess_id=view.guess_id,
            message_id=message.id,
            started_at=started_at,
            guessed_at=guessed_at,
        )

        revealed = await render_quote(quote, self.bot, self.bot.resolver)
        result_view = GuessResultView(quote["author_id"])
        try:
            await message.edit(
                content=result_message(outcome, player.mention, quote["author_id"]),
                embeds=revealed.embeds,
                view=result_view,
                allowed_mentions=discord.AllowedMentions.none(),
            )
            result_view.message = message
        except discord.HTTPException as e:
            logger.warning("Guess Result Not Shown", [
                ("User", f"{player} ({player.id})"),
                ("Message ID", str(message.id)),
                ("Error", str(e)[:100]),
            ])

    @guess_group.command(name="play", description="Try to guess who said this!")
    async def play(self, interaction: discord.Interaction) -> None:
        await self.run_round(interaction)

    # =========================================================================
    # Stats
    # =========================================================================

    @guess_group.command(name="stats", description="Shows some quote related stats.")
    @app_commands.describe(user="User to show stats for (defaults to you)")
    async def stats(self, interaction: discord.Interaction, user: Optional[discord.User] = None) -> None:
        target = user or interaction.user
        description = profile_message(self.db.get_guess_profile(target.id))
        if description is None:
            await safe_respond(interaction, NO_STATS_MESSAGE, ephemeral=True)
            return

        embed = discord.Embed(description=description, color=EmbedColors.QUOTE)
        embed.set_author(name=display_name_of(target) or str(target.id), icon_url=target.display_avatar.url)
        await safe_respond(
            interaction,
            embed=embed,
            ephemeral=False,
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @leaderboards_group.command(name="correct", description="Shows top 10 most correct guesses.")
    async def leaderboard_correct(self, interaction: discord.Interaction) -> None:
        rows = self.db.get_correct_leaderboard(LEADERBOARD_SIZE)
        await safe_respond(
            interaction,
            correct_leaderboard_message(rows),
            ephemeral=False,
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @leaderboards_group.command(name="streak", description="Shows top 10 highest guess streaks.")
    async def leaderboard_streak(self, interaction: discord.Interaction) -> None:
        rows = self.db.get_streak_leaderboard(LEADERBOARD_SIZE)
        await safe_respond(
            interaction,
            streak_leaderboard_message(rows),
            ephemeral=False,
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @guess_group.command(name="audit", description="Compares stored guess counters with guess history.")
    @app_commands.describe(user="User to audit (defaults to you)")
    async def audit(self, interaction: discord.Interaction, user: Optional[discord.User] = None) -> None:
        if not is_admin(interaction.user):
            await safe_respond(interaction, "❌ Only admins can audit guess stats!", ephemeral=True)
            return

        target = user or interaction.user
        audit = self.service.audit(target.id)
        if not audit.consistent:
            logger.warning("Guess Counters Drifted", [
                ("User ID", str(target.id)),
                ("Stored", f"{audit.stored.correct}/{audit.stored.total} streak {audit.stored.streak}/{audit.stored.max_streak}"),
                ("History", f"{audit.history_correct}/{audit.history_total} streak {audit.current}/{audit.best}"),
            ])
        await safe_respond(
            interaction,
            audit_message(target.mention, audit),
            ephemeral=True,
            allowed_mentions=discord.AllowedMentions.none(),
        )


__all__ = ["GuessCog"]
