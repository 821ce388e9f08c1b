"""
Geode Discord Bot - Guess Views
===============================

Answer buttons for a running round and the buttons shown after it.

DESIGN:
    GuessRoundView lives only as long as the round: it records the
    first valid click and stops. "Guess again!" is a DynamicItem so it
    keeps working on old result messages after the result view times
    out or the bot restarts. "Fix names" is short-lived and holds the
    round's author in memory.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, List, Optional

import discord

from src.core.constants import GUESS_FIX_NAMES_TIMEOUT, TIMEOUT_GUESS_ID
from src.core.logger import logger
from src.services.guess import RosterEntry
from src.services.guess.messages import fix_names, shown_user_id
from src.utils.interaction import safe_respond

if TYPE_CHECKING:
    from src.bot import GeodeBot


NOT_PLAYER_MESSAGE = "❌ Only the user that started the game can make a guess!"


# =============================================================================
# Round View
# =============================================================================

class GuessButton(discord.ui.Button["GuessRoundView"]):
    """One answer option."""

    def __init__(self, entry: RosterEntry) -> None:
        super().__init__(
            label=entry.name[:80],
            style=discord.ButtonStyle.secondary,
            custom_id=f"guess_button:{entry.user_id}",
        )
        self.user_id = entry.user_id

    async def callback(self, interaction: discord.Interaction) -> None:
        view = self.view
        if view is None or view.guess_id != TIMEOUT_GUESS_ID:
            await interaction.response.defer()
            return
        view.guess_id = self.user_id
        view.guessed_at = time.time()
        await interaction.response.defer()
        view.stop()


class GuessRoundView(discord.ui.View):
    """
    Answer buttons for one round.

    Attributes:
        guess_id: The picked user, or TIMEOUT_GUESS_ID if nobody picked.
        guessed_at: When the pick happened.
    """

    def __init__(self, player_id: int, candidates: List[RosterEntry], timeout: float) -> None:
        super().__init__(timeout=timeout)
        self.player_id = player_id
        self.guess_id: int = TIMEOUT_GUESS_ID
        self.guessed_at: Optional[float] = None
        for entry in candidates:
            self.add_item(GuessButton(entry))

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.player_id:
            await safe_respond(interaction, NOT_PLAYER_MESSAGE, ephemeral=True)
            return False
        return True


# =============================================================================
# Result View
# =============================================================================

class GuessAgainButton(discord.ui.DynamicItem[discord.ui.Button], template=r"guess_again"):
    """Starts a new round for whoever presses it."""

    def __init__(self) -> None:
        super().__init__(
            discord.ui.Button(
                label="Guess again!",
                style=discord.ButtonStyle.primary,
                custom_id="guess_again",
                emoji="❓",
            )
        )

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "GuessAgainButton":
        return cls()

    async def callback(self, interaction: discord.Interaction) -> None:
        cog = interaction.client.get_cog("GuessCog")
        if cog is None:
            await safe_respond(interaction, "❌ The guess game is not available right now.", ephemeral=True)
            return
        await cog.run_round(interaction)


class FixNamesButton(discord.ui.Button["GuessResultView"]):
    """Swaps the mention in the result text for plain names."""

    def __init__(self) -> None:
        super().__init__(
            label="Fix names",
            style=discord.ButtonStyle.secondary,
            emoji="🔧",
        )

    async def callback(self, interaction: discord.Interaction) -> None:
        view = self.view
        message = interaction.message
        if view is None or message is None:
            await safe_respond(interaction, "❌ Failed to fix names: interaction is not from a message..?")
            return

        shown_id = shown_user_id(message.content)
        if shown_id is None:
            await safe_respond(interaction, "❌ Failed to fix names: unable to detect showed ID!")
            return

        bot: "GeodeBot" = interaction.client  # type: ignore[assignment]
        author_name = await bot.resolver.resolve_or_id(view.author_id)
        shown_name = None if shown_id == view.author_id else await bot.resolver.resolve_or_id(shown_id)

        content = fix_names(message.content, view.author_id, author_name, shown_name)
        if content is None:
            await safe_respond(interaction, "❌ Failed to fix names: unable to detect showed ID!")
            return

        view.remove_item(self)
        view.stop()
        await interaction.response.edit_message(
            content=content,
            view=view,
            allowed_mentions=discord.AllowedMentions.none(),
        )


class GuessResultView(discord.ui.View):
    """Guess again plus a Fix names button that expires quickly."""

    def __init__(self, author_id: int) -> None:
        super().__init__(timeout=GUESS_FIX_NAMES_TIMEOUT)
        self.author_id = author_id
        self.message: Optional[discord.Message] = None
        self.fix_names_button = FixNamesButton()
        self.add_item(GuessAgainButton())
        self.add_item(self.fix_names_button)

    async def on_timeout(self) -> None:
        if self.message is None:
            return
        self.remove_item(self.fix_names_button)
        try:
            await self.message.edit(view=self)
        except discord.HTTPException as e:
            logger.debug(f"Could not drop Fix names button: {e}")


__all__ = [
    "GuessAgainButton",
    "GuessButton",
    "GuessResultView",
    "GuessRoundView",
    "FixNamesButton",
    "NOT_PLAYER_MESSAGE",
]
