"""
Geode Discord Bot - Quote Views
===============================

Rename and Delete buttons posted under newly created quotes.

DESIGN:
    Both buttons are DynamicItems keyed by the quoted message ID, so
    they keep working after a restart. Permission checks happen on
    click, against the quote as it is stored at that moment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from src.core.constants import QUOTE_NAME_MAX_LENGTH
from src.core.exceptions import MessageError
from src.core.logger import logger
from src.services.quotes import QuoteService
from src.utils.interaction import safe_respond

if TYPE_CHECKING:
    from src.bot import GeodeBot


QUOTE_NOT_FOUND = "❌ Quote not found!"


def _lookup(interaction: discord.Interaction, message_id: int):
    bot: "GeodeBot" = interaction.client  # type: ignore[assignment]
    quote = bot.db.get_quote(message_id)
    if quote is None:
        raise MessageError(QUOTE_NOT_FOUND)
    QuoteService.check_sensitive(interaction.user, quote)
    return bot, quote


# =============================================================================
# Rename Modal
# =============================================================================

class QuoteRenameModal(discord.ui.Modal, title="Rename Quote"):
    """Asks for the new name of a quote."""

    new_name = discord.ui.TextInput(
        label="New Name",
        placeholder="geode creepypasta",
        max_length=QUOTE_NAME_MAX_LENGTH,
    )

    def __init__(self, message_id: int) -> None:
        super().__init__()
        self.message_id = message_id

    async def on_submit(self, interaction: discord.Interaction) -> None:
        try:
            bot, quote = _lookup(interaction, self.message_id)
            reply = bot.quote_service.rename(quote, self.new_name.value, interaction.user)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        await safe_respond(
            interaction,
            reply,
            ephemeral=False,
            allowed_mentions=discord.AllowedMentions.none(),
        )


# =============================================================================
# Dynamic Buttons
# =============================================================================

class QuoteRenameButton(discord.ui.DynamicItem[discord.ui.Button], template=r"quote_rename:(?P<message_id>\d+)"):
    """Opens the rename modal for the quote."""

    def __init__(self, message_id: int) -> None:
        super().__init__(
            discord.ui.Button(
                label="Rename",
                style=discord.ButtonStyle.secondary,
                custom_id=f"quote_rename:{message_id}",
                emoji="✏️",
            )
        )
        self.message_id = message_id

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "QuoteRenameButton":
        return cls(int(match.group("message_id")))

    async def callback(self, interaction: discord.Interaction) -> None:
        try:
            _lookup(interaction, self.message_id)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await interaction.response.send_modal(QuoteRenameModal(self.message_id))


class QuoteDeleteButton(discord.ui.DynamicItem[discord.ui.Button], template=r"quote_delete:(?P<message_id>\d+)"):
    """Deletes the quote."""

    def __init__(self, message_id: int) -> None:
        super().__init__(
            discord.ui.Button(
                label="Delete",
                style=discord.ButtonStyle.danger,
                custom_id=f"quote_delete:{message_id}",
                emoji="🗑️",
            )
        )
        self.message_id = message_id

    @classmethod
    async def from_custom_id(
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match,
    ) -> "QuoteDeleteButton":
        return cls(int(match.group("message_id")))

    async def callback(self, interaction: discord.Interaction) -> None:
        try:
            bot, quote = _lookup(interaction, self.message_id)
            reply = bot.quote_service.delete(quote, interaction.user)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        logger.debug(f"Quote deleted from button by {interaction.user.id}")
        await safe_respond(
            interaction,
            reply,
            ephemeral=False,
            allowed_mentions=discord.AllowedMentions.none(),
        )


class QuoteActionsView(discord.ui.View):
    """Persistent Rename / Delete row for a quote message."""

    def __init__(self, message_id: int) -> None:
        super().__init__(timeout=None)
        self.add_item(QuoteRenameButton(message_id))
        self.add_item(QuoteDeleteButton(message_id))


__all__ = [
    "QuoteActionsView",
    "QuoteDeleteButton",
    "QuoteRenameButton",
    "QuoteRenameModal",
]
