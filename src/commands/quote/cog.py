"""
Geode Discord Bot - Quote Cog
=============================

The "Quote" context menu and the /quote and /quote-admin commands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import get_config
from src.core.constants import QUOTE_AUTOCOMPLETE_LIMIT
from src.core.exceptions import MessageError
from src.core.logger import logger
from src.services.quotes import quote_full_name, render_quote, send_rendered
from src.utils.interaction import safe_respond

from .views import QuoteActionsView

if TYPE_CHECKING:
    from src.bot import GeodeBot


class QuoteCog(commands.Cog):
    """Quote creation, display and maintenance."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot
        self.config = get_config()
        self.db = bot.db
        self.service = bot.quote_service

        self.quote_ctx = app_commands.ContextMenu(
            name="Quote",
            callback=self._quote_message,
        )
        self.bot.tree.add_command(self.quote_ctx)

    async def cog_unload(self) -> None:
        self.bot.tree.remove_command(self.quote_ctx.name, type=self.quote_ctx.type)

    # =========================================================================
    # Command Groups
    # =========================================================================

    quote_group = app_commands.Group(
        name="quote",
        description="Quote commands.",
    )

    admin_group = app_commands.Group(
        name="quote-admin",
        description="Fix quote metadata.",
        default_permissions=discord.Permissions(administrator=True),
        guild_only=True,
    )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def quote_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        """Quotes whose name or number contains the typed text."""
        quotes = self.db.search_quotes(current, limit=QUOTE_AUTOCOMPLETE_LIMIT)
        return [
            app_commands.Choice(
                name=quote_full_name(q)[:100],
                value=q["name"] or str(q["id"]),
            )
            for q in quotes
        ]

    async def _show(self, interaction: discord.Interaction, quote, view=None) -> None:
        await interaction.response.defer()
        rendered = await render_quote(quote, self.bot, self.bot.resolver)
        await send_rendered(interaction, rendered, view=view)

    # =========================================================================
    # Context Menu
    # =========================================================================

    async def _quote_message(self, interaction: discord.Interaction, message: discord.Message) -> None:
        try:
            quote = await self.service.create(message, interaction.user)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        await self._show(interaction, quote, view=QuoteActionsView(quote["message_id"]))

    # =========================================================================
    # /quote
    # =========================================================================

    @quote_group.command(name="get", description="Gets a quote with the specified name.")
    @app_commands.describe(name="Quote name or number")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def get_quote(self, interaction: discord.Interaction, name: str) -> None:
        try:
            quote = self.service.get(name)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await self._show(interaction, quote)

    @quote_group.command(name="random", description="Gets a random quote.")
    async def random_quote(self, interaction: discord.Interaction) -> None:
        quotes = self.db.random_quotes(1)
        if not quotes:
            await safe_respond(interaction, "❌ There are no quotes yet!", ephemeral=True)
            return
        await self._show(interaction, quotes[0])

    @quote_group.command(name="count", description="Gets the total number of quotes.")
    async def count_quotes(self, interaction: discord.Interaction) -> None:
        total = self.db.count_quotes()
        await safe_respond(interaction, f"There are **{total}** quotes.", ephemeral=False)

    @quote_group.command(name="rename", description="Renames a quote with the specified name.")
    @app_commands.describe(name="Quote name or number", new_name="New quote name")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def rename_quote(self, interaction: discord.Interaction, name: str, new_name: str) -> None:
        try:
            quote = self.service.get(name)
            self.service.check_sensitive(interaction.user, quote)
            reply = self.service.rename(quote, new_name, interaction.user)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, reply, ephemeral=False, allowed_mentions=discord.AllowedMentions.none())

    @quote_group.command(name="delete", description="Deletes a quote with the specified name.")
    @app_commands.describe(name="Quote name or number")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def delete_quote(self, interaction: discord.Interaction, name: str) -> None:
        try:
            quote = self.service.get(name)
            self.service.check_sensitive(interaction.user, quote)
            reply = self.service.delete(quote, interaction.user)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, reply, ephemeral=False, allowed_mentions=discord.AllowedMentions.none())

    @quote_group.command(name="update", description="Updates a quote by re-fetching the message.")
    @app_commands.describe(name="Quote name or number")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def update_quote(self, interaction: discord.Interaction, name: str) -> None:
        try:
            quote = self.service.get(name)
            self.service.check_sensitive(interaction.user, quote)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        await interaction.response.defer()
        try:
            updated = await self.service.update(quote, interaction.user)
        except MessageError as e:
            await interaction.followup.send(e.message)
            return
        await interaction.followup.send(
            f"Updated quote **{quote_full_name(updated)}**!",
            allowed_mentions=discord.AllowedMentions.none(),
        )

    # =========================================================================
    # /quote-admin
    # =========================================================================

    @admin_group.command(name="manual-quoter", description="Sets the quoter of a quote.")
    @app_commands.describe(name="Quote name or number", quoter="New quoter")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def manual_quoter(self, interaction: discord.Interaction, name: str, quoter: discord.User) -> None:
        try:
            reply = self.service.set_quoter(self.service.get(name), quoter.id)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        logger.tree("Quote Quoter Changed", [
            ("Quote", name),
            ("Quoter", f"{quoter} ({quoter.id})"),
            ("By", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="🛠️")
        await safe_respond(interaction, reply, ephemeral=False)

    @admin_group.command(name="manual-author", description="Sets the author of a quote.")
    @app_commands.describe(name="Quote name or number", author="New author")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def manual_author(self, interaction: discord.Interaction, name: str, author: discord.User) -> None:
        try:
            reply = self.service.set_author(self.service.get(name), author.id)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        logger.tree("Quote Author Changed", [
            ("Quote", name),
            ("Author", f"{author} ({author.id})"),
            ("By", f"{interaction.user} ({interaction.user.id})"),
        ], emoji="🛠️")
        await safe_respond(interaction, reply, ephemeral=False)

    @admin_group.command(name="clear-last-edited", description="Clears the last edited date.")
    @app_commands.describe(name="Quote name or number")
    @app_commands.autocomplete(name=quote_autocomplete)
    async def clear_last_edited(self, interaction: discord.Interaction, name: str) -> None:
        try:
            reply = self.service.clear_last_edited(self.service.get(name))
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, reply, ephemeral=False)


__all__ = ["QuoteCog"]
