"""
Geode Discord Bot - Mod Paginator
=================================

Ephemeral embed pager for /index mods pending and published, and the
stored-token lookup every logged-in command shares.
"""

from __future__ import annotations

from typing import List

import discord

from src.core.config import EmbedColors
from src.core.constants import INDEX_PAGINATOR_TIMEOUT, INDEX_SELECT_LIMIT
from src.core.exceptions import MessageError
from src.services.index_api import IndexClient, IndexMod


LOGIN_REQUIRED = "❌ You must log in to your Geode account first."


def stored_token(db, user_id: int) -> str:
    """The user's index token, or a MessageError asking them to log in."""
    token = db.get_index_token(user_id)
    if token is None:
        raise MessageError(LOGIN_REQUIRED)
    return token


def build_mod_embed(
    client: IndexClient,
    mod: IndexMod,
    page: int,
    total: int,
    published: bool,
) -> discord.Embed:
    """One page of the paginator; `page` is zero-based."""
    title = f"⭐️ {mod.name}" if mod.featured else mod.name
    embed = discord.Embed(
        title=title,
        url=client.mod_page_url(mod.id),
        color=EmbedColors.GEODE,
    )
    versions = ", ".join(f"`{v.version}`" for v in mod.versions)
    embed.add_field(
        name="Published versions" if published else "Pending versions",
        value=versions or "-",
        inline=False,
    )
    embed.set_thumbnail(url=client.mod_logo_url(mod.id))
    embed.set_footer(text=f"Page {page + 1} of {total}")
    return embed


def select_window(page: int, total: int, limit: int = INDEX_SELECT_LIMIT) -> range:
    """Indices shown in the select menu, centered on the current page."""
    if total <= limit:
        return range(total)
    start = max(0, min(page - limit // 2, total - limit))
    return range(start, start + limit)


class ModSelect(discord.ui.Select["ModPaginatorView"]):
    """Jump straight to a mod."""

    def __init__(self) -> None:
        super().__init__(placeholder="Select a mod...", min_values=1, max_values=1, row=1)

    async def callback(self, interaction: discord.Interaction) -> None:
        view = self.view
        if view is None:
            return
        view.page = int(self.values[0])
        await view.show(interaction)


class ModPaginatorView(discord.ui.View):
    """
    Previous/next buttons and a select menu over a list of mods.

    Paging wraps around at both ends.
    """

    def __init__(self, client: IndexClient, mods: List[IndexMod], published: bool) -> None:
        super().__init__(timeout=INDEX_PAGINATOR_TIMEOUT)
        self.client = client
        self.mods = mods
        self.published = published
        self.page = 0
        self.select = ModSelect()
        self.add_item(self.select)
        self._refresh_select()

    def _refresh_select(self) -> None:
        self.select.options = [
            discord.SelectOption(
                label=self.mods[i].name[:100] or self.mods[i].id[:100],
                value=str(i),
                default=i == self.page,
            )
            for i in select_window(self.page, len(self.mods))
        ]

    def current_embed(self) -> discord.Embed:
        return build_mod_embed(
            self.client,
            self.mods[self.page],
            self.page,
            len(self.mods),
            self.published,
        )

    async def show(self, interaction: discord.Interaction) -> None:
        self._refresh_select()
        await interaction.response.edit_message(embed=self.current_embed(), view=self)

    @discord.ui.button(emoji="◀️", style=discord.ButtonStyle.primary, row=0)
    async def previous_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.page = (self.page - 1) % len(self.mods)
        await self.show(interaction)

    @discord.ui.button(emoji="▶️", style=discord.ButtonStyle.primary, row=0)
    async def next_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        self.page = (self.page + 1) % len(self.mods)
        await self.show(interaction)


__all__ = ["LOGIN_REQUIRED", "ModPaginatorView", "build_mod_embed", "select_window", "stored_token"]
