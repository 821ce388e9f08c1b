"""
Geode Discord Bot - Index Review Queue
======================================

Ephemeral pager over pending mods for /index admin pending, with
accept and reject buttons.

DESIGN:
    The queue is fetched one mod per page from the index, so every
    navigation reloads the page instead of keeping a list. Accepting
    or rejecting shrinks the queue; IndexClient.get_pending_page()
    falls back to the last page when the current one is gone. Status
    changes re-check admin rights with the reviewer's stored token,
    since it may have been revoked while the pager was open.
"""

from __future__ import annotations

import random
from typing import List, Optional

import discord

from src.core.config import EmbedColors
from src.core.constants import INDEX_PAGINATOR_TIMEOUT
from src.core.exceptions import MessageError
from src.core.logger import logger
from src.services.index_api import IndexClient, ModDependency, PendingMod, PendingPage

from .views import select_window, stored_token


UNAUTHORIZED_RESPONSES = [
    "❌ [BUZZER]",
    "❌ Your princess is in another castle",
    "❌ Absolutely not",
    "❌ Get lost",
    "❌ Sucks to be you",
    "❌ No admin, laugh at this user",
    "❌ Admin dashboard",
    "❌ Why are we here? Just to suffer?",
    "❌ You hacked the mainframe! Congrats.",
    "❌ You're an admin, Harry",
]

NO_PENDING_MODS = "❌ No pending mods."

STATUS_DONE = {
    "accepted": "accepted",
    "pending": "set to pending",
    "rejected": "rejected",
    "unlisted": "unlisted",
}
STATUS_DOING = {
    "accepted": "accepting",
    "rejected": "rejecting",
}

GD_PLATFORMS = [
    ("win", "Windows"),
    ("android32", "Android (32-bit)"),
    ("android64", "Android (64-bit)"),
    ("mac-intel", "macOS (Intel)"),
    ("mac-arm", "macOS (ARM)"),
]

FIELD_LIMIT = 1024
DESCRIPTION_LIMIT = 4096


async def require_admin(client: IndexClient, token: str) -> None:
    """Raise a MessageError unless the token belongs to an index admin."""
    if not await client.is_admin(token):
        raise MessageError(random.choice(UNAUTHORIZED_RESPONSES))


# =============================================================================
# Embed
# =============================================================================

def _clip(text: str, limit: int = FIELD_LIMIT) -> str:
    return text if len(text) <= limit else text[:limit - 1] + "…"


def _dependency_list(dependencies: List[ModDependency]) -> str:
    if not dependencies:
        return "None"
    return "`" + "`\n`".join(str(d) for d in dependencies) + "`"


def build_pending_embed(client: IndexClient, current: PendingPage) -> discord.Embed:
    """The review card for one pending mod version."""
    mod: PendingMod = current.mod
    embed = discord.Embed(
        title=f"⭐️ {mod.name}" if mod.featured else mod.name,
        description=_clip(mod.description, DESCRIPTION_LIMIT) or None,
        url=f"{client.mod_page_url(mod.id)}?version={mod.version}",
        color=EmbedColors.GEODE,
    )
    embed.set_footer(text=f"Page {current.page} of {current.total}")
    embed.set_thumbnail(url=client.mod_logo_url(mod.id))

    developers = ", ".join(
        f"[{'**' if d.is_owner else ''}{d.display_name}{'**' if d.is_owner else ''}]"
        f"({client.website(f'/mods?developer={d.username}')})"
        for d in mod.developers
    )
    platforms = "\n".join(f"{label}: {mod.gd.get(key) or 'N/A'}" for key, label in GD_PLATFORMS)

    embed.add_field(name="ID", value=mod.id, inline=True)
    embed.add_field(name="Version", value=mod.version, inline=True)
    embed.add_field(name="Geode", value=mod.geode or "N/A", inline=True)
    embed.add_field(name="Early Load", value="Yes" if mod.early_load else "No", inline=True)
    embed.add_field(name="API", value="Yes" if mod.api else "No", inline=True)
    embed.add_field(name="Developers", value=_clip(developers) or "None", inline=True)
    embed.add_field(name="Geometry Dash", value=platforms, inline=False)
    embed.add_field(name="Dependencies", value=_clip(_dependency_list(mod.dependencies)), inline=False)
    embed.add_field(name="Incompatibilities", value=_clip(_dependency_list(mod.incompatibilities)), inline=False)
    embed.add_field(name="Source", value=mod.links.get("source") or mod.repository or "N/A", inline=True)
    embed.add_field(name="Community", value=mod.links.get("community") or "N/A", inline=True)
    embed.add_field(name="Homepage", value=mod.links.get("homepage") or "N/A", inline=True)
    embed.add_field(name="Hash", value=f"`{mod.hash}`" if mod.hash else "N/A", inline=True)
    embed.add_field(name="Download", value=mod.download_link or "N/A", inline=True)
    embed.add_field(
        name="Tags",
        value=_clip("`" + "`, `".join(mod.tags) + "`") if mod.tags else "None",
        inline=True,
    )
    return embed


# =============================================================================
# Modal
# =============================================================================

class ModStatusModal(discord.ui.Modal):
    """Optional reason for accepting or rejecting the shown version."""

    reason = discord.ui.TextInput(
        label="Reason",
        style=discord.TextStyle.paragraph,
        placeholder="Leave blank for no reason",
        required=False,
        max_length=1000,
    )

    def __init__(self, view: "PendingReviewView", status: str) -> None:
        super().__init__(title=f"{status[:-2].capitalize()} Mod")
        self.review = view
        self.status = status

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        view = self.review
        mod = view.current.mod
        reason = self.reason.value.strip() or None

        try:
            token = stored_token(view.db, interaction.user.id)
            await require_admin(view.client, token)
            await view.client.update_version_status(
                token, mod.id, mod.version, self.status, reason,
                context=f"An error occurred while {STATUS_DOING[self.status]} the mod",
            )
        except MessageError as e:
            await interaction.followup.send(e.message, ephemeral=True)
            return

        logger.tree("Mod Version Reviewed", [
            ("Reviewer", f"{interaction.user} ({interaction.user.id})"),
            ("Mod", f"{mod.id} {mod.version}"),
            ("Status", self.status),
            ("Reason", (reason or "None")[:100]),
        ], emoji="📋")

        done = f"✅ Successfully {STATUS_DONE[self.status]} **{mod.name} {mod.version}**!"
        try:
            await view.refresh(interaction, view.current.page, content=done)
        except MessageError as e:
            await interaction.edit_original_response(content=done, embed=None, view=None)
            await interaction.followup.send(e.message, ephemeral=True)


# =============================================================================
# View
# =============================================================================

class PageSelect(discord.ui.Select["PendingReviewView"]):
    """Jump to a page of the queue."""

    def __init__(self) -> None:
        super().__init__(placeholder="Go to page...", min_values=1, max_values=1, row=1)

    async def callback(self, interaction: discord.Interaction) -> None:
        view = self.view
        if view is None:
            return
        await view.navigate(interaction, int(self.values[0]))


class PendingReviewView(discord.ui.View):
    """
    Previous/accept/reject/next buttons and a page select over the queue.

    Only the admin who opened the queue may use it. Paging wraps around.
    """

    def __init__(self, client: IndexClient, db, owner_id: int, current: PendingPage) -> None:
        super().__init__(timeout=INDEX_PAGINATOR_TIMEOUT)
        self.client = client
        self.db = db
        self.owner_id = owner_id
        self.current = current
        self.select = PageSelect()
        self.add_item(self.select)
        self._refresh_select()

    def _refresh_select(self) -> None:
        self.select.options = [
            discord.SelectOption(
                label=str(i + 1),
                value=str(i + 1),
                default=i + 1 == self.current.page,
            )
            for i in select_window(self.current.page - 1, self.current.total)
        ]

    def current_embed(self) -> discord.Embed:
        return build_pending_embed(self.client, self.current)

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.owner_id:
            await interaction.response.send_message("❌ This is not your review queue.", ephemeral=True)
            return False
        return True

    async def refresh(self, interaction: discord.Interaction, page: int, content: Optional[str] = None) -> None:
        """
        Load `page` and edit the deferred message to show it.

        Raises:
            MessageError: If the reviewer logged out or the index fails.
        """
        token = stored_token(self.db, self.owner_id)
        current = await self.client.get_pending_page(token, page)
        if current is None:
            self.stop()
            text = f"{content}\n{NO_PENDING_MODS}" if content else NO_PENDING_MODS
            await interaction.edit_original_response(content=text, embed=None, view=None)
            return

        self.current = current
        self._refresh_select()
        await interaction.edit_original_response(content=content, embed=self.current_embed(), view=self)

    async def navigate(self, interaction: discord.Interaction, page: int) -> None:
        await interaction.response.defer()
        try:
            await self.refresh(interaction, page)
        except MessageError as e:
            await interaction.followup.send(e.message, ephemeral=True)

    @discord.ui.button(label="Previous", emoji="◀️", style=discord.ButtonStyle.primary, row=0)
    async def previous_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        page = self.current.page - 1 if self.current.page > 1 else self.current.total
        await self.navigate(interaction, page)

    @discord.ui.button(label="Accept", emoji="✅", style=discord.ButtonStyle.success, row=0)
    async def accept(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(ModStatusModal(self, "accepted"))

    @discord.ui.button(label="Reject", emoji="❌", style=discord.ButtonStyle.danger, row=0)
    async def reject(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(ModStatusModal(self, "rejected"))

    @discord.ui.button(label="Next", emoji="▶️", style=discord.ButtonStyle.primary, row=0)
    async def next_page(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        page = self.current.page + 1 if self.current.page < self.current.total else 1
        await self.navigate(interaction, page)


__all__ = [
    "NO_PENDING_MODS",
    "STATUS_DONE",
    "UNAUTHORIZED_RESPONSES",
    "ModStatusModal",
    "PendingReviewView",
    "build_pending_embed",
    "require_admin",
]
