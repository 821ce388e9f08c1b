"""
Geode Discord Bot - Index Cog
=============================

/index commands: proxy a user's mod index account through the bot.

DESIGN:
    The user's index token is stored per Discord user. Every command
    other than login needs it. All replies are ephemeral, since they
    concern the user's own account. IndexClient errors already carry
    the text to show, so handlers just forward e.message. Admin
    commands check GET /v1/me on every call, so a revoked admin loses
    access at once.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.constants import INDEX_MOD_STATUSES
from src.core.exceptions import MessageError
from src.core.logger import logger
from src.utils.interaction import safe_defer, safe_respond

from .admin_views import NO_PENDING_MODS, STATUS_DONE, PendingReviewView, require_admin
from .views import ModPaginatorView, stored_token

if TYPE_CHECKING:
    from src.bot import GeodeBot


NOT_LOGGED_IN = "❌ You are not logged in."
LOGIN_STATUS_FAILED = "❌ An error occurred while updating login status."


class IndexCog(commands.Cog):
    """Log in to the mod index and manage your mods from Discord."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot
        self.db = bot.db
        self.client = bot.index_client

    # =========================================================================
    # Command Groups
    # =========================================================================

    index_group = app_commands.Group(
        name="index",
        description="Interact with the Geode mod index.",
    )

    profile_group = app_commands.Group(
        name="profile",
        description="Interact with your index profile.",
        parent=index_group,
    )

    mods_group = app_commands.Group(
        name="mods",
        description="Interact with your mods on the Geode index.",
        parent=index_group,
    )

    admin_group = app_commands.Group(
        name="admin",
        description="Administrate the Geode mod index.",
        parent=index_group,
    )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _token(self, interaction: discord.Interaction) -> str:
        return stored_token(self.db, interaction.user.id)

    async def _admin_token(self, interaction: discord.Interaction) -> str:
        """Stored token of a logged-in admin; defers the interaction."""
        token = self._token(interaction)
        await safe_defer(interaction, ephemeral=True, thinking=True)
        await require_admin(self.client, token)
        return token

    async def status_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> List[app_commands.Choice[str]]:
        return [
            app_commands.Choice(name=status, value=status)
            for status in INDEX_MOD_STATUSES
            if current.lower() in status
        ]

    def _forget_token(self, interaction: discord.Interaction) -> str:
        """Delete the stored token and return it."""
        try:
            token = self.db.delete_index_token(interaction.user.id)
        except sqlite3.Error as e:
            logger.error("Index Logout Failed", [
                ("User ID", str(interaction.user.id)),
                ("Error", str(e)[:100]),
            ])
            raise MessageError(LOGIN_STATUS_FAILED)
        if token is None:
            raise MessageError(NOT_LOGGED_IN)
        return token

    async def _show_mods(self, interaction: discord.Interaction, status: str) -> None:
        published = status == "accepted"
        label = "published" if published else "pending"
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            mods = await self.client.get_my_mods(token, status)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        if not mods:
            await safe_respond(interaction, f"❌ You have no {label} mods!", ephemeral=True)
            return

        view = ModPaginatorView(self.client, mods, published=published)
        await safe_respond(interaction, embed=view.current_embed(), view=view, ephemeral=True)

    # =========================================================================
    # Account
    # =========================================================================

    @index_group.command(name="login", description="Log in to your Geode account.")
    @app_commands.describe(token="Token to log in with.")
    async def login(self, interaction: discord.Interaction, token: str) -> None:
        await safe_defer(interaction, ephemeral=True, thinking=True)
        try:
            payload = await self.client.get_me(token)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        try:
            self.db.set_index_token(interaction.user.id, token)
        except sqlite3.Error as e:
            logger.error("Index Token Save Failed", [
                ("User ID", str(interaction.user.id)),
                ("Error", str(e)[:100]),
            ])
            await safe_respond(interaction, "❌ An error occurred while saving your token.", ephemeral=True)
            return

        display_name = payload.get("display_name") if isinstance(payload, dict) else None
        logger.tree("Index Login", [
            ("User", f"{interaction.user} ({interaction.user.id})"),
            ("Index Name", str(display_name)),
        ], emoji="🔑")
        await safe_respond(interaction, f"✅ Successfully logged in as **{display_name}**!", ephemeral=True)

    @index_group.command(name="logout", description="Log out of your Geode account.")
    @app_commands.describe(invalidate="Whether to invalidate the token.")
    async def logout(self, interaction: discord.Interaction, invalidate: bool = False) -> None:
        try:
            token = self._forget_token(interaction)
            if not invalidate:
                await safe_respond(interaction, "✅ Successfully logged out!", ephemeral=True)
                return
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.invalidate_token(token)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully logged out and invalidated token!", ephemeral=True)

    @index_group.command(name="invalidate", description="Log out and invalidate all tokens.")
    async def invalidate(self, interaction: discord.Interaction) -> None:
        try:
            token = self._forget_token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.invalidate_all_tokens(token)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully invalidated all tokens!", ephemeral=True)

    @profile_group.command(name="rename", description="Change your Geode display name.")
    @app_commands.describe(name="New display name.")
    async def profile_rename(self, interaction: discord.Interaction, name: str) -> None:
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.update_display_name(token, name)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, f"✅ Successfully updated your display name to **{name}**!", ephemeral=True)

    # =========================================================================
    # Mods
    # =========================================================================

    @mods_group.command(name="create", description="Create a new mod on the Geode index.")
    @app_commands.describe(download_link="Download link to the .geode file.")
    async def mods_create(self, interaction: discord.Interaction, download_link: str) -> None:
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.create_mod(token, download_link)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully created your mod!", ephemeral=True)

    @mods_group.command(name="update", description="Update an existing mod on the Geode index.")
    @app_commands.describe(download_link="Download link to the .geode file.")
    async def mods_update(self, interaction: discord.Interaction, download_link: str) -> None:
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            mod_id = await self.client.download_mod_id(download_link)
            await self.client.create_version(token, mod_id, download_link)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully updated your mod!", ephemeral=True)

    @mods_group.command(name="add-dev", description="Add a developer to an existing mod on the Geode index.")
    @app_commands.describe(mod_id="ID of the mod.", username="Username of the developer.")
    async def mods_add_dev(self, interaction: discord.Interaction, mod_id: str, username: str) -> None:
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.add_developer(token, mod_id, username)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully added developer to mod!", ephemeral=True)

    @mods_group.command(name="remove-dev", description="Remove a developer from an existing mod on the Geode index.")
    @app_commands.describe(mod_id="ID of the mod.", username="Username of the developer.")
    async def mods_remove_dev(self, interaction: discord.Interaction, mod_id: str, username: str) -> None:
        try:
            token = self._token(interaction)
            await safe_defer(interaction, ephemeral=True, thinking=True)
            await self.client.remove_developer(token, mod_id, username)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return
        await safe_respond(interaction, "✅ Successfully removed developer from mod!", ephemeral=True)

    @mods_group.command(name="pending", description="View your pending mods on the Geode index.")
    async def mods_pending(self, interaction: discord.Interaction) -> None:
        await self._show_mods(interaction, "pending")

    @mods_group.command(name="published", description="View your published mods on the Geode index.")
    async def mods_published(self, interaction: discord.Interaction) -> None:
        await self._show_mods(interaction, "accepted")

    # =========================================================================
    # Administration
    # =========================================================================

    @admin_group.command(name="verify", description="Verify/Unverify a developer on the Geode mod index.")
    @app_commands.describe(developer="Developer to verify/unverify.", verified="Verification status.")
    async def admin_verify(self, interaction: discord.Interaction, developer: str, verified: bool) -> None:
        prefix = "" if verified else "un"
        try:
            token = await self._admin_token(interaction)
            dev = await self.client.find_developer(token, developer)
            if bool(dev.get("verified")) == verified:
                raise MessageError(f"❌ Developer is already {prefix}verified.")
            await self.client.set_developer_verified(token, dev.get("id"), verified)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        display_name = dev.get("display_name") or dev.get("username")
        logger.tree("Index Developer Verification", [
            ("Admin", f"{interaction.user} ({interaction.user.id})"),
            ("Developer", str(display_name)),
            ("Verified", str(verified)),
        ], emoji="🛡️")
        await safe_respond(
            interaction,
            f"✅ Successfully {prefix}verified developer **{display_name}**!",
            ephemeral=True,
        )

    @admin_group.command(name="update", description="Update a mod version's status on the Geode mod index.")
    @app_commands.describe(
        id="Mod ID.",
        version="Mod version.",
        status="New status.",
        reason="Reason for status change.",
    )
    @app_commands.autocomplete(status=status_autocomplete)
    async def admin_update(
        self,
        interaction: discord.Interaction,
        id: str,
        version: str,
        status: str,
        reason: Optional[str] = None,
    ) -> None:
        if status not in INDEX_MOD_STATUSES:
            await safe_respond(
                interaction,
                f"❌ Status must be one of: {', '.join(INDEX_MOD_STATUSES)}.",
                ephemeral=True,
            )
            return

        try:
            token = await self._admin_token(interaction)
            await self.client.update_version_status(token, id, version, status, reason)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        logger.tree("Index Version Status Updated", [
            ("Admin", f"{interaction.user} ({interaction.user.id})"),
            ("Mod", f"{id} {version}"),
            ("Status", status),
        ], emoji="📋")
        await safe_respond(
            interaction,
            f"✅ Successfully {STATUS_DONE[status]} mod version **{version}**!",
            ephemeral=True,
        )

    @admin_group.command(name="pending", description="Review pending mods on the Geode mod index.")
    async def admin_pending(self, interaction: discord.Interaction) -> None:
        try:
            token = await self._admin_token(interaction)
            current = await self.client.get_pending_page(token, 1)
        except MessageError as e:
            await safe_respond(interaction, e.message, ephemeral=True)
            return

        if current is None:
            await safe_respond(interaction, NO_PENDING_MODS, ephemeral=True)
            return

        view = PendingReviewView(self.client, self.db, interaction.user.id, current)
        await safe_respond(interaction, embed=view.current_embed(), view=view, ephemeral=True)


__all__ = ["IndexCog"]
