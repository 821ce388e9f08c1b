"""
Geode Discord Bot - Sticky Cog
==============================

Roles that are given back when a member rejoins the server.

DESIGN:
    The role is applied (or removed) first and the database row is
    written second, so a failed Discord call never leaves a row
    behind. restore_sticky_roles() is shared with on_member_join and
    reports per-role progress through an optional callback.
"""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

import discord
from discord import app_commands
from discord.ext import commands

from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import GeodeBot


ProgressCallback = Callable[[str], Awaitable[None]]


async def restore_sticky_roles(
    db,
    member: discord.Member,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """
    Re-apply a member's sticky roles.

    Missing roles and failed grants are logged and skipped.

    Args:
        db: DatabaseManager.
        member: Member to restore roles for.
        progress: Called with one status line per role.

    Returns:
        Number of roles restored.
    """
    async def report(text: str) -> None:
        if progress is not None:
            await progress(text)

    restored = 0
    for role_id in db.get_sticky_roles(member.id):
        role = member.guild.get_role(role_id)
        if role is None:
            logger.warning("Sticky Role Not Found", [
                ("Role ID", str(role_id)),
                ("Member", f"{member} ({member.id})"),
                ("Guild", member.guild.name),
            ])
            await report(f"⚠️ Role *{role_id}* not found")
            continue

        try:
            await member.add_roles(role, reason="Sticky role restore")
        except discord.HTTPException as e:
            logger.error("Sticky Role Restore Failed", [
                ("Role", f"{role.name} ({role.id})"),
                ("Member", f"{member} ({member.id})"),
                ("Error", str(e)[:100]),
            ])
            await report(f"⚠️ Failed to add role {role.mention}")
            continue

        restored += 1
        await report(f"✅ Successfully restored role {role.mention}")
        logger.tree("Sticky Role Restored", [
            ("Role", f"{role.name} ({role.id})"),
            ("Member", f"{member} ({member.id})"),
        ], emoji="📌")

    return restored


class StickyCog(commands.Cog):
    """Add, remove, list and restore sticky roles."""

    def __init__(self, bot: "GeodeBot") -> None:
        self.bot = bot
        self.db = bot.db

    sticky_group = app_commands.Group(
        name="sticky",
        description="Give roles that save after rejoining the server.",
        default_permissions=discord.Permissions(manage_roles=True),
        guild_only=True,
    )

    # =========================================================================
    # Commands
    # =========================================================================

    @sticky_group.command(name="add", description="Adds a sticky role to the user.")
    async def add(self, interaction: discord.Interaction, role: discord.Role, user: discord.Member) -> None:
        if self.db.has_sticky_role(user.id, role.id):
            await interaction.response.send_message("❌ This user already has this role as sticky!", ephemeral=True)
            return

        try:
            await user.add_roles(role, reason=f"Sticky role added by {interaction.user}")
        except discord.HTTPException as e:
            logger.error("Sticky Role Add Failed", [
                ("Role", f"{role.name} ({role.id})"),
                ("User", f"{user} ({user.id})"),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message(f"❌ Failed to add role to user:\n{e.text or e}", ephemeral=True)
            return

        try:
            self.db.add_sticky_role(user.id, role.id)
        except sqlite3.Error as e:
            logger.error("Sticky Role Save Failed", [
                ("Role ID", str(role.id)),
                ("User ID", str(user.id)),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message("❌ Failed to save sticky role!", ephemeral=True)
            return

        await interaction.response.send_message(
            f"✅ Successfully added sticky role {role.mention} to {user.mention}!",
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @sticky_group.command(name="remove", description="Remove a sticky role from the user.")
    async def remove(self, interaction: discord.Interaction, role: discord.Role, user: discord.Member) -> None:
        if not self.db.has_sticky_role(user.id, role.id):
            await interaction.response.send_message("❌ This user does not have this role as sticky!", ephemeral=True)
            return

        try:
            await user.remove_roles(role, reason=f"Sticky role removed by {interaction.user}")
        except discord.HTTPException as e:
            logger.error("Sticky Role Remove Failed", [
                ("Role", f"{role.name} ({role.id})"),
                ("User", f"{user} ({user.id})"),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message(f"❌ Failed to remove role from user:\n{e.text or e}", ephemeral=True)
            return

        try:
            self.db.remove_sticky_role(user.id, role.id)
        except sqlite3.Error as e:
            logger.error("Sticky Role Save Failed", [
                ("Role ID", str(role.id)),
                ("User ID", str(user.id)),
                ("Error", str(e)[:100]),
            ])
            await interaction.response.send_message("❌ Failed to save sticky role!", ephemeral=True)
            return

        await interaction.response.send_message(
            f"✅ Successfully removed sticky role {role.mention} from {user.mention}!",
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @sticky_group.command(name="list", description="List all sticky roles for user.")
    async def list_roles(self, interaction: discord.Interaction, user: discord.Member) -> None:
        role_ids = self.db.get_sticky_roles(user.id)
        if not role_ids:
            await interaction.response.send_message("❌ No sticky roles found!", ephemeral=True)
            return

        lines = "\n".join(f"- <@&{role_id}>" for role_id in role_ids)
        await interaction.response.send_message(
            f"📜 {user.mention}'s sticky roles:\n{lines}",
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @sticky_group.command(name="restore", description="Force restore sticky roles.")
    async def restore(self, interaction: discord.Interaction, user: discord.Member) -> None:
        await interaction.response.send_message(
            f"Restoring sticky roles for {user.mention}",
            allowed_mentions=discord.AllowedMentions.none(),
        )

        async def progress(text: str) -> None:
            await interaction.followup.send(text, allowed_mentions=discord.AllowedMentions.none())

        await restore_sticky_roles(self.db, user, progress)


__all__ = ["StickyCog", "restore_sticky_roles"]
