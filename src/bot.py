"""
Geode Discord Bot - Main Bot Class
==================================

Core Discord client for the Geode SDK server: saved quotes, the
"who said this" guess game, sticky roles and mod index commands.
"""

from datetime import datetime
from typing import Optional

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from src.core.config import get_config
from src.core.constants import INDEX_USER_AGENT
from src.core.database import get_db
from src.core.exceptions import MessageError
from src.core.health import HealthCheckServer
from src.core.logger import logger
from src.services.guess import GuessService
from src.services.index_api import IndexClient
from src.services.quotes import QuoteService
from src.services.users import UserNameResolver
from src.utils.error_handler import ErrorHandler
from src.utils.interaction import safe_respond


UNKNOWN_ERROR_MESSAGE = "❌ Unknown error!"


# =============================================================================
# GeodeBot Class
# =============================================================================

class GeodeBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN: Holds the database and every service, so cogs and views
    reach them through `interaction.client`.

    SERVICE INITIALIZATION ORDER:
    1. __init__:
       - Database, user name resolver
       - Quote and guess services
    2. setup_hook (before on_ready):
       - aiohttp session and index client
       - Command and event cog loading
       - Command tree syncing
    3. on_ready:
       - Health Check Server
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        self.config = get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.start_time: datetime = datetime.now()

        self.resolver = UserNameResolver.from_config(
            self,
            max_size=self.config.user_cache_size,
            ttl_seconds=self.config.user_cache_ttl,
        )
        self.quote_service = QuoteService(self)
        self.guess_service = GuessService(
            self.db,
            self.resolver,
            options=self.config.guess_options,
            range_size=self.config.guess_leaderboard_range,
        )

        # Created in setup_hook, which runs inside the event loop
        self.http_session: Optional[aiohttp.ClientSession] = None
        self.index_client: Optional[IndexClient] = None
        self.health_server: Optional[HealthCheckServer] = None

        self._ready_initialized: bool = False

        self.tree.error(self.on_app_command_error)

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Create the HTTP session, load cogs and sync commands before on_ready."""
        self.http_session = aiohttp.ClientSession(headers={"User-Agent": INDEX_USER_AGENT})
        self.index_client = IndexClient(
            self.http_session,
            self.config.index_api_url,
            self.config.index_website_url,
        )

        from src.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
                logger.success(f"Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        try:
            if self.config.test_guild_id:
                guild = discord.Object(id=self.config.test_guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                scope = f"guild {self.config.test_guild_id}"
            else:
                synced = await self.tree.sync()
                scope = "global"
            logger.tree("Commands Synced", [
                ("Count", str(len(synced))),
                ("Scope", scope),
            ], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Start the health server once connected."""
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
        ], emoji="🚀")

        if self.config.health_port:
            self.health_server = HealthCheckServer(self, self.config.health_port)
            await self.health_server.start()

        logger.tree("GEODE READY", [
            ("Quotes", str(self.db.count_quotes())),
            ("Guesses", str(self.db.count_guesses())),
            ("Health Server", "Running" if self.health_server else "Disabled"),
            ("Index API", self.config.index_api_url),
        ], emoji="🔥")

    # =========================================================================
    # Command Errors
    # =========================================================================

    async def on_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Report user-facing errors as is, everything else as "Unknown error"."""
        original = getattr(error, "original", error)

        if isinstance(original, MessageError):
            await safe_respond(interaction, original.message, ephemeral=True)
            return

        if isinstance(error, app_commands.CheckFailure):
            await safe_respond(interaction, "❌ You can't use this command here!", ephemeral=True)
            return

        command = interaction.command
        ErrorHandler.handle(
            original,
            location=f"command.{command.qualified_name if command else 'unknown'}",
            interaction=interaction,
        )
        await safe_respond(interaction, UNKNOWN_ERROR_MESSAGE, ephemeral=True)

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        if self.health_server:
            await self.health_server.stop()

        if self.http_session and not self.http_session.closed:
            await self.http_session.close()

        self.db.close()
        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["GeodeBot"]
