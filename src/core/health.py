"""
Geode Discord Bot - Health Check Server
=======================================

HTTP health check endpoint for external monitoring.

DESIGN:
    A lightweight aiohttp server that uptime checkers can ping to
    verify the bot is running. The /health endpoint returns JSON with
    connection state and a few counters, nothing sensitive.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from aiohttp import web

from src.core.logger import logger, LOG_TZ
from src.core.constants import HEALTH_CHECK_HOST

if TYPE_CHECKING:
    from src.bot import GeodeBot


# =============================================================================
# Health Check Server
# =============================================================================

class HealthCheckServer:
    """
    Simple HTTP health check server for monitoring.

    Attributes:
        bot: Reference to the main bot instance.
        port: Port number for the HTTP server.
        app: aiohttp Application instance.
        runner: aiohttp AppRunner for lifecycle management.
    """

    def __init__(self, bot: "GeodeBot", port: int = 8080) -> None:
        self.bot = bot
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self.app.router.add_get("/health", self.health_handler)
        self.app.router.add_get("/", self.health_handler)

    # =========================================================================
    # Request Handlers
    # =========================================================================

    def build_status(self) -> dict:
        """
        Collect the status payload.

        "healthy" means the gateway connection is ready,
        "starting" means the bot is still logging in.
        """
        is_connected = self.bot.is_ready()
        db = getattr(self.bot, "db", None)

        return {
            "status": "healthy" if is_connected else "starting",
            "bot": "Geode",
            "connected": is_connected,
            "guilds": len(self.bot.guilds),
            "quotes": db.count_quotes() if db is not None else 0,
            "timestamp": datetime.now(LOG_TZ).isoformat(),
        }

    async def health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests."""
        try:
            status = self.build_status()
            logger.debug(f"Health check: {status['status']}")
            return web.json_response(status)

        except Exception as e:
            logger.error("Health Check Error", [
                ("Error", str(e)[:100]),
            ])
            return web.json_response(
                {"status": "error", "error": str(e)},
                status=500,
            )

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start serving. Failures are logged, not raised."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, HEALTH_CHECK_HOST, self.port)
            await site.start()

            logger.tree("Health Server Started", [
                ("Port", str(self.port)),
                ("Endpoint", f"http://{HEALTH_CHECK_HOST}:{self.port}/health"),
            ], emoji="🏥")

        except OSError as e:
            logger.error("Health Server Startup Failed", [
                ("Port", str(self.port)),
                ("Error", str(e)[:100]),
            ])

    async def stop(self) -> None:
        """Stop the server. Safe to call if it never started."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health check server stopped")


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["HealthCheckServer"]
