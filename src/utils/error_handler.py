"""
Geode Discord Bot - Error Handler
=================================

Categorized error logging with recovery hints.

Features:
- Error categorization (Discord, API, Database)
- Recovery suggestions in the log line
- Discord interaction context capture
- Critical error dumps under logs/errors
"""

import json
import sqlite3
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type

import aiohttp
import discord

from src.core.exceptions import IndexAPIError
from src.core.logger import logger, LOGS_DIR, LOG_TZ


class ErrorContext:
    """Captures and formats detailed error context."""

    @staticmethod
    def get_full_context(e: BaseException, location: str, **kwargs) -> Dict[str, Any]:
        """
        Get comprehensive error context.

        Args:
            e: The exception
            location: Where the error occurred
            **kwargs: Additional context (interaction, member, ...)

        Returns:
            Dictionary with full error context
        """
        context: Dict[str, Any] = {
            "timestamp": datetime.now(LOG_TZ).isoformat(),
            "location": location,
            "error_type": type(e).__name__,
            "error_message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python_version": sys.version,
            "additional_context": {
                k: v for k, v in kwargs.items() if not isinstance(v, discord.Interaction)
            },
        }

        interaction = kwargs.get("interaction")
        if isinstance(interaction, discord.Interaction):
            command = interaction.command
            context["discord_context"] = {
                "guild": interaction.guild.name if interaction.guild else "DM",
                "channel": getattr(interaction.channel, "name", str(interaction.channel_id)),
                "user": str(interaction.user),
                "user_id": interaction.user.id,
                "command": command.qualified_name if command else None,
            }

        return context


class ErrorHandler:
    """Error handling with categories and recovery hints."""

    ERROR_CATEGORIES: Dict[str, Tuple[Type[BaseException], ...]] = {
        "discord": (discord.DiscordException,),
        "index": (IndexAPIError,),
        "api": (aiohttp.ClientError, ConnectionError, TimeoutError),
        "database": (sqlite3.Error,),
    }

    RECOVERY_SUGGESTIONS: Dict[str, Tuple[Tuple[Type[BaseException], str], ...]] = {
        "discord": (
            (discord.Forbidden, "Check bot permissions in server settings"),
            (discord.NotFound, "Resource not found - check IDs and channels"),
            (discord.HTTPException, "Discord API issue - will retry automatically"),
        ),
        "index": (
            (IndexAPIError, "Mod index rejected the request - see message"),
        ),
        "api": (
            (aiohttp.ClientConnectionError, "Network connection issue - check connectivity"),
            (TimeoutError, "Request timed out - try again later"),
        ),
        "database": (
            (sqlite3.OperationalError, "Database locked or unreadable - check the data directory"),
            (sqlite3.IntegrityError, "Database constraint violation - check data validity"),
            (sqlite3.Error, "General database error - check database file"),
        ),
    }

    @classmethod
    def categorize_error(cls, e: BaseException) -> str:
        """Return the category name for an exception, or 'general'."""
        for category, error_types in cls.ERROR_CATEGORIES.items():
            if isinstance(e, error_types):
                return category
        return "general"

    @classmethod
    def get_recovery_suggestion(cls, e: BaseException, category: str) -> str:
        """Return a short hint on what to check for this error."""
        for error_type, suggestion in cls.RECOVERY_SUGGESTIONS.get(category, ()):
            if isinstance(e, error_type):
                return suggestion
        return "Unexpected error - check logs for details"

    @classmethod
    def handle(cls, e: BaseException, location: str, critical: bool = False, **context) -> None:
        """
        Log an error with its category, hint and context.

        Args:
            e: The exception
            location: Where the error occurred
            critical: Whether to also dump the full context to disk
            **context: Additional context
        """
        category = cls.categorize_error(e)
        suggestion = cls.get_recovery_suggestion(e, category)
        full_context = ErrorContext.get_full_context(e, location, **context)

        details = [
            ("Category", category.upper()),
            ("Location", location),
            ("Type", full_context["error_type"]),
            ("Error", str(e)[:100]),
            ("Recovery", suggestion),
        ]
        discord_context: Optional[Dict[str, Any]] = full_context.get("discord_context")
        if discord_context:
            details.append(("User", f"{discord_context['user']} ({discord_context['user_id']})"))
            if discord_context["command"]:
                details.append(("Command", discord_context["command"]))

        if critical:
            logger.critical(f"Critical error in {location}: {full_context['error_type']}")
            logger.error("Critical Error", details)
            logger.debug(f"Traceback:\n{full_context['traceback']}")
            cls._store_critical_error(full_context)
        else:
            logger.warning("Handled Error", details)

    @staticmethod
    def _store_critical_error(context: Dict[str, Any]) -> None:
        """Write the full context of a critical error to logs/errors."""
        try:
            error_dir = LOGS_DIR / "errors"
            error_dir.mkdir(exist_ok=True, parents=True)

            timestamp = datetime.now(LOG_TZ).strftime("%Y%m%d_%H%M%S")
            error_file = error_dir / f"error_{timestamp}.json"

            with open(error_file, "w", encoding="utf-8") as f:
                json.dump(context, f, indent=2, default=str)

            logger.info(f"Critical error saved to {error_file}")
        except OSError as save_error:
            logger.critical(f"Failed to save error details: {save_error}")


__all__ = ["ErrorContext", "ErrorHandler"]
