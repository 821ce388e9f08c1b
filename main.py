#!/usr/bin/env python3
"""
Geode Discord Bot - Entry Point
===============================

Loads the environment, validates configuration and runs the bot.
"""

import asyncio
import sys

from dotenv import load_dotenv

from src.core.config import ConfigValidationError, get_config, validate_and_log_config
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler


async def main() -> None:
    """
    Main entry point for the Geode Discord bot.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates required settings
    3. Initializes the bot instance
    4. Connects to Discord and runs until interrupted

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start
    """
    load_dotenv()

    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Invalid Configuration", [("Error", str(e))])
        sys.exit(1)

    config = get_config()
    logger.set_webhook(config.error_webhook_url)

    logger.tree("GEODE STARTING", [
        ("Index API", config.index_api_url),
        ("Test Guild", str(config.test_guild_id) if config.test_guild_id else "None (global sync)"),
    ], emoji="🔥")

    from src.bot import GeodeBot

    bot = GeodeBot()
    try:
        async with bot:
            await bot.start(config.discord_token)
    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.main",
            critical=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (Ctrl+C)")
