"""
Geode Discord Bot - Retry Utilities
===================================

Retry logic for Discord and HTTP calls with exponential backoff.
"""

import asyncio
from typing import Any, Callable, Optional, Tuple, Type

import aiohttp
import discord

from src.core.logger import logger


# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    discord.HTTPException,
    asyncio.TimeoutError,
    ConnectionError,
)

# Transport failures talking to the mod index; HTTP status errors are not retried
HTTP_RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
)


async def retry_async(
    coro_func: Callable[..., Any],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    exceptions: Tuple[Type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    **kwargs,
) -> Any:
    """
    Retry an async function with exponential backoff.

    Args:
        coro_func: Async function to call.
        *args: Arguments to pass to the function.
        max_retries: Maximum number of retry attempts.
        base_delay: Initial delay between retries (seconds).
        max_delay: Maximum delay between retries (seconds).
        exceptions: Exception types that trigger a retry.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Result of the coroutine function.

    Raises:
        The last exception if all retries fail.
    """
    last_exception: Optional[BaseException] = None

    for attempt in range(max_retries + 1):
        try:
            return await coro_func(*args, **kwargs)
        except exceptions as e:
            last_exception = e

            if attempt < max_retries:
                # 1s, 2s, 4s ... capped at max_delay
                delay = min(base_delay * (2 ** attempt), max_delay)
                logger.warning(f"Retry {attempt + 1}/{max_retries}: {type(e).__name__} - retrying in {delay:.1f}s")
                await asyncio.sleep(delay)
            else:
                logger.error(f"All {max_retries} retries failed: {type(e).__name__}: {e}")

    raise last_exception


async def safe_fetch_channel(bot, channel_id: int) -> Optional[discord.abc.GuildChannel]:
    """
    Get a channel from cache or fetch it with retries.

    Returns:
        Channel object or None if missing or inaccessible.
    """
    if not channel_id:
        return None

    channel = bot.get_channel(channel_id)
    if channel:
        return channel

    try:
        return await retry_async(
            bot.fetch_channel,
            channel_id,
            max_retries=2,
            base_delay=0.5,
            exceptions=(asyncio.TimeoutError, ConnectionError),
        )
    except (discord.NotFound, discord.Forbidden):
        return None
    except discord.HTTPException as e:
        logger.error(f"Failed to fetch channel {channel_id}: {e}")
        return None


async def safe_fetch_message(
    channel: discord.abc.Messageable,
    message_id: int,
) -> Optional[discord.Message]:
    """
    Fetch a message with retries.

    Returns:
        Message object or None if missing or inaccessible.
    """
    if not channel or not message_id:
        return None

    try:
        return await retry_async(
            channel.fetch_message,
            message_id,
            max_retries=2,
            base_delay=0.5,
            exceptions=(asyncio.TimeoutError, ConnectionError),
        )
    except (discord.NotFound, discord.Forbidden):
        return None
    except discord.HTTPException as e:
        logger.error(f"Failed to fetch message {message_id}: {e}")
        return None


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "retry_async",
    "safe_fetch_channel",
    "safe_fetch_message",
    "RETRYABLE_EXCEPTIONS",
    "HTTP_RETRYABLE_EXCEPTIONS",
]
