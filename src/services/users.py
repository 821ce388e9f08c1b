"""
Geode Discord Bot - User Name Resolver
======================================

Turns user IDs into display names for guess buttons and "Fix names".

DESIGN:
    Quoted authors are often no longer in any shared guild, so the
    gateway cache misses and the bot has to fetch them over HTTP.
    Results (including "no such user") are kept in a bounded TTL cache
    owned by this resolver. on_user_update invalidates entries.
"""

from datetime import timedelta
from typing import Optional

import discord

from src.core.logger import logger
from src.utils.cache import TTLCache


# Cached marker for users that could not be fetched
_UNRESOLVABLE = ""


def display_name_of(user: discord.abc.User) -> Optional[str]:
    """Global name, falling back to the username."""
    return user.global_name or user.name or None


class UserNameResolver:
    """
    Resolves user IDs to names: gateway cache, then own cache, then HTTP.

    Attributes:
        cache: Name cache; values of "" mean the user does not exist.
    """

    def __init__(self, bot, cache: TTLCache[int, str]) -> None:
        self.bot = bot
        self.cache = cache

    @classmethod
    def from_config(cls, bot, max_size: int, ttl_seconds: int) -> "UserNameResolver":
        return cls(bot, TTLCache(ttl=timedelta(seconds=ttl_seconds), max_size=max_size))

    async def resolve(self, user_id: int) -> Optional[str]:
        """
        Get a user's display name.

        Returns:
            The name, or None if the user does not exist.

        Raises:
            discord.HTTPException: For failures other than NotFound; these
                are not cached.
        """
        user = self.bot.get_user(user_id)
        if user is not None:
            return display_name_of(user)

        cached = self.cache.get(user_id)
        if cached is not None:
            return cached or None

        try:
            fetched = await self.bot.fetch_user(user_id)
        except discord.NotFound:
            self.cache.set(user_id, _UNRESOLVABLE)
            logger.debug(f"User {user_id} not found, cached as unresolvable")
            return None

        name = display_name_of(fetched)
        self.cache.set(user_id, name or _UNRESOLVABLE)
        logger.debug(f"Cached user {user_id} as {name!r} ({len(self.cache)}/{self.cache.max_size})")
        return name

    async def resolve_or_id(self, user_id: int) -> str:
        """Display name, or the ID as text if unresolvable."""
        return await self.resolve(user_id) or str(user_id)

    def invalidate(self, user_id: int) -> bool:
        """Drop one cached name. Returns True if it was cached."""
        return self.cache.delete(user_id)

    def clear(self) -> None:
        """Drop every cached name."""
        self.cache.clear()


__all__ = ["UserNameResolver", "display_name_of"]
