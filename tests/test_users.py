"""
Geode Discord Bot - User Resolver Tests
=======================================

Tests for resolving user IDs to display names.
"""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from src.services.users import UserNameResolver, display_name_of


def _user(name, global_name=None):
    user = MagicMock()
    user.name = name
    user.global_name = global_name
    return user


def _not_found():
    response = MagicMock()
    response.status = 404
    response.reason = "Not Found"
    return discord.NotFound(response, "Unknown User")


@pytest.fixture
def bot():
    bot = MagicMock()
    bot.get_user = MagicMock(return_value=None)
    bot.fetch_user = AsyncMock()
    return bot


@pytest.fixture
def resolver(bot):
    return UserNameResolver.from_config(bot, max_size=10, ttl_seconds=3600)


class TestDisplayName:
    """Tests for picking the shown name."""

    def test_prefers_global_name(self):
        """Test that the global name wins."""
        assert display_name_of(_user("fod", "Fod")) == "Fod"

    def test_falls_back_to_username(self):
        """Test users without a global name."""
        assert display_name_of(_user("fod")) == "fod"


class TestResolver:
    """Tests for the cached resolver."""

    async def test_gateway_cache_first(self, resolver, bot):
        """Test that cached users are never fetched."""
        bot.get_user.return_value = _user("alice")
        assert await resolver.resolve(1) == "alice"
        bot.fetch_user.assert_not_awaited()

    async def test_fetch_cached(self, resolver, bot):
        """Test that a fetched name is reused."""
        bot.fetch_user.return_value = _user("bob", "Bob")

        assert await resolver.resolve(2) == "Bob"
        assert await resolver.resolve(2) == "Bob"
        bot.fetch_user.assert_awaited_once_with(2)

    async def test_missing_user_cached(self, resolver, bot):
        """Test that unknown users resolve to None without refetching."""
        bot.fetch_user.side_effect = _not_found()

        assert await resolver.resolve(3) is None
        assert await resolver.resolve(3) is None
        assert bot.fetch_user.await_count == 1

    async def test_http_errors_not_cached(self, resolver, bot):
        """Test that transient failures propagate and are retried next time."""
        response = MagicMock()
        response.status = 500
        response.reason = "Internal Server Error"
        bot.fetch_user.side_effect = discord.HTTPException(response, "boom")

        with pytest.raises(discord.HTTPException):
            await resolver.resolve(4)
        assert 4 not in resolver.cache

    async def test_resolve_or_id(self, resolver, bot):
        """Test the ID fallback."""
        bot.fetch_user.side_effect = _not_found()
        assert await resolver.resolve_or_id(5) == "5"

    async def test_invalidate(self, resolver, bot):
        """Test that invalidated names are fetched again."""
        bot.fetch_user.return_value = _user("carol")
        await resolver.resolve(6)

        assert resolver.invalidate(6) is True
        assert resolver.invalidate(6) is False

        bot.fetch_user.return_value = _user("carol2")
        assert await resolver.resolve(6) == "carol2"

    async def test_cache_bounded(self, resolver, bot):
        """Test that the cache never grows past its size."""
        bot.fetch_user.side_effect = lambda user_id: _user(f"user{user_id}")
        for user_id in range(25):
            await resolver.resolve(user_id + 100)
        assert len(resolver.cache) == 10
