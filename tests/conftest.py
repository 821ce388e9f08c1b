"""
Geode Discord Bot - Test Fixtures
=================================

Shared fixtures for all tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_geode.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from src.core.database import manager

    # Reset singleton
    manager.DatabaseManager._instance = None

    monkeypatch.setattr(manager, "DB_PATH", temp_db_path)
    monkeypatch.setattr(manager, "DATA_DIR", temp_db_path.parent)

    db = manager.DatabaseManager()

    yield db

    db.close()
    manager.DatabaseManager._instance = None


def make_quote(message_id, author_id, name=None, **overrides):
    """A quote record with sensible defaults."""
    quote = {
        "message_id": message_id,
        "name": name or f"quote{message_id}",
        "channel_id": 555666777,
        "author_id": author_id,
        "quoter_id": 111222333,
        "created_at": 1700000000.0,
        "last_edited_at": 1700000000.0,
        "jump_url": f"https://discord.com/channels/1/555666777/{message_id}",
        "reply_author_id": 0,
        "reply_message_id": 0,
        "reply_content": "",
        "attachments": [],
        "embeds": [],
        "components": [],
        "content": f"message {message_id}",
    }
    quote.update(overrides)
    return quote


@pytest.fixture
def quote_factory():
    """Build quote records: quote_factory(message_id, author_id, **overrides)."""
    return make_quote


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config_env(monkeypatch):
    """Minimal valid environment, with the cached config reset around the test."""
    from src.core.config import reset_config

    monkeypatch.setenv("DISCORD_TOKEN", "test-token")
    monkeypatch.setenv("DEVELOPER_ID", "111111111")
    for name in (
        "TEST_GUILD_ID", "GEODE_API", "GEODE_WEBSITE", "GUESS_TIMEOUT",
        "GUESS_OPTIONS", "GUESS_LEADERBOARD_RANGE", "USER_CACHE_SIZE",
        "USER_CACHE_TTL", "HEALTH_PORT", "ERROR_WEBHOOK_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    reset_config()
    yield monkeypatch
    reset_config()


# =============================================================================
# Discord Objects
# =============================================================================

@pytest.fixture
def mock_discord_user():
    """Create a mock Discord user."""
    user = MagicMock()
    user.id = 123456789
    user.name = "testuser"
    user.global_name = "Test User"
    user.display_name = "Test User"
    user.mention = "<@123456789>"
    user.bot = False
    user.guild_permissions.administrator = False
    return user


@pytest.fixture
def mock_discord_guild():
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = 987654321
    guild.name = "Geode SDK"
    guild.get_role = MagicMock(return_value=None)
    return guild


@pytest.fixture
def mock_discord_member(mock_discord_guild):
    """Create a mock Discord member."""
    member = MagicMock()
    member.id = 123456789
    member.name = "testuser"
    member.global_name = "Test User"
    member.mention = "<@123456789>"
    member.guild = mock_discord_guild
    member.guild_permissions.administrator = False
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    return member


@pytest.fixture
def mock_bot(test_db):
    """Create a mock bot backed by the test database."""
    bot = MagicMock()
    bot.db = test_db
    bot.get_user = MagicMock(return_value=None)
    bot.fetch_user = AsyncMock()
    bot.get_channel = MagicMock(return_value=None)
    bot.fetch_channel = AsyncMock()
    return bot


@pytest.fixture
def mock_discord_interaction(mock_discord_member, mock_discord_guild):
    """Create a mock Discord interaction."""
    interaction = MagicMock()
    interaction.user = mock_discord_member
    interaction.guild = mock_discord_guild
    interaction.client = MagicMock()
    interaction.response = MagicMock()
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.edit_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.original_response = AsyncMock()
    return interaction
