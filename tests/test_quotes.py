"""
Geode Discord Bot - Quote Service Tests
=======================================

Tests for creating, renaming, updating and deleting quotes.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.exceptions import MessageError
from src.services.quotes import QuoteService


def _message(message_id=1001, author_id=1, content="hello world"):
    """A quotable message whose channel can fetch it back."""
    message = MagicMock()
    message.id = message_id
    message.content = content
    message.author.id = author_id
    message.author.bot = False
    message.webhook_id = None
    message.reference = None
    message.attachments = []
    message.embeds = []
    message.components = []
    message.channel.id = 555666777
    message.jump_url = f"https://discord.com/channels/1/555666777/{message_id}"
    message.channel.fetch_message = AsyncMock(return_value=message)
    return message


@pytest.fixture
def service(mock_bot):
    return QuoteService(mock_bot)


class TestCreate:
    """Tests for quoting a message."""

    async def test_create_snapshot(self, service, test_db, mock_discord_user):
        """Test that a message is copied into a numbered quote."""
        quote = await service.create(_message(), mock_discord_user)

        assert quote["id"] == 1
        assert len(quote["name"]) == 7
        stored = test_db.get_quote(1001)
        assert stored["content"] == "hello world"
        assert stored["author_id"] == 1
        assert stored["quoter_id"] == mock_discord_user.id
        assert stored["channel_id"] == 555666777

    async def test_bots_refused(self, service, mock_discord_user):
        """Test that bot messages can't be quoted."""
        message = _message()
        message.author.bot = True
        with pytest.raises(MessageError, match="Can't quote bots!"):
            await service.create(message, mock_discord_user)

    async def test_webhooks_refused(self, service, mock_discord_user):
        """Test that webhook messages can't be quoted."""
        message = _message()
        message.webhook_id = 42
        with pytest.raises(MessageError):
            await service.create(message, mock_discord_user)

    async def test_already_quoted(self, service, mock_discord_user):
        """Test that quoting the same message twice is refused."""
        await service.create(_message(), mock_discord_user)
        with pytest.raises(MessageError, match="already quoted"):
            await service.create(_message(), mock_discord_user)


class TestLookup:
    """Tests for finding quotes and checking permissions."""

    def test_not_found(self, service):
        """Test the error for an unknown quote."""
        with pytest.raises(MessageError, match="Quote not found"):
            service.get("nope")

    def test_quoter_allowed(self, config_env, mock_discord_member):
        """Test that the quoter may change their quote."""
        QuoteService.check_sensitive(mock_discord_member, {"quoter_id": mock_discord_member.id})

    def test_admin_allowed(self, config_env, mock_discord_member):
        """Test that administrators may change any quote."""
        mock_discord_member.guild_permissions.administrator = True
        QuoteService.check_sensitive(mock_discord_member, {"quoter_id": 1})

    def test_developer_allowed(self, config_env, mock_discord_member):
        """Test that the configured developer counts as admin."""
        mock_discord_member.id = 111111111
        QuoteService.check_sensitive(mock_discord_member, {"quoter_id": 1})

    def test_others_refused(self, config_env, mock_discord_member):
        """Test that other members are refused."""
        with pytest.raises(MessageError, match="not the original quoter nor an admin"):
            QuoteService.check_sensitive(mock_discord_member, {"quoter_id": 1})


class TestRename:
    """Tests for renaming quotes."""

    def test_rename(self, service, test_db, quote_factory, mock_discord_user):
        """Test a successful rename."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="old"))
        assert service.rename(quote, " new ", mock_discord_user) == "Quote *old* renamed to **new**!"
        assert test_db.get_quote(1001)["name"] == "new"

    def test_empty_name(self, service, test_db, quote_factory, mock_discord_user):
        """Test that blank names are refused."""
        quote = test_db.add_quote(quote_factory(1001, 1))
        with pytest.raises(MessageError, match="can't be empty"):
            service.rename(quote, "   ", mock_discord_user)

    def test_name_too_long(self, service, test_db, quote_factory, mock_discord_user):
        """Test the length limit."""
        quote = test_db.add_quote(quote_factory(1001, 1))
        with pytest.raises(MessageError, match="longer than 30"):
            service.rename(quote, "x" * 31, mock_discord_user)

    def test_same_name(self, service, test_db, quote_factory, mock_discord_user):
        """Test renaming to the current name."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="same"))
        with pytest.raises(MessageError, match="already named"):
            service.rename(quote, "same", mock_discord_user)

    def test_name_taken(self, service, test_db, quote_factory, mock_discord_user):
        """Test renaming to another quote's name."""
        test_db.add_quote(quote_factory(1001, 1, name="taken"))
        quote = test_db.add_quote(quote_factory(1002, 1, name="mine"))
        with pytest.raises(MessageError, match="already exists"):
            service.rename(quote, "taken", mock_discord_user)


class TestUpdate:
    """Tests for re-snapshotting a quote."""

    async def test_update_keeps_identity(self, service, mock_bot, test_db, quote_factory, mock_discord_user):
        """Test that name, number and quoter survive an update."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="kept", quoter_id=77))
        edited = _message(content="edited text")
        mock_bot.get_channel.return_value = edited.channel

        updated = await service.update(quote, mock_discord_user)

        stored = test_db.get_quote(1001)
        assert stored["content"] == "edited text"
        assert stored["name"] == "kept"
        assert stored["id"] == quote["id"]
        assert stored["quoter_id"] == 77
        assert updated["created_at"] == quote["created_at"]

    async def test_channel_not_set(self, service, test_db, quote_factory, mock_discord_user):
        """Test quotes without a stored channel."""
        quote = test_db.add_quote(quote_factory(1001, 1, channel_id=0))
        with pytest.raises(MessageError, match="channel ID not set"):
            await service.update(quote, mock_discord_user)

    async def test_message_gone(self, service, mock_bot, test_db, quote_factory, mock_discord_user):
        """Test a quote whose message was deleted."""
        quote = test_db.add_quote(quote_factory(1001, 1))
        channel = MagicMock()
        channel.fetch_message = AsyncMock(return_value=None)
        mock_bot.get_channel.return_value = channel

        with pytest.raises(MessageError, match="message 1001 not found"):
            await service.update(quote, mock_discord_user)


class TestDeleteAndFixes:
    """Tests for deletion and manual fixes."""

    def test_delete(self, service, test_db, quote_factory, mock_discord_user):
        """Test deleting a quote."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="gone"))
        assert service.delete(quote, mock_discord_user) == "Deleted quote *gone*!"
        assert test_db.get_quote(1001) is None

    def test_set_author(self, service, test_db, quote_factory):
        """Test changing the recorded author."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="q"))
        assert service.set_author(quote, 9) == "Quote **1: q** author changed to `9`!"
        assert test_db.get_quote(1001)["author_id"] == 9

    def test_clear_last_edited(self, service, test_db, quote_factory):
        """Test forgetting the edit time."""
        quote = test_db.add_quote(quote_factory(1001, 1, name="q"))
        service.clear_last_edited(quote)
        assert test_db.get_quote(1001)["last_edited_at"] is None
