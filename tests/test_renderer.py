"""
Geode Discord Bot - Quote Renderer Tests
========================================

Tests for quote embeds, censoring and follow-up links.
"""

from unittest.mock import AsyncMock, MagicMock

from src.core.config import EmbedColors
from src.core.constants import CENSORED_TEXT
from src.services.quotes.renderer import (
    GALLERY_URL,
    build_description,
    build_embeds,
    build_link_messages,
    prepare_render,
    prepare_render_censored,
    quote_full_name,
    render_quote,
)


def _file(index, content_type):
    return {
        "id": index,
        "filename": f"file{index}",
        "size": 1,
        "url": f"https://cdn.example.com/file{index}",
        "content_type": content_type,
        "description": None,
        "is_spoiler": False,
    }


class TestFullName:
    """Tests for quote naming."""

    def test_with_name(self):
        """Test number and name."""
        assert quote_full_name({"id": 12, "name": "geode creepypasta"}) == "12: geode creepypasta"

    def test_without_name(self):
        """Test a quote with an empty name."""
        assert quote_full_name({"id": 12, "name": ""}) == "12"


class TestDescription:
    """Tests for the main embed text."""

    def test_reply_and_content(self, quote_factory):
        """Test that the reply is quoted above the content."""
        quote = quote_factory(1001, 1, id=3, content="it crashes", reply_author_id=2,
                              reply_message_id=900, reply_content="what does this do\nsecond line")
        data = prepare_render(quote, "help", "quoter")

        assert build_description(data) == (
            "> <@2>: what does this do\n"
            "> second line\n"
            "it crashes\n"
            "\n"
            "\\- <@1> in `#help` [>>](https://discord.com/channels/1/555666777/1001)"
        )

    def test_attribution_only(self, quote_factory):
        """Test a quote without text."""
        quote = quote_factory(1001, 1, id=3, content="   ", jump_url=None)
        data = prepare_render(quote, None, None)
        assert build_description(data) == "\\- <@1> in `#<unknown>`"
        assert data.quoter == "<unknown>"

    def test_reply_needs_all_fields(self, quote_factory):
        """Test that a reply without content is not shown."""
        quote = quote_factory(1001, 1, id=3, reply_author_id=2, reply_message_id=900, reply_content="")
        assert prepare_render(quote, "help", None).reply_author is None


class TestCensored:
    """Tests for the form shown during a guess round."""

    def test_hides_author_hints(self, quote_factory):
        """Test that names, channel, link and date are hidden."""
        quote = quote_factory(1001, 1, id=3, name="secret", reply_author_id=2,
                              reply_message_id=900, reply_content="hi")
        data = prepare_render_censored(quote)
        description = build_description(data)

        assert data.full_name == CENSORED_TEXT
        assert data.jump_url is None
        assert "<@1>" not in description
        assert "<@2>" not in description
        assert f"> {CENSORED_TEXT}: hi" in description
        assert data.created_at.year != 2023

    def test_content_kept(self, quote_factory):
        """Test that the quoted text itself is still visible."""
        quote = quote_factory(1001, 1, id=3, content="guess me")
        assert prepare_render_censored(quote).content == "guess me"


class TestEmbeds:
    """Tests for embed layout."""

    def test_single_embed(self, quote_factory):
        """Test a text-only quote."""
        quote = quote_factory(1001, 1, id=3, name="hello")
        embeds = build_embeds(prepare_render(quote, "general", "quoter"))

        assert len(embeds) == 1
        assert embeds[0].author.name == "3: hello"
        assert embeds[0].footer.text == "quoter"
        assert embeds[0].color.value == EmbedColors.QUOTE

    def test_gallery_chunks(self, quote_factory):
        """Test that images are grouped four to a gallery."""
        files = [_file(i, "image/png") for i in range(6)]
        quote = quote_factory(1001, 1, id=3, attachments=files)
        embeds = build_embeds(prepare_render(quote, "general", None))

        assert len(embeds) == 6
        assert [e.url for e in embeds] == [GALLERY_URL.format(index=0)] * 4 + [GALLERY_URL.format(index=1)] * 2
        assert embeds[5].image.url == "https://cdn.example.com/file5"
        assert embeds[0].description is not None
        assert embeds[1].description is None


class TestLinkMessages:
    """Tests for media sent after the embeds."""

    def test_videos_then_files_then_embeds(self, quote_factory):
        """Test the order of follow-up links."""
        files = [_file(0, "application/zip"), _file(1, "video/mp4"), _file(2, "image/png")]
        quote = quote_factory(1001, 1, id=3, attachments=files, embeds=[{"url": "https://geode-sdk.org"}, {}])
        messages = build_link_messages(prepare_render(quote, "general", None))

        assert messages == [
            "https://cdn.example.com/file1\n"
            "https://cdn.example.com/file0\n"
            "https://geode-sdk.org"
        ]

    def test_split_by_five(self, quote_factory):
        """Test that at most five links go in one message."""
        files = [_file(i, "video/mp4") for i in range(7)]
        quote = quote_factory(1001, 1, id=3, attachments=files)
        messages = build_link_messages(prepare_render(quote, "general", None))

        assert len(messages) == 2
        assert len(messages[0].splitlines()) == 5
        assert len(messages[1].splitlines()) == 2


class TestRenderQuote:
    """Tests for rendering with lookups."""

    async def test_resolves_channel_and_quoter(self, quote_factory):
        """Test that the channel and quoter names are looked up."""
        channel = MagicMock()
        channel.name = "general"
        bot = MagicMock()
        bot.get_channel = MagicMock(return_value=channel)
        resolver = MagicMock()
        resolver.resolve = AsyncMock(return_value="quoter")

        rendered = await render_quote(quote_factory(1001, 1, id=3), bot, resolver)

        assert "`#general`" in rendered.embeds[0].description
        assert rendered.embeds[0].footer.text == "quoter"
        assert rendered.followups == []
        resolver.resolve.assert_awaited_once_with(111222333)
