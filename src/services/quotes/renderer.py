"""
Geode Discord Bot - Quote Renderer
==================================

Builds the embeds and follow-up link messages that display a quote.

DESIGN:
    Rendering is split in two steps. prepare_render() and
    prepare_render_censored() collect the strings to show (names,
    channel, jump link). build_embeds() and build_link_messages() lay
    them out and don't touch Discord at all, so they can be tested on
    plain data. The censored form hides everything that gives the
    author away and is used while a guess round is running.

    Discord shows up to 4 images in one embed when the embeds share a
    url, so images are chunked by 4 with a shared gallery url per
    chunk. Videos, other files and embedded links can't go into an
    embed and are sent as follow-up messages of at most 5 links.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import discord

from src.core.config import EmbedColors
from src.core.constants import (
    CENSORED_TEXT,
    CENSORED_TIMESTAMP,
    QUOTE_GALLERY_CHUNK,
    QUOTE_LINKS_PER_MESSAGE,
)
from src.core.database.models import AttachmentRecord, QuoteRecord


GALLERY_URL = "https://geode-sdk.org/#gallery-chunk-{index}"
UNKNOWN_TEXT = "<unknown>"


# =============================================================================
# Render Data
# =============================================================================

def quote_full_name(quote: QuoteRecord) -> str:
    """Number and name, e.g. "12: geode creepypasta"."""
    name = quote.get("name") or ""
    return f"{quote['id']}: {name}" if name else str(quote["id"])


@dataclass
class QuoteRenderData:
    """Display strings for one quote."""
    full_name: str
    author: str
    channel: str
    quoter: str
    created_at: datetime
    content: Optional[str] = None
    reply_author: Optional[str] = None
    reply_content: Optional[str] = None
    jump_url: Optional[str] = None
    files: List[AttachmentRecord] = field(default_factory=list)
    embeds: List[Dict[str, Any]] = field(default_factory=list)


def _has_reply(quote: QuoteRecord) -> bool:
    return bool(
        quote.get("reply_author_id")
        and quote.get("reply_message_id")
        and quote.get("reply_content")
    )


def _has_content(quote: QuoteRecord) -> bool:
    return bool((quote.get("content") or "").strip())


def prepare_render(
    quote: QuoteRecord,
    channel_name: Optional[str],
    quoter_name: Optional[str],
) -> QuoteRenderData:
    """Collect display strings for the full (uncensored) quote."""
    has_reply = _has_reply(quote)
    jump_url = (quote.get("jump_url") or "").strip()

    return QuoteRenderData(
        full_name=quote_full_name(quote),
        author=f"<@{quote['author_id']}>",
        channel=f"`#{channel_name or UNKNOWN_TEXT}`",
        quoter=quoter_name or UNKNOWN_TEXT,
        created_at=datetime.fromtimestamp(quote["created_at"], tz=timezone.utc),
        content=quote["content"] if _has_content(quote) else None,
        reply_author=f"<@{quote['reply_author_id']}>" if has_reply else None,
        reply_content=quote.get("reply_content") if has_reply else None,
        jump_url=f"[>>]({jump_url})" if jump_url else None,
        files=list(quote.get("attachments") or []),
        embeds=list(quote.get("embeds") or []),
    )


def prepare_render_censored(quote: QuoteRecord) -> QuoteRenderData:
    """Collect display strings with every author hint replaced."""
    has_reply = _has_reply(quote)

    return QuoteRenderData(
        full_name=CENSORED_TEXT,
        author=CENSORED_TEXT,
        channel=f"`#{CENSORED_TEXT}`",
        quoter=CENSORED_TEXT,
        created_at=datetime.fromtimestamp(CENSORED_TIMESTAMP, tz=timezone.utc),
        content=quote["content"] if _has_content(quote) else None,
        reply_author=CENSORED_TEXT if has_reply else None,
        reply_content=quote.get("reply_content") if has_reply else None,
        jump_url=None,
        files=list(quote.get("attachments") or []),
        embeds=list(quote.get("embeds") or []),
    )


# =============================================================================
# Layout
# =============================================================================

def build_description(data: QuoteRenderData) -> str:
    """
    Main embed text: quoted reply, content, then the attribution line.

    Example:
        > <@1>: what does this do
        it crashes

        \\- <@2> in `#help` [>>](https://discord.com/channels/...)
    """
    lines: List[str] = []

    if data.reply_author is not None and data.reply_content is not None:
        reply_lines = data.reply_content.splitlines() or [""]
        lines.append(f"> {data.reply_author}: {reply_lines[0]}")
        lines.extend(f"> {line}" for line in reply_lines[1:])

    if data.content is not None:
        lines.append(data.content)

    if lines:
        lines.append("")

    attribution = f"\\- {data.author} in {data.channel}"
    if data.jump_url is not None:
        attribution += f" {data.jump_url}"
    lines.append(attribution)

    return "\n".join(lines)


def _media_kind(attachment: AttachmentRecord) -> str:
    content_type = attachment.get("content_type") or ""
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return "other" if content_type else "none"


def build_embeds(data: QuoteRenderData) -> List[discord.Embed]:
    """Main embed plus one extra embed per additional gallery image."""
    gallery = [f["url"] for f in data.files if _media_kind(f) == "image"]

    embeds = [discord.Embed(color=EmbedColors.QUOTE) for _ in range(max(1, len(gallery)))]

    for i, url in enumerate(gallery):
        chunk = i // QUOTE_GALLERY_CHUNK
        embeds[i].url = GALLERY_URL.format(index=chunk)
        embeds[i].set_image(url=url)

    main = embeds[0]
    main.set_author(name=data.full_name)
    main.description = build_description(data)
    main.set_footer(text=data.quoter)
    main.timestamp = data.created_at

    return embeds


def build_link_messages(data: QuoteRenderData) -> List[str]:
    """Follow-up messages for media that can't be shown inside an embed."""
    links = [f["url"] for f in data.files if _media_kind(f) == "video"]
    links += [f["url"] for f in data.files if _media_kind(f) in ("other", "none")]
    links += [e["url"] for e in data.embeds if e.get("url")]

    return [
        "\n".join(links[i:i + QUOTE_LINKS_PER_MESSAGE])
        for i in range(0, len(links), QUOTE_LINKS_PER_MESSAGE)
    ]


# =============================================================================
# Rendered Quote
# =============================================================================

@dataclass
class RenderedQuote:
    """Embeds for the main message and text for each follow-up."""
    embeds: List[discord.Embed]
    followups: List[str]


def render(data: QuoteRenderData) -> RenderedQuote:
    return RenderedQuote(embeds=build_embeds(data), followups=build_link_messages(data))


async def render_quote(quote: QuoteRecord, bot, resolver) -> RenderedQuote:
    """
    Render a quote for display, resolving its channel and quoter names.

    Args:
        quote: Stored quote.
        bot: Bot instance, used for the channel lookup.
        resolver: UserNameResolver used for the quoter's name.
    """
    channel = bot.get_channel(quote.get("channel_id") or 0)
    channel_name = getattr(channel, "name", None)

    quoter_name = None
    if quote.get("quoter_id"):
        try:
            quoter_name = await resolver.resolve(quote["quoter_id"])
        except discord.HTTPException:
            quoter_name = None

    return render(prepare_render(quote, channel_name, quoter_name))


def render_quote_censored(quote: QuoteRecord) -> RenderedQuote:
    """Render a quote with the author hidden."""
    return render(prepare_render_censored(quote))


async def send_rendered(
    interaction: discord.Interaction,
    rendered: RenderedQuote,
    content: Optional[str] = None,
    view: Optional[discord.ui.View] = None,
) -> discord.Message:
    """
    Send a rendered quote as the interaction's followup, then its link messages.

    The interaction must already be deferred.
    """
    message = await interaction.followup.send(
        content=content or discord.utils.MISSING,
        embeds=rendered.embeds,
        view=view or discord.utils.MISSING,
        allowed_mentions=discord.AllowedMentions.none(),
        wait=True,
    )
    for text in rendered.followups:
        await message.reply(text, allowed_mentions=discord.AllowedMentions.none(), mention_author=False)
    return message


__all__ = [
    "QuoteRenderData",
    "RenderedQuote",
    "quote_full_name",
    "prepare_render",
    "prepare_render_censored",
    "build_description",
    "build_embeds",
    "build_link_messages",
    "render",
    "render_quote",
    "render_quote_censored",
    "send_rendered",
]
