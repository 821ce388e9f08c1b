"""
Geode Discord Bot - Quote Service
=================================

Creating, renaming, updating and deleting quotes.

DESIGN:
    A quote is a snapshot: content, reply, attachments, embeds and
    components are copied at quote time so the quote survives the
    original message being edited or deleted. /quote update takes a
    fresh snapshot of the same message and keeps the name, number,
    creation time and quoter.

    Every refusal is raised as MessageError with the text to show, so
    the cogs only translate exceptions into ephemeral replies.
"""

import random
import sqlite3
import string
import time
from typing import Any, Dict, List, Optional

import discord

from src.core.config import is_admin
from src.core.constants import QUOTE_NAME_LENGTH, QUOTE_NAME_MAX_LENGTH
from src.core.database.models import AttachmentRecord, QuoteRecord
from src.core.exceptions import MessageError
from src.core.logger import logger
from src.services.quotes.renderer import quote_full_name
from src.utils.retry import safe_fetch_channel, safe_fetch_message


NAME_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase


# =============================================================================
# Snapshot Helpers
# =============================================================================

def random_quote_name(rng: Optional[random.Random] = None) -> str:
    """Random 7-character alphanumeric name."""
    rng = rng or random.Random()
    return "".join(rng.choice(NAME_ALPHABET) for _ in range(QUOTE_NAME_LENGTH))


def snapshot_attachments(message: discord.Message) -> List[AttachmentRecord]:
    attachments: List[AttachmentRecord] = []
    for a in message.attachments:
        title = getattr(a, "title", None)
        if title and title.strip():
            extension = a.filename.rsplit(".", 1)[1] if "." in a.filename else ""
            filename = f"{title}.{extension}" if extension else title
        else:
            filename = a.filename
        attachments.append({
            "id": a.id,
            "filename": filename,
            "size": a.size,
            "url": a.url,
            "content_type": a.content_type,
            "description": a.description,
            "is_spoiler": a.filename.startswith("SPOILER_"),
        })
    return attachments


def snapshot_embeds(message: discord.Message) -> List[Dict[str, Any]]:
    return [embed.to_dict() for embed in message.embeds]


def snapshot_components(message: discord.Message) -> List[Dict[str, Any]]:
    return [component.to_dict() for component in message.components]


async def resolve_forwarded(message: discord.Message) -> Optional[discord.Message]:
    """The message a forward points to, if it is in the same channel."""
    ref = message.reference
    if ref is None or ref.message_id is None:
        return None
    if getattr(ref, "type", None) != discord.MessageReferenceType.forward:
        return None
    if ref.channel_id != message.channel.id:
        return None
    return await safe_fetch_message(message.channel, ref.message_id)


async def resolve_reply(message: discord.Message) -> Optional[discord.Message]:
    """The message being replied to, if any and still available."""
    ref = message.reference
    if ref is None or ref.message_id is None:
        return None
    if getattr(ref, "type", None) == discord.MessageReferenceType.forward:
        return None
    if isinstance(ref.resolved, discord.Message):
        return ref.resolved
    if isinstance(ref.resolved, discord.DeletedReferencedMessage):
        return None
    if ref.channel_id != message.channel.id:
        return None
    return await safe_fetch_message(message.channel, ref.message_id)


async def snapshot_message(
    message: discord.Message,
    quoter_id: int,
    timestamp: float,
    original: Optional[QuoteRecord] = None,
) -> QuoteRecord:
    """
    Copy a message into a quote record.

    Forwards are followed to the forwarded message. With `original`,
    the number, name, creation time and quoter are carried over.

    Args:
        message: Message to copy.
        quoter_id: Who is quoting.
        timestamp: When the quote is being made or updated.
        original: The existing quote when updating.
    """
    while True:
        forwarded = await resolve_forwarded(message)
        if forwarded is None:
            break
        message = forwarded

    reply = await resolve_reply(message)

    quote: QuoteRecord = {
        "message_id": message.id,
        "name": original["name"] if original else "",
        "channel_id": message.channel.id if message.channel else 0,
        "author_id": message.author.id,
        "quoter_id": quoter_id,
        "created_at": original["created_at"] if original else timestamp,
        "last_edited_at": timestamp,
        "jump_url": message.jump_url if message.channel else None,
        "reply_author_id": reply.author.id if reply else 0,
        "reply_message_id": reply.id if reply else 0,
        "reply_content": reply.content if reply else "",
        "attachments": snapshot_attachments(message),
        "embeds": snapshot_embeds(message),
        "components": snapshot_components(message),
        "content": message.content or "",
    }
    if original:
        quote["id"] = original["id"]
    return quote


# =============================================================================
# Quote Service
# =============================================================================

class QuoteService:
    """Quote lifecycle on top of the database manager."""

    def __init__(self, bot) -> None:
        self.bot = bot
        self.db = bot.db

    # =========================================================================
    # Lookup & Permissions
    # =========================================================================

    def get(self, key: str) -> QuoteRecord:
        """Find a quote by name or number, or raise "Quote not found"."""
        quote = self.db.find_quote(key)
        if quote is None:
            raise MessageError("❌ Quote not found!")
        return quote

    @staticmethod
    def check_sensitive(member, quote: QuoteRecord) -> None:
        """Only the quoter or an admin may change or remove a quote."""
        if is_admin(member) or member.id == quote.get("quoter_id"):
            return
        raise MessageError("❌ You are not the original quoter nor an admin!")

    def new_name(self) -> str:
        """A random name that no quote uses yet."""
        while True:
            name = random_quote_name()
            if not self.db.quote_name_exists(name):
                return name

    # =========================================================================
    # Create
    # =========================================================================

    async def create(self, message: discord.Message, quoter: discord.abc.User) -> QuoteRecord:
        """
        Quote a message.

        Raises:
            MessageError: For bot or webhook authors and already quoted messages.
        """
        if message.author.bot or message.webhook_id is not None:
            raise MessageError("Can't quote bots!")

        fresh = await safe_fetch_message(message.channel, message.id)
        if fresh is not None:
            message = fresh

        if self.db.quote_exists(message.id):
            raise MessageError("This message is already quoted!")

        quote = await snapshot_message(message, quoter.id, time.time())
        if self.db.quote_exists(quote["message_id"]):
            raise MessageError("This message is already quoted!")
        quote["name"] = self.new_name()

        try:
            stored = self.db.add_quote(quote)
        except sqlite3.IntegrityError:
            raise MessageError("This message is already quoted!")

        logger.tree("Quote Created", [
            ("Quote", quote_full_name(stored)),
            ("Message ID", str(stored["message_id"])),
            ("Author ID", str(stored["author_id"])),
            ("Quoter", f"{quoter} ({quoter.id})"),
        ], emoji="💬")
        return stored

    # =========================================================================
    # Sensitive Operations
    # =========================================================================

    def rename(self, quote: QuoteRecord, new_name: str, actor: discord.abc.User) -> str:
        """
        Rename a quote.

        Returns:
            The confirmation message.
        """
        new_name = new_name.strip()
        if not new_name:
            raise MessageError("❌ Quote name can't be empty!")
        if len(new_name) > QUOTE_NAME_MAX_LENGTH:
            raise MessageError(f"❌ Quote name can't be longer than {QUOTE_NAME_MAX_LENGTH} characters!")
        if new_name == quote["name"]:
            raise MessageError(f"❌ Quote is already named **{new_name}**!")
        if self.db.quote_name_exists(new_name):
            raise MessageError(f"❌ Quote **{new_name}** already exists!")

        old_full_name = quote_full_name(quote)
        try:
            self.db.rename_quote(quote["message_id"], new_name)
        except sqlite3.Error as e:
            logger.error("Quote Rename Failed", [
                ("Quote", old_full_name),
                ("Error", str(e)[:100]),
            ])
            raise MessageError("❌ Failed to rename quote!")

        logger.tree("Quote Renamed", [
            ("From", old_full_name),
            ("To", new_name),
            ("By", f"{actor} ({actor.id})"),
        ], emoji="✏️")
        return f"Quote *{quote['name']}* renamed to **{new_name}**!"

    def delete(self, quote: QuoteRecord, actor: discord.abc.User) -> str:
        """Delete a quote and, through the cascade, its guesses."""
        try:
            self.db.delete_quote(quote["message_id"])
        except sqlite3.Error as e:
            logger.error("Quote Delete Failed", [
                ("Quote", quote_full_name(quote)),
                ("Error", str(e)[:100]),
            ])
            raise MessageError("❌ Failed to delete quote!")

        logger.tree("Quote Deleted", [
            ("Quote", quote_full_name(quote)),
            ("By", f"{actor} ({actor.id})"),
        ], emoji="🗑️")
        return f"Deleted quote *{quote['name']}*!"

    async def update(self, quote: QuoteRecord, actor: discord.abc.User) -> QuoteRecord:
        """
        Re-snapshot the quoted message, keeping name, number and quoter.

        Raises:
            MessageError: If the channel or message can no longer be found.
        """
        channel_id = quote.get("channel_id") or 0
        if channel_id == 0:
            raise MessageError("❌ Failed to update quote! (channel ID not set)")

        channel = await safe_fetch_channel(self.bot, channel_id)
        if channel is None or not hasattr(channel, "fetch_message"):
            raise MessageError(f"❌ Failed to update quote! (channel {channel_id} not found)")

        message = await safe_fetch_message(channel, quote["message_id"])
        if message is None:
            raise MessageError(f"❌ Failed to update quote! (message {quote['message_id']} not found)")

        updated = await snapshot_message(message, quote["quoter_id"], time.time(), original=quote)
        # Following a forward would change the key guesses point at
        updated["message_id"] = quote["message_id"]

        try:
            self.db.replace_quote(updated)
        except sqlite3.Error as e:
            logger.error("Quote Update Failed", [
                ("Quote", quote_full_name(quote)),
                ("Error", str(e)[:100]),
            ])
            raise MessageError("❌ Failed to update quote!")

        logger.tree("Quote Updated", [
            ("Quote", quote_full_name(updated)),
            ("By", f"{actor} ({actor.id})"),
        ], emoji="🔄")
        return updated

    # =========================================================================
    # Manual Fixes
    # =========================================================================

    def _change(self, setter, quote: QuoteRecord, *args) -> None:
        try:
            setter(quote["message_id"], *args)
        except sqlite3.Error as e:
            logger.error("Quote Change Failed", [
                ("Quote", quote_full_name(quote)),
                ("Error", str(e)[:100]),
            ])
            raise MessageError("❌ Failed to change quote!")

    def set_quoter(self, quote: QuoteRecord, quoter_id: int) -> str:
        self._change(self.db.set_quote_quoter, quote, quoter_id)
        logger.info(f"Quote {quote_full_name(quote)} quoter set to {quoter_id}")
        return f"Quote **{quote_full_name(quote)}** quoter changed to `{quoter_id}`!"

    def set_author(self, quote: QuoteRecord, author_id: int) -> str:
        self._change(self.db.set_quote_author, quote, author_id)
        logger.info(f"Quote {quote_full_name(quote)} author set to {author_id}")
        return f"Quote **{quote_full_name(quote)}** author changed to `{author_id}`!"

    def clear_last_edited(self, quote: QuoteRecord) -> str:
        self._change(self.db.clear_quote_last_edited, quote)
        return f"Quote **{quote_full_name(quote)}** last edited cleared!"


__all__ = [
    "QuoteService",
    "random_quote_name",
    "snapshot_message",
    "snapshot_attachments",
]
