"""
Geode Discord Bot - Database Type Definitions
=============================================

TypedDict definitions for database records.
"""

from typing import Any, Dict, List, Optional, TypedDict


class AttachmentRecord(TypedDict, total=False):
    """A file attached to a quoted message."""
    id: int
    filename: str
    size: int
    url: str
    content_type: Optional[str]
    description: Optional[str]
    is_spoiler: bool


class QuoteRecord(TypedDict, total=False):
    """Type for quote rows. JSON columns are decoded to lists."""
    message_id: int
    id: int
    name: str
    channel_id: int
    author_id: int
    quoter_id: int
    created_at: float
    last_edited_at: Optional[float]
    jump_url: Optional[str]
    reply_author_id: int
    reply_message_id: int
    reply_content: str
    attachments: List[AttachmentRecord]
    embeds: List[Dict[str, Any]]
    components: List[Dict[str, Any]]
    content: str


class GuessRecord(TypedDict, total=False):
    """Type for one finished guess round."""
    message_id: int
    started_at: float
    guessed_at: float
    user_id: int
    guess_id: int
    quote_message_id: int


class GuessStatsRecord(TypedDict):
    """Persisted incremental guess counters for one user."""
    user_id: int
    total: int
    correct: int
    streak: int
    max_streak: int


class GuessProfileRecord(TypedDict):
    """Aggregates shown by /guess stats."""
    quoted: int
    total: int
    correct: int
    max_streak: int
    times_guessed: int
    times_answer: int
    times_answer_correct: int
    self_total: int
    self_incorrect: int


class AuthorCountRecord(TypedDict):
    """Number of quotes authored by one user."""
    author_id: int
    count: int


class StickyRoleRecord(TypedDict):
    """A role that is reapplied when the user rejoins."""
    user_id: int
    role_id: int
    added_at: float


__all__ = [
    "AttachmentRecord",
    "QuoteRecord",
    "GuessRecord",
    "GuessStatsRecord",
    "GuessProfileRecord",
    "AuthorCountRecord",
    "StickyRoleRecord",
]
