"""
Geode Discord Bot - Quotes Package
==================================

Quote snapshots, lifecycle and rendering.
"""

from .renderer import (
    RenderedQuote,
    quote_full_name,
    render_quote,
    render_quote_censored,
    send_rendered,
)
from .service import QuoteService, random_quote_name, snapshot_message

__all__ = [
    "QuoteService",
    "RenderedQuote",
    "quote_full_name",
    "random_quote_name",
    "render_quote",
    "render_quote_censored",
    "send_rendered",
    "snapshot_message",
]
