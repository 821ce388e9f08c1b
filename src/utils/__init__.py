"""
Geode Discord Bot - Utils Package
=================================

Stateless helpers usable anywhere in the codebase.

Available Utilities:
    TTLCache: Size-bounded cache with expiry
    retry_async: Exponential backoff for flaky calls
    ErrorHandler: Categorized error logging
    safe_respond / safe_defer: Interaction response helpers
"""

from .cache import TTLCache
from .error_handler import ErrorHandler
from .interaction import safe_defer, safe_respond
from .retry import retry_async, safe_fetch_channel, safe_fetch_message


__all__ = [
    "TTLCache",
    "ErrorHandler",
    "safe_defer",
    "safe_respond",
    "retry_async",
    "safe_fetch_channel",
    "safe_fetch_message",
]
