"""
Geode Discord Bot - Services Package
====================================

Domain logic behind the cogs.

DESIGN:
    Services own the rules (who may rename a quote, how candidates are
    drawn, how the index reports errors) and raise MessageError with
    user-facing text. Cogs only wire interactions to them.

Available Services:
    QuoteService: Quote creation, renaming, updating and deletion
    GuessService: "Who said this" rounds and streak counters
    IndexClient: Geode mod index API client
    UserNameResolver: Cached user ID to display name lookups
"""

# =============================================================================
# Service Imports
# =============================================================================

from .users import UserNameResolver, display_name_of
from .quotes import QuoteService
from .guess import GuessService
from .index_api import IndexClient


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "QuoteService",
    "GuessService",
    "IndexClient",
    "UserNameResolver",
    "display_name_of",
]
