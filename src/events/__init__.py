"""
Geode Discord Bot - Events Package
==================================

Gateway event listeners, loaded as cogs.

DESIGN:
    Event routing:
    - members.py: Member join (sticky roles) and user updates (name cache)
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "src.events.members",
]
"""
List of event cog module paths for dynamic loading.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
