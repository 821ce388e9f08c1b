"""
Geode Discord Bot - Commands Package
====================================

Slash commands and context menus, one cog package each.

DESIGN:
    Each package exposes `async def setup(bot)` and is loaded with
    load_extension() from setup_hook. Packages that own persistent
    buttons register their DynamicItems in setup().

    To add a new command:
    1. Create a package here with cog.py and __init__.py
    2. Add async def setup(bot) to __init__.py
    3. Add the package to COMMAND_COGS below

Available Commands:
    Quote (context menu), /quote, /quote-admin: Saved quotes
    /guess: "Who said this" game and its stats
    /sticky: Roles restored on rejoin (Manage Roles)
    /index: Geode mod index account, mods and admin review
    /say, /crash: Ungrouped server commands
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "src.commands.quote",
    "src.commands.guess",
    "src.commands.sticky",
    "src.commands.index",
    "src.commands.root",
]
"""
List of command cog module paths for dynamic loading.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "COMMAND_COGS",
]
