"""
Geode Discord Bot - Source Package
==================================

Community bot for the Geode SDK server: message quotes, the
"who said this" guessing game, sticky roles and mod index commands.

Package Structure:
- bot.py: Main Discord bot class and extension loading
- commands/: Slash command and context menu cogs
- core/: Config, database, logging, health server
- events/: Gateway event listeners
- services/: Quote, guess game, user name and mod index logic
- utils/: Caching, retry, error handling and interaction helpers

Version: v1.0.0
"""
