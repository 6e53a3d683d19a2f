"""
Herald Discord Bot - Source Package
===================================

Prefix-command Discord bot with per-guild settings and Twitch live
notifications.

Package Structure:
- bot.py: Main Discord bot class and lifecycle
- commands/: Prefix command handlers (!twitch, !b, !help)
- core/: Config, logging, database, errors, application context
- events/: discord.py event cogs routing into the core
- services/: Guild registry, dispatch gate, Twitch watcher, gateway
- utils/: Async helpers, metrics, error handling

Version: v1.0.0
"""
