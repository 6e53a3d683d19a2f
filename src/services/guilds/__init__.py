"""
Herald - Guild Settings Package
===============================

In-memory, write-through cache of per-guild settings.
"""

from .registry import GuildRecord, GuildRegistry, GUILD_FIELDS

__all__ = ["GuildRecord", "GuildRegistry", "GUILD_FIELDS"]
