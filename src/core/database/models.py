"""
Herald - Database Type Definitions
==================================

TypedDict definitions for rows returned by the database mixins.
"""

from typing import Optional, TypedDict


class GuildRow(TypedDict):
    """Type for per-guild settings rows."""
    guild_id: str
    language: str
    timezone: int
    weather_city: str
    news_country: str
    embed_color: int


class StreamRow(TypedDict):
    """Type for watched Twitch stream rows."""
    guild_id: str
    login: str
    channel_id: str
    is_online: bool
    custom_message: Optional[str]
    custom_image_url: Optional[str]


class LogRow(TypedDict):
    """Type for audit log rows."""
    id: int
    timestamp: float
    module: str
    guild_id: Optional[str]
    text: str


__all__ = ["GuildRow", "StreamRow", "LogRow"]
