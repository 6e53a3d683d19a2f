"""
Herald - Twitch Notification Embeds
===================================

Builds the "went live" embed posted by the presence watcher.
"""

from typing import Optional

import discord

from src.core.constants import (
    BOX_ART_HEIGHT,
    BOX_ART_WIDTH,
    EMBED_DESCRIPTION_LIMIT,
    EMBED_FIELD_VALUE_LIMIT,
    THUMBNAIL_HEIGHT,
    THUMBNAIL_WIDTH,
    TWITCH_CHANNEL_URL,
)
from src.services.twitch.models import StreamWatch, TwitchGame, TwitchStreamStatus


def fill_size(template: str, width: int, height: int) -> str:
    """Replace Helix {width}/{height} placeholders in an image URL."""
    return template.replace("{width}", str(width)).replace("{height}", str(height))


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def build_live_embed(
    watch: StreamWatch,
    status: TwitchStreamStatus,
    game: Optional[TwitchGame] = None,
    color: int = 0,
) -> discord.Embed:
    """
    Build the notification for an offline to online transition.

    The watch's custom override, when set, replaces the description and
    (if given) the image. Stream details are always attached.

    Args:
        watch: The watch that went live.
        status: Live stream data from Helix.
        game: Category, if the lookup succeeded.
        color: Guild embed color.
    """
    channel_url = TWITCH_CHANNEL_URL.format(login=watch.login)

    if watch.is_custom:
        description = watch.custom_message
    else:
        description = f"Hey @here {status.user_name} is now live on {channel_url}"

    embed = discord.Embed(
        description=_truncate(description, EMBED_DESCRIPTION_LIMIT),
        color=color,
        url=channel_url,
    )

    embed.add_field(
        name="Stream",
        value=_truncate(status.title or "Untitled", EMBED_FIELD_VALUE_LIMIT),
        inline=True,
    )
    if game and game.name:
        embed.add_field(name="Game", value=game.name, inline=True)
    embed.add_field(name="Viewers", value=str(status.viewer_count), inline=True)

    if watch.is_custom and watch.custom_image_url:
        embed.set_image(url=watch.custom_image_url)
    elif status.thumbnail_url:
        embed.set_image(url=fill_size(status.thumbnail_url, THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT))

    if game and game.box_art_url:
        embed.set_thumbnail(url=fill_size(game.box_art_url, BOX_ART_WIDTH, BOX_ART_HEIGHT))

    embed.set_footer(text=f"twitch.tv/{watch.login}")
    return embed


__all__ = ["build_live_embed", "fill_size"]
