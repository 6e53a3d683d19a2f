"""
Herald - Twitch Data Models
===========================

Dataclasses shared by the Twitch client, the stream registry and the watcher.
"""

from dataclasses import dataclass
from typing import Optional

from src.core.database import StreamRow


# =============================================================================
# Watched Stream
# =============================================================================

@dataclass(eq=False)
class StreamWatch:
    """
    One watched (guild, channel, login) triple.

    Compared by identity: the registry's flat list and guild index hold
    the same instances.

    Attributes:
        login: Lower-cased Twitch login.
        guild_id: Owning guild.
        channel_id: Channel that receives notifications.
        is_online: Last observed state.
        custom_message: Optional notification text override.
        custom_image_url: Optional notification image override.
    """

    login: str
    guild_id: str
    channel_id: str
    is_online: bool = False
    custom_message: Optional[str] = None
    custom_image_url: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return bool(self.custom_message)

    @classmethod
    def from_row(cls, row: StreamRow) -> "StreamWatch":
        return cls(
            login=row["login"],
            guild_id=row["guild_id"],
            channel_id=row["channel_id"],
            is_online=bool(row["is_online"]),
            custom_message=row.get("custom_message"),
            custom_image_url=row.get("custom_image_url"),
        )

    def to_row(self) -> StreamRow:
        return StreamRow(
            guild_id=self.guild_id,
            login=self.login,
            channel_id=self.channel_id,
            is_online=self.is_online,
            custom_message=self.custom_message,
            custom_image_url=self.custom_image_url,
        )


# =============================================================================
# Helix Responses
# =============================================================================

@dataclass(frozen=True)
class TwitchUser:
    """A resolved Twitch account (Helix /users)."""
    id: str
    login: str
    display_name: str
    profile_image_url: str = ""


@dataclass(frozen=True)
class TwitchStreamStatus:
    """A live stream (Helix /streams). Absent when the channel is offline."""
    user_login: str
    user_name: str
    title: str
    game_id: str
    viewer_count: int
    thumbnail_url: str


@dataclass(frozen=True)
class TwitchGame:
    """A category (Helix /games)."""
    id: str
    name: str
    box_art_url: str


# =============================================================================
# Sweep Result
# =============================================================================

@dataclass
class SweepResult:
    """Outcome of one presence sweep."""
    checked: int = 0
    went_online: int = 0
    went_offline: int = 0
    failed: int = 0


__all__ = [
    "StreamWatch",
    "TwitchUser",
    "TwitchStreamStatus",
    "TwitchGame",
    "SweepResult",
]
