"""
Herald - Twitch Package
=======================

Helix client, watched stream registry and the presence watcher.
"""

from .client import TwitchClient
from .embeds import build_live_embed, fill_size
from .models import (
    StreamWatch,
    SweepResult,
    TwitchGame,
    TwitchStreamStatus,
    TwitchUser,
)
from .registry import StreamRegistry, normalize_login
from .watcher import PresenceWatcher

__all__ = [
    "TwitchClient",
    "StreamRegistry",
    "PresenceWatcher",
    "StreamWatch",
    "SweepResult",
    "TwitchGame",
    "TwitchStreamStatus",
    "TwitchUser",
    "build_live_embed",
    "fill_size",
    "normalize_login",
]
