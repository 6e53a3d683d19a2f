"""
Herald - Services Package
=========================

Stateful services shared through AppContext.

DESIGN:
    Services are plain classes wired together in src/core/app.py.
    They should:
    - Be async-compatible for non-blocking I/O
    - Bound every external call with a timeout
    - Handle their own error cases and log through the TreeLogger

Available Services:
    DiscordGateway: Permission checks and bounded sends
    GuildRegistry: Per-guild settings cache
    StreamRegistry: Watched Twitch streams
    PresenceWatcher: Periodic live/offline sweep
    CommandGate: Message to command handler routing
"""

from .gateway import DiscordGateway
from .guilds import GuildRecord, GuildRegistry
from .twitch import PresenceWatcher, StreamRegistry, TwitchClient
from .dispatch import CommandGate, CommandHandler, ExecutionContext


__all__ = [
    "DiscordGateway",
    "GuildRecord",
    "GuildRegistry",
    "StreamRegistry",
    "PresenceWatcher",
    "TwitchClient",
    "CommandGate",
    "CommandHandler",
    "ExecutionContext",
]
