"""
Herald - Application Context
============================

The one object that owns every shared dependency.

DESIGN:
    Built once, after the gateway is ready, by AppContext.create().
    Handlers and cogs reach services through it instead of through
    module-level globals, which keeps tests free to assemble an
    AppContext from fakes.

    Startup order:
    1. Guild registry hydrated from the guilds the bot is in
    2. Stream registry loaded for those guilds
    3. Presence watcher started

    Shutdown order is the reverse, followed by a metrics flush and
    closing the HTTP session and the database.
"""

from typing import List, Optional

import discord

from src.core.config import Config
from src.core.database import DatabaseManager
from src.core.logger import logger
from src.services.dispatch import CommandGate
from src.services.gateway import DiscordGateway
from src.services.guilds import GuildRegistry
from src.services.twitch import PresenceWatcher, StreamRegistry, TwitchClient
from src.utils.metrics import MetricsCollector


class AppContext:
    """
    Shared dependencies for the gate, command handlers and the watcher.

    Attributes:
        config: Loaded configuration.
        db: Database manager.
        metrics: Counters and timings.
        gateway: Discord gateway.
        twitch: Helix client.
        guilds: Guild settings registry.
        streams: Watched stream registry.
        watcher: Presence watcher.
        gate: Command dispatch gate.
    """

    def __init__(
        self,
        config: Config,
        db: DatabaseManager,
        gateway: DiscordGateway,
        twitch: TwitchClient,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.config = config
        self.db = db
        self.gateway = gateway
        self.twitch = twitch
        self.metrics = metrics or MetricsCollector()

        self.guilds = GuildRegistry(db, config.defaults, store_timeout=config.store_timeout)
        self.streams = StreamRegistry(db, twitch, store_timeout=config.store_timeout)
        self.watcher = PresenceWatcher(
            streams=self.streams,
            twitch=twitch,
            gateway=gateway,
            metrics=self.metrics,
            guilds=self.guilds,
            interval=config.twitch_sweep_interval,
            request_timeout=config.twitch_request_timeout,
        )
        self.gate = CommandGate(self)
        self._closed = False

    @classmethod
    def create(cls, client: discord.Client, config: Config, db: DatabaseManager) -> "AppContext":
        """Wire real services around a discord.py client."""
        gateway = DiscordGateway(client, timeout=config.gateway_timeout)
        twitch = TwitchClient(
            client_id=config.twitch_client_id,
            oauth_token=config.twitch_oauth_token,
        )
        return cls(config=config, db=db, gateway=gateway, twitch=twitch)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, guild_ids: List[str], start_watcher: bool = True) -> None:
        """Hydrate both registries, then start the watcher."""
        loaded, created = await self.guilds.hydrate(guild_ids)
        stream_count = await self.streams.load(guild_ids)

        if start_watcher:
            await self.watcher.start()

        logger.tree("Application Context Ready", [
            ("Guilds", f"{loaded} loaded, {created} created"),
            ("Streams", str(stream_count)),
            ("Commands", str(len(self.gate.handlers()))),
        ], emoji="✅")

    async def close(self) -> None:
        """Stop the watcher, flush counters, release resources. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        await self.watcher.stop()
        self.metrics.flush()
        await self.twitch.close()
        self.db.close()

        logger.info("Application Context Closed")


__all__ = ["AppContext"]
