"""
Herald - Twitch Presence Watcher
================================

Periodic sweep over the stream registry that posts one notification per
offline to online transition.

DESIGN:
    The loop never awaits a sweep. Each tick fires trigger() as a detached
    task, and trigger() refuses to start while another sweep is in flight.
    A slow Twitch API therefore delays notifications but can't pile up
    sweeps.

    Inside a sweep, entries are processed one at a time in registry
    order. Every status query is bounded by a short timeout, and a
    failure only affects its own entry: the flag stays as it was and the
    next entry is evaluated.

    State machine per watch:
        OFFLINE --live seen--> ONLINE   (notify once, persist flag)
        ONLINE  --none seen--> OFFLINE  (persist flag, no message)
        same state observed  -> nothing
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from src.core.errors import ExternalServiceError
from src.core.logger import logger
from src.services.twitch.embeds import build_live_embed
from src.services.twitch.models import StreamWatch, SweepResult, TwitchGame, TwitchStreamStatus
from src.utils.async_utils import create_safe_task
from src.utils.error_handler import ErrorHandler
from src.utils.metrics import MetricsCollector

if TYPE_CHECKING:
    from src.services.gateway import DiscordGateway
    from src.services.guilds import GuildRegistry
    from src.services.twitch.client import TwitchClient
    from src.services.twitch.registry import StreamRegistry


class PresenceWatcher:
    """
    Sweeps watched streams and announces when they go live.

    Attributes:
        streams: Stream registry to sweep.
        twitch: Helix client.
        gateway: Discord gateway for notifications.
        metrics: Counters and sweep timings.
        guilds: Optional guild registry (embed colors).
        interval: Seconds between ticks.
        request_timeout: Bound on each Helix call inside a sweep.
    """

    def __init__(
        self,
        streams: "StreamRegistry",
        twitch: "TwitchClient",
        gateway: "DiscordGateway",
        metrics: MetricsCollector,
        guilds: Optional["GuildRegistry"] = None,
        interval: float = 60,
        request_timeout: float = 1.0,
    ) -> None:
        self.streams = streams
        self.twitch = twitch
        self.gateway = gateway
        self.metrics = metrics
        self.guilds = guilds
        self.interval = interval
        self.request_timeout = request_timeout

        self.task: Optional[asyncio.Task] = None
        self.running: bool = False
        self._sweeping: bool = False
        self._sweep_task: Optional[asyncio.Task] = None

    @property
    def sweeping(self) -> bool:
        return self._sweeping

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start the background tick loop, replacing any previous one."""
        if self.task and not self.task.done():
            self.task.cancel()

        self.running = True
        self.task = asyncio.create_task(self._tick_loop(), name="Twitch Presence Loop")

        logger.tree("Presence Watcher Started", [
            ("Interval", f"{self.interval}s"),
            ("Request Timeout", f"{self.request_timeout}s"),
            ("Watched Streams", str(len(self.streams))),
        ], emoji="📡")

    async def stop(self) -> None:
        """Stop the tick loop and cancel an in-flight sweep."""
        self.running = False

        for task in (self.task, self._sweep_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        self.task = None
        self._sweep_task = None
        logger.info("Presence Watcher Stopped")

    async def _tick_loop(self) -> None:
        while self.running:
            try:
                create_safe_task(self.trigger(), "Twitch Sweep")
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break

    # =========================================================================
    # Sweep
    # =========================================================================

    async def trigger(self) -> bool:
        """
        Run a sweep unless one is already in flight.

        Returns:
            True if a sweep ran, False if it was skipped.
        """
        if self._sweeping:
            logger.warning("Twitch Sweep Skipped", [
                ("Reason", "Previous sweep still running"),
            ])
            return False

        # Only the task that actually sweeps is recorded for stop()
        self._sweeping = True
        self._sweep_task = asyncio.current_task()
        try:
            await self.sweep()
        finally:
            self._sweeping = False
            self._sweep_task = None
        return True

    async def sweep(self) -> SweepResult:
        """
        Check every watched stream once, in registry order.

        Returns:
            Counts of checked, newly online, newly offline and failed entries.
        """
        result = SweepResult()

        with self.metrics.timer("twitch.sweep"):
            for watch in self.streams.streams():
                # Removed by a command while this sweep was running
                if self.streams.find(watch.guild_id, watch.login) is not watch:
                    continue

                result.checked += 1
                try:
                    status = await asyncio.wait_for(
                        self.twitch.get_stream(watch.login),
                        timeout=self.request_timeout,
                    )
                except (ExternalServiceError, asyncio.TimeoutError) as e:
                    result.failed += 1
                    self.metrics.increment("twitch.failures")
                    logger.warning("Twitch Status Check Failed", [
                        ("Login", watch.login),
                        ("Guild ID", watch.guild_id),
                        ("Error", str(e)[:100] or "Timed out"),
                    ])
                    continue
                except Exception as e:
                    result.failed += 1
                    self.metrics.increment("twitch.failures")
                    ErrorHandler.handle(e, location="PresenceWatcher.sweep", login=watch.login)
                    continue

                # Removed while its status query was in flight
                if self.streams.find(watch.guild_id, watch.login) is not watch:
                    continue

                if status is not None and not watch.is_online:
                    await self._announce(watch, status)
                    if await self.streams.set_online(watch, True):
                        result.went_online += 1
                elif status is None and watch.is_online:
                    if await self.streams.set_online(watch, False):
                        result.went_offline += 1

        if result.went_online or result.went_offline or result.failed:
            logger.tree("Twitch Sweep Complete", [
                ("Checked", str(result.checked)),
                ("Went Online", str(result.went_online)),
                ("Went Offline", str(result.went_offline)),
                ("Failed", str(result.failed)),
            ], emoji="📡")
        else:
            logger.debug(f"Twitch sweep: {result.checked} checked, no transitions")

        return result

    # =========================================================================
    # Notification
    # =========================================================================

    async def _fetch_game(self, game_id: str) -> Optional[TwitchGame]:
        """Category lookup; failures just drop the Game field."""
        if not game_id:
            return None
        try:
            return await asyncio.wait_for(
                self.twitch.get_game(game_id), timeout=self.request_timeout
            )
        except (ExternalServiceError, asyncio.TimeoutError) as e:
            logger.debug(f"Game lookup failed for {game_id}: {e}")
            return None

    async def _announce(self, watch: StreamWatch, status: TwitchStreamStatus) -> None:
        """
        Post the live notification.

        A failed send is logged and counted; the caller still marks the
        watch online, so a transition is announced at most once.
        """
        game = await self._fetch_game(status.game_id)

        color = 0
        if self.guilds is not None:
            record = self.guilds.get(watch.guild_id)
            if record is not None:
                color = record.embed_color

        embed = build_live_embed(watch, status, game, color=color)
        message = await self.gateway.send_embed(watch.channel_id, embed)

        if message is None:
            self.metrics.increment("twitch.failures")
            logger.warning("Live Notification Not Delivered", [
                ("Login", watch.login),
                ("Channel ID", watch.channel_id),
            ])
            return

        self.metrics.increment("twitch.notifications")
        logger.tree("Live Notification Sent", [
            ("Login", watch.login),
            ("Title", status.title[:50]),
            ("Game", game.name if game else "Unknown"),
            ("Channel ID", watch.channel_id),
        ], emoji="🔴")


__all__ = ["PresenceWatcher"]
