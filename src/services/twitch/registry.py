"""
Herald - Stream Registry
========================

Watched Twitch streams, indexed two ways over the same StreamWatch
instances:

- a flat list in insertion order (the sweep iterates it)
- a per-guild list (commands add, remove and list by guild)

DESIGN:
    One asyncio.Lock guards every mutation, including the sweep's online
    flips. Add and remove persist first and touch memory only after the
    store accepted the change, so the two indexes and the store never
    disagree about which streams exist. Those writes run with settle=True:
    past store_timeout they wait for the worker thread's real result
    instead of reporting a failure the thread may still undo.

    The Twitch lookup in add_stream happens outside the lock; the
    duplicate check is repeated once the lock is re-acquired.
"""

import asyncio
import sqlite3
from typing import Dict, List, Optional

from src.core.database import DatabaseManager
from src.core.errors import (
    AlreadyExistsError,
    NotFoundError,
    PersistenceError,
)
from src.core.logger import logger
from src.services.twitch.client import TwitchClient
from src.services.twitch.models import StreamWatch


def normalize_login(login: str) -> str:
    """Twitch logins are case-insensitive; store them lower-cased."""
    return login.strip().lower()


class StreamRegistry:
    """
    In-memory watch list with write-through persistence.

    Attributes:
        db: Database manager.
        twitch: Helix client used to validate new logins.
        store_timeout: Bound on each database call (seconds).
    """

    def __init__(
        self,
        db: DatabaseManager,
        twitch: TwitchClient,
        store_timeout: float = 5.0,
    ) -> None:
        self.db = db
        self.twitch = twitch
        self.store_timeout = store_timeout
        self._streams: List[StreamWatch] = []
        self._by_guild: Dict[str, List[StreamWatch]] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Loading
    # =========================================================================

    async def load(self, guild_ids: List[str]) -> int:
        """
        Build both indexes from the store, one group per guild.

        A guild whose rows can't be read gets an empty group and an error log.

        Returns:
            Number of streams loaded.
        """
        async with self._lock:
            self._streams.clear()
            self._by_guild.clear()

            for raw_id in guild_ids:
                guild_id = str(raw_id)
                try:
                    rows = await self.db.run(
                        self.db.get_guild_streams, guild_id, timeout=self.store_timeout
                    )
                except PersistenceError as e:
                    logger.error("Stream Load Failed", [
                        ("Guild ID", guild_id),
                        ("Error", str(e)),
                    ])
                    rows = []

                group = [StreamWatch.from_row(row) for row in rows]
                self._by_guild[guild_id] = group
                self._streams.extend(group)

            total = len(self._streams)

        logger.tree("Streams Loaded", [
            ("Guilds", str(len(self._by_guild))),
            ("Streams", str(total)),
        ], emoji="📺")

        return total

    def ensure_guild(self, guild_id: str) -> None:
        """Create an empty group for a guild joined at runtime."""
        self._by_guild.setdefault(str(guild_id), [])

    # =========================================================================
    # Reads
    # =========================================================================

    def streams(self) -> List[StreamWatch]:
        """Snapshot of the flat list, safe to iterate across awaits."""
        return list(self._streams)

    def guild_streams(self, guild_id: str) -> List[StreamWatch]:
        """Snapshot of one guild's group."""
        return list(self._by_guild.get(str(guild_id), []))

    def find(self, guild_id: str, login: str) -> Optional[StreamWatch]:
        """Lock-free lookup of a resident watch."""
        return self._find_locked(str(guild_id), normalize_login(login))

    def __len__(self) -> int:
        return len(self._streams)

    # =========================================================================
    # Add / Remove
    # =========================================================================

    async def add_stream(self, guild_id: str, channel_id: str, login: str) -> str:
        """
        Start watching a Twitch login in a guild.

        Args:
            guild_id: Owning guild.
            channel_id: Channel that receives notifications.
            login: Twitch login (any case).

        Returns:
            The streamer's display name.

        Raises:
            AlreadyExistsError: The guild already watches this login.
            NotFoundError: Twitch has no such account.
            ExternalServiceError: The lookup failed.
            PersistenceError: The store rejected the insert; nothing was added.
        """
        guild_id = str(guild_id)
        channel_id = str(channel_id)
        login = normalize_login(login)

        async with self._lock:
            if self._find_locked(guild_id, login):
                raise AlreadyExistsError(f"{login} is already watched in this server")

        user = await self.twitch.get_user(login)
        if user is None:
            raise NotFoundError(f"Twitch user {login} not found")

        watch = StreamWatch(login=login, guild_id=guild_id, channel_id=channel_id)

        async with self._lock:
            # Another add may have completed during the lookup
            if self._find_locked(guild_id, login):
                raise AlreadyExistsError(f"{login} is already watched in this server")

            try:
                await self.db.run(
                    self.db.insert_stream,
                    watch.to_row(),
                    timeout=self.store_timeout,
                    settle=True,
                )
            except PersistenceError as e:
                if isinstance(e.__cause__, sqlite3.IntegrityError):
                    raise AlreadyExistsError(f"{login} is already watched in this server") from e
                raise

            self._streams.append(watch)
            self._by_guild.setdefault(guild_id, []).append(watch)

        logger.tree("Stream Added", [
            ("Guild ID", guild_id),
            ("Channel ID", channel_id),
            ("Login", login),
            ("Display Name", user.display_name),
        ], emoji="➕")

        return user.display_name

    async def remove_stream(self, guild_id: str, login: str) -> int:
        """
        Stop watching a login in a guild.

        Returns:
            Number of watches removed.

        Raises:
            NotFoundError: The guild doesn't watch this login.
            PersistenceError: The store delete failed; nothing was removed.
        """
        guild_id = str(guild_id)
        login = normalize_login(login)

        async with self._lock:
            if not self._find_locked(guild_id, login):
                raise NotFoundError(f"{login} is not watched in this server")

            await self.db.run(
                self.db.delete_stream,
                guild_id,
                login,
                timeout=self.store_timeout,
                settle=True,
            )

            group = self._by_guild.get(guild_id, [])
            doomed = [w for w in group if w.login == login]
            self._by_guild[guild_id] = [w for w in group if w.login != login]
            self._streams = [w for w in self._streams if not any(w is d for d in doomed)]

        logger.tree("Stream Removed", [
            ("Guild ID", guild_id),
            ("Login", login),
            ("Removed", str(len(doomed))),
        ], emoji="➖")

        return len(doomed)

    def _find_locked(self, guild_id: str, login: str) -> Optional[StreamWatch]:
        for watch in self._by_guild.get(guild_id, []):
            if watch.login == login:
                return watch
        return None

    # =========================================================================
    # Mutations
    # =========================================================================

    async def set_custom(
        self,
        guild_id: str,
        login: str,
        message: Optional[str],
        image_url: Optional[str] = None,
    ) -> StreamWatch:
        """
        Set the notification override, or clear it with message=None.

        Raises:
            NotFoundError: The guild doesn't watch this login.
            PersistenceError: The store update failed; the override is unchanged.
        """
        guild_id = str(guild_id)
        login = normalize_login(login)

        async with self._lock:
            watch = self._find_locked(guild_id, login)
            if watch is None:
                raise NotFoundError(f"{login} is not watched in this server")

            if not message:
                message, image_url = None, None

            await self.db.run(
                self.db.update_stream_custom,
                guild_id,
                login,
                message,
                image_url,
                timeout=self.store_timeout,
                settle=True,
            )
            watch.custom_message = message
            watch.custom_image_url = image_url

        logger.tree("Stream Override Updated", [
            ("Guild ID", guild_id),
            ("Login", login),
            ("Custom", "Yes" if message else "Cleared"),
        ], emoji="✏️")

        return watch

    async def set_online(self, watch: StreamWatch, online: bool) -> bool:
        """
        Flip a watch's online flag and persist it.

        A store failure is logged; the in-memory flag keeps the new value
        so the next sweep doesn't re-notify. A watch that was removed in
        the meantime is left alone.

        Returns:
            False if the watch is no longer registered.
        """
        async with self._lock:
            if self._find_locked(watch.guild_id, watch.login) is not watch:
                return False
            watch.is_online = online
            try:
                await self.db.run(
                    self.db.update_stream_state,
                    watch.guild_id,
                    watch.login,
                    online,
                    timeout=self.store_timeout,
                )
            except PersistenceError as e:
                logger.error("Stream State Not Persisted", [
                    ("Guild ID", watch.guild_id),
                    ("Login", watch.login),
                    ("Online", str(online)),
                    ("Error", str(e)),
                ])
        return True


__all__ = ["StreamRegistry", "normalize_login"]
