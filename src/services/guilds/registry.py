"""
Herald - Guild Registry
=======================

Authoritative in-memory cache of per-guild settings, written through
to the database.

DESIGN:
    The registry owns every GuildRecord. Records are shared by reference
    with command handlers, so a handler always sees the latest value.

    Concurrency:
    - Reads of a resident record (get, fast path of get_or_create) never
      take the lock.
    - Every mutation (create path, update, hydrate) runs under one
      asyncio.Lock, so N concurrent get_or_create calls for an unknown
      guild produce exactly one row and one instance.

    Consistency:
    - update() changes memory first, then the store. A failed store
      write raises PersistenceError but keeps the new in-memory value.
      There is no rollback and no retry.
"""

import asyncio
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.core.config import GuildDefaults, parse_color
from src.core.database import DatabaseManager, GuildRow
from src.core.errors import NotFoundError, PersistenceError
from src.core.logger import logger


# =============================================================================
# Guild Record
# =============================================================================

@dataclass
class GuildRecord:
    """
    Settings for one guild.

    Attributes:
        guild_id: Guild ID (opaque string).
        language: Locale code used for replies.
        timezone: Offset from UTC in hours.
        weather_city: City used by weather commands.
        news_country: Country code used by news commands.
        embed_color: 24-bit embed color.
    """

    guild_id: str
    language: str
    timezone: int
    weather_city: str
    news_country: str
    embed_color: int

    @classmethod
    def from_defaults(cls, guild_id: str, defaults: GuildDefaults) -> "GuildRecord":
        """Build a record for a guild seen for the first time."""
        return cls(
            guild_id=guild_id,
            language=defaults.language,
            timezone=defaults.timezone,
            weather_city=defaults.weather_city,
            news_country=defaults.news_country,
            embed_color=defaults.embed_color,
        )

    @classmethod
    def from_row(cls, row: GuildRow) -> "GuildRecord":
        """Build a record from a database row."""
        return cls(
            guild_id=row["guild_id"],
            language=row["language"],
            timezone=int(row["timezone"]),
            weather_city=row["weather_city"],
            news_country=row["news_country"],
            embed_color=int(row["embed_color"]),
        )

    def to_row(self) -> GuildRow:
        """Convert to a database row."""
        return GuildRow(**asdict(self))


def _parse_timezone(value: Any) -> int:
    tz = int(value)
    if not -12 <= tz <= 14:
        raise ValueError(f"Timezone out of range: {value}")
    return tz


def _parse_embed_color(value: Any) -> int:
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError(f"Color out of range: {value}")
        return value
    return parse_color(str(value))


GUILD_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "language": lambda v: str(v).strip().lower(),
    "timezone": _parse_timezone,
    "weather_city": lambda v: str(v).strip(),
    "news_country": lambda v: str(v).strip().lower(),
    "embed_color": _parse_embed_color,
}
"""Updatable fields and the coercion applied to incoming values."""


# =============================================================================
# Guild Registry
# =============================================================================

class GuildRegistry:
    """
    Per-guild settings cache with write-through persistence.

    Attributes:
        db: Database manager.
        defaults: Settings for newly seen guilds.
        store_timeout: Bound on each database call (seconds).
    """

    def __init__(
        self,
        db: DatabaseManager,
        defaults: GuildDefaults,
        store_timeout: float = 5.0,
    ) -> None:
        self.db = db
        self.defaults = defaults
        self.store_timeout = store_timeout
        self._guilds: Dict[str, GuildRecord] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, guild_id: str) -> Optional[GuildRecord]:
        """Get a resident record without touching the store or the lock."""
        return self._guilds.get(str(guild_id))

    def guild_ids(self) -> List[str]:
        """IDs of every resident guild."""
        return list(self._guilds)

    def __len__(self) -> int:
        return len(self._guilds)

    def __contains__(self, guild_id: object) -> bool:
        return str(guild_id) in self._guilds

    # =========================================================================
    # Hydration
    # =========================================================================

    async def hydrate(self, guild_ids: List[str]) -> Tuple[int, int]:
        """
        Load every known guild, creating default records for new ones.

        Safe to call more than once: resident guilds count as loaded and
        the store ignores duplicate inserts.

        Args:
            guild_ids: IDs of guilds the bot is currently in.

        Returns:
            (loaded, created) counts.
        """
        loaded = 0
        created = 0

        async with self._lock:
            for raw_id in guild_ids:
                guild_id = str(raw_id)
                if guild_id in self._guilds:
                    loaded += 1
                    continue

                try:
                    row = await self.db.run(self.db.get_guild, guild_id, timeout=self.store_timeout)
                except PersistenceError as e:
                    logger.error("Guild Hydration Read Failed", [
                        ("Guild ID", guild_id),
                        ("Error", str(e)),
                    ])
                    row = None

                if row:
                    self._guilds[guild_id] = GuildRecord.from_row(row)
                    loaded += 1
                    continue

                record = GuildRecord.from_defaults(guild_id, self.defaults)
                await self._persist_new(record)
                self._guilds[guild_id] = record
                created += 1

        logger.tree("Guilds Hydrated", [
            ("Loaded", str(loaded)),
            ("Created", str(created)),
        ], emoji="🏰")

        return loaded, created

    # =========================================================================
    # Get Or Create
    # =========================================================================

    async def get_or_create(self, guild_id: str) -> GuildRecord:
        """
        Get a guild's record, creating and persisting a default one if needed.

        Never raises: a store failure on the create path is logged and the
        in-memory record is still returned.

        Args:
            guild_id: Guild ID.

        Returns:
            The registry's instance for this guild.
        """
        guild_id = str(guild_id)

        record = self._guilds.get(guild_id)
        if record is not None:
            return record

        async with self._lock:
            # Another caller may have created it while we waited
            record = self._guilds.get(guild_id)
            if record is not None:
                return record

            record = GuildRecord.from_defaults(guild_id, self.defaults)
            await self._persist_new(record)
            self._guilds[guild_id] = record

        logger.tree("Guild Record Created", [
            ("Guild ID", guild_id),
            ("Language", record.language),
        ], emoji="🆕")

        return record

    async def _persist_new(self, record: GuildRecord) -> None:
        """Insert a new record; failures are logged, not raised."""
        try:
            await self.db.run(self.db.insert_guild, record.to_row(), timeout=self.store_timeout)
        except PersistenceError as e:
            logger.error("Guild Insert Failed", [
                ("Guild ID", record.guild_id),
                ("Error", str(e)),
            ])

    # =========================================================================
    # Update
    # =========================================================================

    async def update(self, guild_id: str, field: str, value: Any) -> GuildRecord:
        """
        Change one setting in memory, then in the store.

        Args:
            guild_id: Guild ID.
            field: One of GUILD_FIELDS.
            value: New value (coerced to the field's type).

        Returns:
            The updated record.

        Raises:
            NotFoundError: If field isn't a known setting.
            ValueError: If value can't be coerced.
            PersistenceError: If the store write failed. The in-memory
                value has already changed.
        """
        if field not in GUILD_FIELDS:
            raise NotFoundError(f"Unknown setting: {field}")

        coerced = GUILD_FIELDS[field](value)
        record = await self.get_or_create(guild_id)

        async with self._lock:
            setattr(record, field, coerced)
            try:
                updated = await self.db.run(
                    self.db.update_guild_field,
                    record.guild_id,
                    field,
                    coerced,
                    timeout=self.store_timeout,
                )
            except PersistenceError as e:
                logger.error("Guild Update Not Persisted", [
                    ("Guild ID", record.guild_id),
                    ("Field", field),
                    ("Value", str(coerced)),
                    ("Error", str(e)),
                ])
                raise

            if not updated:
                # Row was missing (e.g. earlier insert failed): write the full record
                try:
                    await self.db.run(self.db.insert_guild, record.to_row(), timeout=self.store_timeout)
                except PersistenceError as e:
                    logger.error("Guild Update Not Persisted", [
                        ("Guild ID", record.guild_id),
                        ("Field", field),
                        ("Error", str(e)),
                    ])
                    raise

        logger.tree("Guild Setting Updated", [
            ("Guild ID", record.guild_id),
            ("Field", field),
            ("Value", str(coerced)),
        ], emoji="⚙️")

        return record


__all__ = ["GuildRecord", "GuildRegistry", "GUILD_FIELDS"]
