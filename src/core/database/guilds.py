"""
Herald - Guild Settings Mixin
=============================

Per-guild settings persistence.
"""

from typing import TYPE_CHECKING, Any, List, Optional

from src.core.database.models import GuildRow

if TYPE_CHECKING:
    from .manager import DatabaseManager


GUILD_COLUMNS = ("language", "timezone", "weather_city", "news_country", "embed_color")
"""Columns that may be changed through update_guild_field()."""


class GuildsMixin:
    """Mixin for guild settings operations."""

    def get_guild(self: "DatabaseManager", guild_id: str) -> Optional[GuildRow]:
        """
        Get the settings row for a guild.

        Args:
            guild_id: Guild ID.

        Returns:
            Row as dict, or None if the guild was never stored.
        """
        row = self.fetchone("SELECT * FROM guilds WHERE guild_id = ?", (guild_id,))
        return dict(row) if row else None

    def get_all_guilds(self: "DatabaseManager") -> List[GuildRow]:
        """Get every stored guild row."""
        return [dict(row) for row in self.fetchall("SELECT * FROM guilds ORDER BY guild_id")]

    def insert_guild(self: "DatabaseManager", row: GuildRow) -> bool:
        """
        Insert a guild row unless one already exists.

        Returns:
            True if a row was inserted, False if the guild was already stored.
        """
        cursor = self.execute(
            """INSERT OR IGNORE INTO guilds
               (guild_id, language, timezone, weather_city, news_country, embed_color)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                row["guild_id"],
                row["language"],
                row["timezone"],
                row["weather_city"],
                row["news_country"],
                row["embed_color"],
            )
        )
        return cursor.rowcount > 0

    def update_guild_field(self: "DatabaseManager", guild_id: str, field: str, value: Any) -> bool:
        """
        Set a single column on a guild row.

        Raises:
            ValueError: If field isn't an updatable column.

        Returns:
            True if a row was updated.
        """
        if field not in GUILD_COLUMNS:
            raise ValueError(f"Unknown guild field: {field}")
        cursor = self.execute(
            f"UPDATE guilds SET {field} = ? WHERE guild_id = ?",
            (value, guild_id)
        )
        return cursor.rowcount > 0


__all__ = ["GuildsMixin", "GUILD_COLUMNS"]
