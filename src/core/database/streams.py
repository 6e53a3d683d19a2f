"""
Herald - Twitch Streams Mixin
=============================

Watched stream persistence.
"""

import time
from typing import TYPE_CHECKING, List, Optional

from src.core.database.models import StreamRow

if TYPE_CHECKING:
    from .manager import DatabaseManager


def _to_stream_row(row) -> StreamRow:
    """Convert a sqlite row to StreamRow with a real bool flag."""
    return StreamRow(
        guild_id=row["guild_id"],
        login=row["login"],
        channel_id=row["channel_id"],
        is_online=bool(row["is_online"]),
        custom_message=row["custom_message"],
        custom_image_url=row["custom_image_url"],
    )


class StreamsMixin:
    """Mixin for watched stream operations."""

    def get_guild_streams(self: "DatabaseManager", guild_id: str) -> List[StreamRow]:
        """
        Get watched streams for a guild, oldest first.

        Args:
            guild_id: Guild ID.
        """
        rows = self.fetchall(
            "SELECT * FROM streams WHERE guild_id = ? ORDER BY added_at, login",
            (guild_id,)
        )
        return [_to_stream_row(row) for row in rows]

    def get_stream(self: "DatabaseManager", guild_id: str, login: str) -> Optional[StreamRow]:
        """Get one watched stream, or None."""
        row = self.fetchone(
            "SELECT * FROM streams WHERE guild_id = ? AND login = ?",
            (guild_id, login)
        )
        return _to_stream_row(row) if row else None

    def insert_stream(self: "DatabaseManager", row: StreamRow) -> None:
        """
        Insert a watched stream.

        Raises:
            sqlite3.IntegrityError: If (guild_id, login) already exists.
        """
        self.execute(
            """INSERT INTO streams
               (guild_id, login, channel_id, is_online, custom_message, custom_image_url, added_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                row["guild_id"],
                row["login"],
                row["channel_id"],
                int(row["is_online"]),
                row.get("custom_message"),
                row.get("custom_image_url"),
                time.time(),
            )
        )

    def update_stream_state(self: "DatabaseManager", guild_id: str, login: str, is_online: bool) -> bool:
        """Persist the last-known online flag. Returns True if a row changed."""
        cursor = self.execute(
            "UPDATE streams SET is_online = ? WHERE guild_id = ? AND login = ?",
            (int(is_online), guild_id, login)
        )
        return cursor.rowcount > 0

    def update_stream_custom(
        self: "DatabaseManager",
        guild_id: str,
        login: str,
        custom_message: Optional[str],
        custom_image_url: Optional[str],
    ) -> bool:
        """Persist (or clear, with None) the notification override."""
        cursor = self.execute(
            """UPDATE streams SET custom_message = ?, custom_image_url = ?
               WHERE guild_id = ? AND login = ?""",
            (custom_message, custom_image_url, guild_id, login)
        )
        return cursor.rowcount > 0

    def delete_stream(self: "DatabaseManager", guild_id: str, login: str) -> int:
        """Delete a watched stream. Returns number of rows removed."""
        cursor = self.execute(
            "DELETE FROM streams WHERE guild_id = ? AND login = ?",
            (guild_id, login)
        )
        return cursor.rowcount


__all__ = ["StreamsMixin"]
