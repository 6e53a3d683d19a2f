"""
Herald - Audit Log Mixin
========================

Append-only audit trail shown to the bot owner with "!b logs".
"""

import time
from typing import TYPE_CHECKING, List, Optional

from src.core.database.models import LogRow

if TYPE_CHECKING:
    from .manager import DatabaseManager


class LogsMixin:
    """Mixin for audit log operations."""

    def add_log(self: "DatabaseManager", module: str, guild_id: Optional[str], text: str) -> int:
        """
        Append an audit entry.

        Args:
            module: Subsystem name (e.g. "Message", "Twitch", "Config").
            guild_id: Guild the entry belongs to, if any.
            text: Entry text.

        Returns:
            Row ID of the entry.
        """
        cursor = self.execute(
            "INSERT INTO logs (timestamp, module, guild_id, text) VALUES (?, ?, ?, ?)",
            (time.time(), module, guild_id, text)
        )
        return cursor.lastrowid

    def get_recent_logs(self: "DatabaseManager", count: int = 10) -> List[LogRow]:
        """
        Get the most recent audit entries, newest first.

        Args:
            count: Maximum number of entries.
        """
        rows = self.fetchall(
            "SELECT * FROM logs ORDER BY id DESC LIMIT ?",
            (max(count, 0),)
        )
        return [dict(row) for row in rows]

    def count_logs(self: "DatabaseManager") -> int:
        """Total number of audit entries."""
        row = self.fetchone("SELECT COUNT(*) AS total FROM logs")
        return row["total"] if row else 0


__all__ = ["LogsMixin"]
