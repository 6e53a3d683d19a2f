"""
Database Schema Module
======================

Table definitions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.database.manager import DatabaseManager


class SchemaMixin:
    """Mixin for database schema initialization."""

    def _init_tables(self: "DatabaseManager") -> None:
        """
        Initialize all database tables.

        DESIGN: Tables are created if not exist, allowing safe restarts.
        Composite primary keys enforce the uniqueness the registries rely on.
        """
        conn = self._live_connection()
        cursor = conn.cursor()

        # -----------------------------------------------------------------
        # Guilds Table
        # DESIGN: One row per guild, keyed by guild ID
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS guilds (
                guild_id TEXT PRIMARY KEY,
                language TEXT NOT NULL,
                timezone INTEGER NOT NULL DEFAULT 0,
                weather_city TEXT NOT NULL,
                news_country TEXT NOT NULL,
                embed_color INTEGER NOT NULL DEFAULT 0
            )
        """)

        # -----------------------------------------------------------------
        # Streams Table
        # DESIGN: (guild, login) is unique across the whole table
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS streams (
                guild_id TEXT NOT NULL,
                login TEXT NOT NULL,
                channel_id TEXT NOT NULL,
                is_online INTEGER NOT NULL DEFAULT 0,
                custom_message TEXT,
                custom_image_url TEXT,
                added_at REAL NOT NULL,
                PRIMARY KEY (guild_id, login)
            )
        """)

        # -----------------------------------------------------------------
        # Logs Table
        # DESIGN: Append-only audit trail, read back newest-first
        # -----------------------------------------------------------------
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp REAL NOT NULL,
                module TEXT NOT NULL,
                guild_id TEXT,
                text TEXT NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_logs_guild ON logs(guild_id)"
        )

        conn.commit()


__all__ = ["SchemaMixin"]
