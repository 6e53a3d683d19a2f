"""
Herald - Database Module
========================

SQLite persistence for guild settings, watched streams and the audit log.
"""

from src.core.database.manager import (
    DatabaseManager,
    get_db,
    DATA_DIR,
    DB_PATH,
)

from src.core.database.models import (
    GuildRow,
    StreamRow,
    LogRow,
)

__all__ = [
    # Main interface
    "DatabaseManager",
    "get_db",
    "DATA_DIR",
    "DB_PATH",

    # Type definitions
    "GuildRow",
    "StreamRow",
    "LogRow",
]
