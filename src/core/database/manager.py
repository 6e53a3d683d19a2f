"""
Herald - Database Manager
=========================

SQLite connection shared by the guild, stream and audit log mixins.

DESIGN:
    One process-wide instance (get_db()) holding one connection opened
    with check_same_thread=False. A threading.Lock serializes every
    statement, so blocking calls can be pushed onto worker threads by
    run() while the event loop keeps going.
"""

import asyncio
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Tuple, TypeVar

from src.core.constants import DB_CONNECTION_TIMEOUT, SQLITE_BUSY_TIMEOUT
from src.core.errors import PersistenceError
from src.core.logger import logger

from src.core.database.schema import SchemaMixin
from src.core.database.guilds import GuildsMixin
from src.core.database.streams import StreamsMixin
from src.core.database.logs import LogsMixin

T = TypeVar("T")


# =============================================================================
# Constants
# =============================================================================

# <project root>/data, four levels up from this file
DATA_DIR: Path = Path(__file__).resolve().parents[3] / "data"
DB_PATH: Path = DATA_DIR / "herald.db"

PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA temp_store=MEMORY",
    f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT}",
)


# =============================================================================
# Database Manager
# =============================================================================

class DatabaseManager(SchemaMixin, GuildsMixin, StreamsMixin, LogsMixin):
    """
    Singleton SQLite manager.

    Attributes:
        path: Database file in use (DB_PATH at construction time).
    """

    _instance: Optional["DatabaseManager"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._initialized = False
                    cls._instance = instance
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return

        self.path: Path = DB_PATH
        self._conn: Optional[sqlite3.Connection] = None
        self._stmt_lock = threading.Lock()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._open()
        self._init_tables()
        self._initialized = True

        logger.tree("Database Ready", [
            ("Path", str(self.path)),
            ("Journal", "WAL"),
        ], emoji="🗄️")

    # =========================================================================
    # Connection
    # =========================================================================

    def _open(self) -> None:
        try:
            conn = sqlite3.connect(
                str(self.path),
                timeout=DB_CONNECTION_TIMEOUT,
                check_same_thread=False,
            )
            for pragma in PRAGMAS:
                conn.execute(pragma)
        except sqlite3.Error as e:
            logger.error("Database Open Failed", [
                ("Path", str(self.path)),
                ("Error", str(e)),
            ])
            raise
        conn.row_factory = sqlite3.Row
        self._conn = conn

    def _live_connection(self) -> sqlite3.Connection:
        """Return the connection, reopening it if it was closed or broke."""
        if self._conn is not None:
            try:
                self._conn.execute("SELECT 1")
                return self._conn
            except sqlite3.Error:
                self._conn = None
        self._open()
        return self._conn

    @contextmanager
    def _locked(self) -> Iterator[sqlite3.Connection]:
        with self._stmt_lock:
            yield self._live_connection()

    # =========================================================================
    # Statements
    # =========================================================================

    def execute(self, query: str, params: Tuple = (), commit: bool = True) -> sqlite3.Cursor:
        """Run one statement; the returned cursor carries rowcount/lastrowid."""
        with self._locked() as conn:
            cursor = conn.execute(query, params)
            if commit:
                conn.commit()
            return cursor

    def fetchone(self, query: str, params: Tuple = ()) -> Optional[sqlite3.Row]:
        with self._locked() as conn:
            return conn.execute(query, params).fetchone()

    def fetchall(self, query: str, params: Tuple = ()) -> List[sqlite3.Row]:
        with self._locked() as conn:
            return conn.execute(query, params).fetchall()

    def close(self) -> None:
        """Close the connection. A later call reopens it."""
        with self._stmt_lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("Database Connection Closed")

    # =========================================================================
    # Async Bridge
    # =========================================================================

    async def run(
        self,
        func: Callable[..., T],
        *args: Any,
        timeout: float,
        settle: bool = False,
    ) -> T:
        """
        Run a blocking database method in a worker thread with a time bound.

        A worker thread cannot be interrupted, so a timed-out call may still
        commit afterwards. Callers whose in-memory state must match the
        store pass settle=True: past the timeout the call is logged as slow
        and its real outcome is awaited instead of being reported as failed.

        Args:
            func: Bound method of this manager (e.g. self.insert_guild).
            *args: Arguments for func.
            timeout: Seconds before giving up (or, with settle, before
                warning).
            settle: Wait for the thread's real result after the timeout.

        Raises:
            PersistenceError: On sqlite errors, or on timeout without
                settle. The sqlite error is kept as __cause__.
        """
        operation = getattr(func, "__name__", "database call")
        call = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            try:
                return await asyncio.wait_for(asyncio.shield(call), timeout=timeout)
            except asyncio.TimeoutError:
                if not settle:
                    # Still retrieve the late outcome so it is not reported as lost
                    call.add_done_callback(_consume_result)
                    raise PersistenceError(
                        f"Database call timed out after {timeout}s", operation=operation
                    )
                logger.warning("Database Call Slow", [
                    ("Operation", operation),
                    ("Timeout", f"{timeout}s"),
                ])
                return await asyncio.shield(call)
            except asyncio.CancelledError:
                call.add_done_callback(_consume_result)
                raise
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error: {e}", operation=operation) from e


def _consume_result(call: "asyncio.Future[Any]") -> None:
    if not call.cancelled() and call.exception() is not None:
        logger.warning("Late Database Call Failed", [("Error", str(call.exception()))])


def get_db() -> DatabaseManager:
    """Return the process-wide DatabaseManager."""
    return DatabaseManager()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["DatabaseManager", "get_db", "DB_PATH", "DATA_DIR"]
