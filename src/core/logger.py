"""
Herald Discord Bot - Logger Module
==================================

Tree-style console and file logging with UTC timestamps.

DESIGN:
    One TreeLogger per process (the module-level `logger`). Every line goes
    to stdout and to logs/<YYYY-MM-DD>/Herald-<date>.log; errors are also
    copied to Herald-Errors-<date>.log so they can be read on their own.

    Structured details are written as (key, value) pairs under the title:

        [02:30:45 PM UTC] 🔴 Live Notification Sent
          ├─ Login: ninja
          └─ Channel ID: 555666777

    Date folders older than LOG_RETENTION_DAYS are removed at startup.
    Errors with details are forwarded to a Discord webhook when one is set.
"""

import asyncio
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import aiohttp
from zoneinfo import ZoneInfo


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("HERALD_LOGS_DIR", "logs"))
"""Base directory; each day gets its own sub-folder."""

LOG_RETENTION_DAYS = 7

LOG_TZ = ZoneInfo("UTC")
"""Timezone used for every log timestamp."""

WEBHOOK_TIMEOUT = 10

Details = List[Tuple[str, str]]


# =============================================================================
# Tree Logger
# =============================================================================

class TreeLogger:
    """
    Process-wide logger.

    Attributes:
        run_id: Short random ID written in the session header and webhook footer.
        log_file: Main log file for today.
        error_file: Error-only log file for today.
    """

    def __init__(self, base_dir: Path = LOGS_DIR) -> None:
        self.run_id: str = uuid.uuid4().hex[:8]
        self._webhook_url: Optional[str] = None

        today = datetime.now(LOG_TZ).strftime("%Y-%m-%d")
        self.base_dir = base_dir
        self.log_dir = base_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file = self.log_dir / f"Herald-{today}.log"
        self.error_file = self.log_dir / f"Herald-Errors-{today}.log"

        self._prune_old_dirs()
        self._append(
            self.log_file,
            f"\n{'=' * 60}\nSESSION {self.run_id} started {self._stamp()}\n{'=' * 60}\n",
        )

    def set_webhook(self, url: Optional[str]) -> None:
        """Forward future detailed errors to this Discord webhook (None disables)."""
        self._webhook_url = url

    # =========================================================================
    # Files
    # =========================================================================

    def _prune_old_dirs(self) -> None:
        cutoff = datetime.now(LOG_TZ).date()
        removed = 0
        for entry in self.base_dir.iterdir():
            if not entry.is_dir():
                continue
            try:
                day = datetime.strptime(entry.name, "%Y-%m-%d").date()
            except ValueError:
                continue
            if (cutoff - day).days <= LOG_RETENTION_DAYS:
                continue
            for child in entry.iterdir():
                child.unlink()
            entry.rmdir()
            removed += 1
        if removed:
            print(f"[LOG CLEANUP] Removed {removed} old log directories")

    @staticmethod
    def _append(path: Path, text: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)

    @staticmethod
    def _stamp() -> str:
        return datetime.now(LOG_TZ).strftime("[%I:%M:%S %p %Z]")

    # =========================================================================
    # Output
    # =========================================================================

    def _emit(self, line: str, is_error: bool = False) -> None:
        """Print one line and append it to today's file(s)."""
        print(line)
        self._append(self.log_file, line + "\n")
        if is_error:
            self._append(self.error_file, line + "\n")

    def _headline(self, msg: str, emoji: str, is_error: bool = False) -> None:
        prefix = f"{self._stamp()} {emoji}" if emoji else self._stamp()
        self._emit(f"{prefix} {msg}", is_error)

    def _branches(self, details: Details, is_error: bool = False) -> None:
        last = len(details) - 1
        for i, (key, value) in enumerate(details):
            connector = "└─" if i == last else "├─"
            self._emit(f"  {connector} {key}: {value}", is_error)

    # =========================================================================
    # Public API
    # =========================================================================

    def tree(self, title: str, items: Details, emoji: str = "📦") -> None:
        """Log a titled block of (key, value) pairs, padded by blank lines in the file."""
        self._append(self.log_file, "\n")
        self._headline(title, emoji)
        self._branches(items)
        self._append(self.log_file, "\n")

    def debug(self, msg: str) -> None:
        """Only written when the DEBUG environment variable is set."""
        if os.getenv("DEBUG"):
            self._headline(msg, "🔍")

    def info(self, msg: str) -> None:
        self._headline(msg, "ℹ️")

    def warning(self, msg: str, details: Optional[Details] = None) -> None:
        self._headline(msg, "⚠️")
        if details:
            self._branches(details)

    def error(self, msg: str, details: Optional[Details] = None) -> None:
        """
        Log an error to both files.

        With details, the block is also sent to the webhook (if set) as a
        background task on the running loop.
        """
        self._headline(msg, "❌", is_error=True)
        if not details:
            return

        self._branches(details, is_error=True)
        if self._webhook_url:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return  # No loop yet; the file copy is enough
            loop.create_task(self._post_webhook(msg, details))

    # =========================================================================
    # Webhook
    # =========================================================================

    async def _post_webhook(self, title: str, details: Details) -> None:
        """POST one error embed; delivery problems are printed, never raised."""
        url = self._webhook_url
        if not url:
            return

        payload = {
            "embeds": [{
                "title": f"❌ {title}",
                "description": "\n".join(f"**{k}:** {v}" for k, v in details),
                "color": 0xFF0000,
                "timestamp": datetime.now(LOG_TZ).isoformat(),
                "footer": {"text": f"Herald | Run ID: {self.run_id}"},
            }]
        }

        try:
            timeout = aiohttp.ClientTimeout(total=WEBHOOK_TIMEOUT)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload) as resp:
                    if resp.status >= 300:
                        print(f"Webhook error: HTTP {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            print(f"Failed to send webhook: {e}")


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()
"""Shared instance, created at import time."""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "logger",
    "TreeLogger",
    "LOG_TZ",
    "LOGS_DIR",
]
