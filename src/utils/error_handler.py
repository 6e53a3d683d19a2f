"""
Herald Discord Bot - Error Handler
==================================

Last-resort logging for exceptions nobody expected.

Known failures (ExternalServiceError, PersistenceError, ...) are handled
where they happen. Anything else that reaches the gate, the watcher or
main() goes through ErrorHandler.handle, which tags it with a category
and a recovery hint, adds the triggering message when there is one, and
for critical errors also saves the traceback as JSON.
"""

import asyncio
import json
import sqlite3
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, List, Tuple

import aiohttp
import discord

from src.core.errors import ExternalServiceError, PersistenceError
from src.core.logger import LOG_TZ, LOGS_DIR, logger


CATEGORIES: Tuple[Tuple[str, Tuple[type, ...]], ...] = (
    ("discord", (discord.HTTPException, discord.ClientException)),
    ("twitch", (ExternalServiceError, aiohttp.ClientError)),
    ("database", (PersistenceError, sqlite3.Error)),
    ("timeout", (asyncio.TimeoutError,)),
)

HINTS: Dict[str, str] = {
    "discord": "Check the bot's permissions in that server",
    "twitch": "Check TWITCH_CLIENT_ID / TWITCH_OAUTH_TOKEN; the next sweep retries",
    "database": "Check that the data directory is writable and not locked",
    "timeout": "Check network latency",
    "general": "Unexpected error, see traceback",
}


class ErrorHandler:
    """Categorized exception logging."""

    @staticmethod
    def categorize_error(e: BaseException) -> str:
        for category, types in CATEGORIES:
            if isinstance(e, types):
                return category
        return "general"

    @staticmethod
    def _message_details(message: Any) -> List[Tuple[str, str]]:
        if not isinstance(message, discord.Message):
            return []
        return [
            ("Guild", message.guild.name if message.guild else "DM"),
            ("Author", f"{message.author} ({message.author.id})"),
            ("Content", (message.content or "")[:100]),
        ]

    @classmethod
    def handle(cls, e: BaseException, location: str, critical: bool = False, **context: Any) -> str:
        """
        Log an exception with its category and recovery hint.

        Args:
            e: The exception.
            location: Where it was caught (e.g. "CommandGate.dispatch").
            critical: Also save the full context to LOGS_DIR/errors.
            **context: Extra details; a discord.Message under "message"
                is summarized.

        Returns:
            The category name.
        """
        category = cls.categorize_error(e)
        details = [
            ("Location", location),
            ("Error Type", type(e).__name__),
            ("Error", str(e)[:100]),
            ("Recovery", HINTS[category]),
        ]
        details.extend(cls._message_details(context.get("message")))
        details.extend(
            (key.replace("_", " ").title(), str(value)[:100])
            for key, value in context.items()
            if key != "message"
        )

        title = f"[{category.upper()}] in {location}"
        if critical:
            logger.error(f"💥 CRITICAL ERROR {title}", details)
            cls._store_critical_error(e, location, category, context)
        else:
            logger.error(f"ERROR {title}", details)

        return category

    @staticmethod
    def _store_critical_error(
        e: BaseException,
        location: str,
        category: str,
        context: Dict[str, Any],
    ) -> None:
        """Write the traceback and context as JSON under LOGS_DIR/errors."""
        record = {
            "timestamp": datetime.now(LOG_TZ).isoformat(),
            "location": location,
            "category": category,
            "error_type": type(e).__name__,
            "error_message": str(e),
            "traceback": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
            "python_version": sys.version,
            "context": {k: str(v) for k, v in context.items()},
        }
        try:
            error_dir = LOGS_DIR / "errors"
            error_dir.mkdir(parents=True, exist_ok=True)
            path = error_dir / f"error_{datetime.now(LOG_TZ):%Y%m%d_%H%M%S}.json"
            with open(path, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2)
            logger.info(f"Critical error saved to {path}")
        except OSError as save_error:
            logger.info(f"Failed to save error details: {save_error}")


__all__ = ["ErrorHandler"]
