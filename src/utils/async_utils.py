"""
Herald - Async Utilities
========================

Background task helper with error logging.

Usage:
    from src.utils.async_utils import create_safe_task

    # Instead of:
    asyncio.create_task(self.trigger())

    # Use:
    create_safe_task(self.trigger(), "Twitch Sweep")
"""

import asyncio
from typing import Any, Coroutine, Optional

from src.core.logger import logger


def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: str = "Background Task",
) -> asyncio.Task:
    """
    Create a background task with automatic error logging.

    Unlike raw asyncio.create_task(), this catches and logs any exceptions
    instead of letting them silently disappear.

    Args:
        coro: The coroutine to run as a background task.
        name: Name for logging purposes.

    Returns:
        The created asyncio.Task.
    """
    async def wrapped() -> Optional[Any]:
        try:
            return await coro
        except asyncio.CancelledError:
            # Task was cancelled, this is expected during shutdown
            return None
        except Exception as e:
            logger.error("Background Task Failed", [
                ("Task", name),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:200]),
            ])
            return None

    return asyncio.create_task(wrapped(), name=name)


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["create_safe_task"]
