#!/usr/bin/env python3
"""
Herald - Discord Bot Entry Point
================================

Loads .env, validates configuration and runs the bot until SIGINT/SIGTERM.

Features:
- Fails fast on missing configuration
- Graceful shutdown: watcher stopped, counters flushed, HTTP session
  and database closed
"""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from src.core.config import ConfigValidationError, validate_and_log_config
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler


async def main() -> None:
    """
    Main entry point for Herald.

    Handles the complete bot lifecycle:
    1. Loads environment configuration
    2. Validates required variables
    3. Initializes the bot and connects to Discord
    4. Closes everything on SIGINT/SIGTERM

    Raises:
        SystemExit: If configuration is invalid or the bot fails to start
    """
    load_dotenv()

    logger.tree("HERALD STARTING", [
        ("Commands", "!twitch, !b, !help"),
    ], "📣")

    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Configuration Invalid", [("Error", str(e))])
        sys.exit(1)

    from src.bot import HeraldBot
    from src.core.config import get_config

    bot = HeraldBot()
    loop = asyncio.get_running_loop()

    def request_shutdown(sig_name: str) -> None:
        logger.info(f"Received {sig_name}, shutting down")
        asyncio.ensure_future(bot.close())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig.name)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        async with bot:
            await bot.start(get_config().discord_token)
    except Exception as e:
        ErrorHandler.handle(
            e,
            location="main.main",
            critical=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("🛑 Bot stopped by user (Ctrl+C)")
