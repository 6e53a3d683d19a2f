"""
Herald - Main Bot Class
=======================

Discord client that hosts the command gate and the Twitch presence watcher.

Features:
- Per-guild settings with write-through persistence
- Twitch live notifications
- Audit log for admin actions and permission problems
"""

import asyncio
from typing import Optional

import discord
from discord.ext import commands

from src.core.app import AppContext
from src.core.config import get_config
from src.core.database import get_db
from src.core.logger import logger
from src.utils.error_handler import ErrorHandler


# =============================================================================
# HeraldBot Class
# =============================================================================

class HeraldBot(commands.Bot):
    """
    Main Discord bot class.

    DESIGN: The bot only connects and hosts cogs. All shared state lives
    in self.app (AppContext), built once the guild list is known.

    SERVICE INITIALIZATION ORDER:
    1. setup_hook (before on_ready):
       - Event cog loading

    2. on_ready (until one succeeds):
       - AppContext creation
       - Command registration + freeze
       - Guild hydration, stream load, watcher start
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self) -> None:
        """Initialize the bot with the intents the gate needs."""
        self.config = get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.db = get_db()
        self.app: Optional[AppContext] = None
        self._setup_lock = asyncio.Lock()

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Load event cogs before on_ready."""
        from src.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        """Build the app context when the guild list is available."""
        async with self._setup_lock:
            if self.app is not None:
                logger.info("Bot Reconnected (skipping re-initialization)")
                return

            if not self.user:
                return

            logger.tree("BOT ONLINE", [
                ("Name", self.user.name),
                ("ID", str(self.user.id)),
                ("Guilds", str(len(self.guilds))),
            ], emoji="🚀")

            if self.config.error_webhook_url:
                logger.set_webhook(self.config.error_webhook_url)

            from src.commands import register_commands

            app: Optional[AppContext] = None
            try:
                app = AppContext.create(self, self.config, self.db)
                register_commands(app.gate)
                await app.start([str(guild.id) for guild in self.guilds])
            except Exception as e:
                # self.app stays None; the next on_ready retries
                ErrorHandler.handle(e, location="HeraldBot.on_ready", critical=True)
                if app is not None:
                    await app.close()
                return

            self.app = app

        logger.tree("HERALD READY", [
            ("Guilds", str(len(app.guilds))),
            ("Streams", str(len(app.streams))),
            ("Sweep Interval", f"{self.config.twitch_sweep_interval}s"),
        ], emoji="📣")

    async def on_message(self, message: discord.Message) -> None:
        """Handled by the MessageEvents cog; no discord.ext prefix commands."""
        return

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def close(self) -> None:
        """Release the app context, then disconnect."""
        logger.info("Shutting Down")
        if self.app is not None:
            await self.app.close()
        await super().close()


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["HeraldBot"]
