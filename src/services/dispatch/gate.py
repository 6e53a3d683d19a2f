"""
Herald - Command Dispatch Gate
==============================

Turns an inbound Discord message into at most one handler call.

DESIGN:
    Steps for every message:
    1. Count it.
    2. Drop bot authors (including ourselves), DMs and empty content.
    3. Look up the first token; unknown tokens are dropped silently.
    4. Check Send Messages + Attach Files in the channel. A denial is
       written to the audit log and counted, never raised.
    5. Get or create the guild's settings, build the context, run the
       handler. AuthorizationError becomes a reply; other handler
       exceptions are logged and counted here.

    The routing table is filled and frozen before the app context is
    published to the cogs, so dispatch reads it without locking.
"""

from typing import TYPE_CHECKING, Dict, List, Optional

import discord

from src.core.errors import AuthorizationError, PersistenceError
from src.core.logger import logger
from src.services.dispatch.base import CommandHandler
from src.services.dispatch.context import ExecutionContext
from src.utils.error_handler import ErrorHandler

if TYPE_CHECKING:
    from src.core.app import AppContext


class CommandGate:
    """
    Routes messages to registered command handlers.

    Attributes:
        app: Shared dependencies passed to every handler.
    """

    def __init__(self, app: "AppContext") -> None:
        self.app = app
        self._handlers: Dict[str, CommandHandler] = {}
        self._frozen: bool = False

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, token: str, handler: CommandHandler) -> None:
        """
        Route a command token to a handler.

        Raises:
            RuntimeError: If the table is frozen.
            ValueError: If the token is already taken.
        """
        if self._frozen:
            raise RuntimeError(f"Cannot register {token}: command table is frozen")

        token = token.lower()
        if token in self._handlers:
            raise ValueError(f"Command token already registered: {token}")
        self._handlers[token] = handler

    def register_handler(self, handler: CommandHandler) -> None:
        """Register a handler under its name and every alias."""
        for token in handler.tokens:
            self.register(token, handler)

    def freeze(self) -> None:
        """Stop accepting registrations."""
        self._frozen = True
        logger.tree("Command Table Frozen", [
            ("Tokens", ", ".join(sorted(self._handlers)) or "None"),
        ], emoji="🔒")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def handlers(self) -> List[CommandHandler]:
        """Distinct handlers in registration order."""
        seen: List[CommandHandler] = []
        for handler in self._handlers.values():
            if not any(handler is h for h in seen):
                seen.append(handler)
        return seen

    def get_handler(self, token: str) -> Optional[CommandHandler]:
        return self._handlers.get(token.lower())

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def dispatch(self, message: discord.Message) -> None:
        """Handle one inbound message. Never raises."""
        metrics = self.app.metrics
        metrics.increment("messages")

        author = message.author
        if author.bot:
            return
        me = getattr(self.app.gateway.client, "user", None)
        if me is not None and author.id == me.id:
            return
        if message.guild is None:
            return

        tokens = (message.content or "").split()
        if not tokens:
            return

        command = tokens[0].lower()
        handler = self._handlers.get(command)
        if handler is None:
            return

        guild_id = str(message.guild.id)

        try:
            allowed, reason = self.app.gateway.check_send_permissions(message.channel)
        except Exception as e:
            allowed, reason = False, f"Permission check failed: {type(e).__name__}: {e}"

        if not allowed:
            await self._deny(guild_id, command, reason)
            return

        record = await self.app.guilds.get_or_create(guild_id)
        ctx = ExecutionContext(
            message=message,
            command=command,
            args=tokens[1:],
            record=record,
            app=self.app,
        )

        metrics.increment("commands")
        try:
            await handler.execute(ctx)
        except AuthorizationError as e:
            logger.info(f"Command {command} refused for {message.author} in {guild_id}")
            await ctx.reply(str(e))
        except Exception as e:
            metrics.increment("command_errors")
            ErrorHandler.handle(e, location=f"Command {command}", message=message)

    async def _deny(self, guild_id: str, command: str, reason: str) -> None:
        """Audit and count a message the bot can't answer."""
        self.app.metrics.increment("permission_denied")
        logger.warning("Command Blocked By Permissions", [
            ("Guild ID", guild_id),
            ("Command", command),
            ("Reason", reason),
        ])
        try:
            await self.app.db.run(
                self.app.db.add_log, "Message", guild_id, reason,
                timeout=self.app.config.store_timeout,
            )
        except PersistenceError as e:
            logger.error("Audit Entry Not Written", [
                ("Module", "Message"),
                ("Guild ID", guild_id),
                ("Error", str(e)),
            ])


__all__ = ["CommandGate"]
