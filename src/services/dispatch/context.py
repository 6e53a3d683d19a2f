"""
Herald - Execution Context
==========================

Everything a command handler gets for one invocation.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

import discord

from src.core.errors import AuthorizationError, PersistenceError
from src.core.logger import logger

if TYPE_CHECKING:
    from src.core.app import AppContext
    from src.core.database import DatabaseManager
    from src.services.gateway import DiscordGateway
    from src.services.guilds import GuildRecord, GuildRegistry
    from src.services.twitch import StreamRegistry


@dataclass
class ExecutionContext:
    """
    Per-message invocation context.

    Attributes:
        message: The triggering message.
        command: Lower-cased command token.
        args: Whitespace-split tail after the command token.
        record: The guild's settings (shared registry instance).
        app: Shared dependencies.
    """

    message: discord.Message
    command: str
    args: List[str]
    record: "GuildRecord"
    app: "AppContext" = field(repr=False)

    # =========================================================================
    # Shortcuts
    # =========================================================================

    @property
    def guild(self) -> discord.Guild:
        return self.message.guild

    @property
    def guild_id(self) -> str:
        return str(self.message.guild.id)

    @property
    def channel(self) -> discord.abc.Messageable:
        return self.message.channel

    @property
    def channel_id(self) -> str:
        return str(self.message.channel.id)

    @property
    def user(self) -> discord.abc.User:
        return self.message.author

    @property
    def guilds(self) -> "GuildRegistry":
        return self.app.guilds

    @property
    def streams(self) -> "StreamRegistry":
        return self.app.streams

    @property
    def db(self) -> "DatabaseManager":
        return self.app.db

    @property
    def gateway(self) -> "DiscordGateway":
        return self.app.gateway

    def arg(self, index: int, default: Optional[str] = None) -> Optional[str]:
        """Positional argument, or default if absent."""
        if 0 <= index < len(self.args):
            return self.args[index]
        return default

    def rest(self, start: int) -> str:
        """Arguments from start onward, joined by single spaces."""
        return " ".join(self.args[start:])

    # =========================================================================
    # Permissions
    # =========================================================================

    @property
    def is_server_admin(self) -> bool:
        perms = getattr(self.message.author, "guild_permissions", None)
        return bool(perms and perms.administrator)

    @property
    def is_developer(self) -> bool:
        developer_id = self.app.config.developer_id
        return developer_id is not None and self.message.author.id == developer_id

    def require_server_admin(self) -> None:
        """Raise AuthorizationError unless the author has Administrator."""
        if not self.is_server_admin:
            raise AuthorizationError("Only server administrators can use this command.")

    def require_developer(self) -> None:
        """Raise AuthorizationError unless the author is the bot owner."""
        if not self.is_developer:
            raise AuthorizationError("This command is restricted to the bot owner.")

    # =========================================================================
    # Replies
    # =========================================================================

    async def reply(self, text: str) -> Optional[discord.Message]:
        return await self.gateway.send_message(self.channel_id, text)

    async def reply_embed(
        self,
        embed: discord.Embed,
        content: Optional[str] = None,
    ) -> Optional[discord.Message]:
        """Send an embed, colored with the guild's embed color unless already set."""
        if embed.color is None:
            embed.color = self.record.embed_color
        return await self.gateway.send_embed(self.channel_id, embed, content)

    async def log(self, module: str, text: str) -> None:
        """Append an audit entry for this guild; failures are logged only."""
        try:
            await self.db.run(
                self.db.add_log, module, self.guild_id, text,
                timeout=self.app.config.store_timeout,
            )
        except PersistenceError as e:
            logger.error("Audit Entry Not Written", [
                ("Module", module),
                ("Guild ID", self.guild_id),
                ("Error", str(e)),
            ])


__all__ = ["ExecutionContext"]
