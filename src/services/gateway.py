"""
Herald - Discord Gateway
========================

The only place Herald talks to Discord directly: permission checks and
sends, each bounded by GATEWAY_TIMEOUT.

DESIGN:
    Sends never raise. A missing channel, a Forbidden or a timeout is
    logged and reported as None so callers (the watcher, command replies)
    can carry on with their own bookkeeping.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Tuple

import discord

from src.core.logger import logger

if TYPE_CHECKING:
    from discord.abc import Messageable


class DiscordGateway:
    """
    Bounded wrapper over the discord.py client.

    Attributes:
        client: Connected discord.py client (the bot).
        timeout: Bound on each send (seconds).
    """

    def __init__(self, client: discord.Client, timeout: float = 10.0) -> None:
        self.client = client
        self.timeout = timeout

    # =========================================================================
    # Permissions
    # =========================================================================

    def check_send_permissions(self, channel: discord.abc.GuildChannel) -> Tuple[bool, str]:
        """
        Check that the bot can send messages and attach files in a channel.

        Returns:
            (allowed, reason). reason is empty when allowed.
        """
        guild = getattr(channel, "guild", None)
        if guild is None:
            return False, "Channel is not in a guild"

        me = guild.me
        if me is None:
            return False, "Bot member not cached for guild"

        perms = channel.permissions_for(me)
        missing = []
        if not perms.send_messages:
            missing.append("Send Messages")
        if not perms.attach_files:
            missing.append("Attach Files")

        if missing:
            return False, f"Missing permissions in #{getattr(channel, 'name', channel.id)}: {', '.join(missing)}"
        return True, ""

    # =========================================================================
    # Sending
    # =========================================================================

    async def _resolve(self, channel_id: str) -> Optional["Messageable"]:
        channel = self.client.get_channel(int(channel_id))
        if channel is not None:
            return channel
        try:
            return await asyncio.wait_for(
                self.client.fetch_channel(int(channel_id)), timeout=self.timeout
            )
        except (discord.NotFound, discord.Forbidden):
            return None

    async def send_message(self, channel_id: str, text: str) -> Optional[discord.Message]:
        """Send plain text. Returns the message, or None on failure."""
        return await self._send(channel_id, content=text)

    async def send_embed(
        self,
        channel_id: str,
        embed: discord.Embed,
        content: Optional[str] = None,
    ) -> Optional[discord.Message]:
        """Send an embed with optional text. Returns the message, or None on failure."""
        return await self._send(channel_id, content=content, embed=embed)

    async def _send(
        self,
        channel_id: str,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> Optional[discord.Message]:
        try:
            channel = await self._resolve(channel_id)
            if channel is None:
                logger.warning("Gateway Channel Not Found", [
                    ("Channel ID", str(channel_id)),
                ])
                return None
            return await asyncio.wait_for(
                channel.send(content=content, embed=embed), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Gateway Send Timed Out", [
                ("Channel ID", str(channel_id)),
                ("Timeout", f"{self.timeout}s"),
            ])
        except discord.Forbidden:
            logger.warning("Gateway Send Forbidden", [
                ("Channel ID", str(channel_id)),
            ])
        except (discord.HTTPException, ValueError) as e:
            logger.error("Gateway Send Failed", [
                ("Channel ID", str(channel_id)),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
        return None


__all__ = ["DiscordGateway"]
