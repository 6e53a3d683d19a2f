"""
Herald - Message Events
=======================

Feeds every message to the command gate.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

if TYPE_CHECKING:
    from src.bot import HeraldBot


class MessageEvents(commands.Cog):
    """Message event handlers."""

    def __init__(self, bot: "HeraldBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """
        Route a message through the gate.

        Messages arriving before the app context exists (between connect
        and on_ready) are dropped.
        """
        if self.bot.app is None:
            return
        await self.bot.app.gate.dispatch(message)


async def setup(bot: "HeraldBot") -> None:
    """Add the message events cog to the bot."""
    await bot.add_cog(MessageEvents(bot))
