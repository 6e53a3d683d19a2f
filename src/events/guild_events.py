"""
Herald - Guild Events
=====================

Keeps the registries in step with the guilds the bot is in.

DESIGN:
    Joining creates the guild's settings record and an empty stream
    group. Leaving keeps both: settings and watched streams survive a
    re-invite.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from src.core.logger import logger

if TYPE_CHECKING:
    from src.bot import HeraldBot


class GuildEvents(commands.Cog):
    """Guild join/leave handlers."""

    def __init__(self, bot: "HeraldBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_guild_join(self, guild: discord.Guild) -> None:
        if self.bot.app is None:
            return

        guild_id = str(guild.id)
        await self.bot.app.guilds.get_or_create(guild_id)
        self.bot.app.streams.ensure_guild(guild_id)

        logger.tree("Joined Guild", [
            ("Guild", guild.name),
            ("Guild ID", guild_id),
            ("Members", str(guild.member_count or 0)),
        ], emoji="📥")

    @commands.Cog.listener()
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        logger.tree("Left Guild", [
            ("Guild", guild.name),
            ("Guild ID", str(guild.id)),
        ], emoji="📤")


async def setup(bot: "HeraldBot") -> None:
    """Add the guild events cog to the bot."""
    await bot.add_cog(GuildEvents(bot))
