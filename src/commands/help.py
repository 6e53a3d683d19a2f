"""
Herald - Help Command
=====================

"!help" lists every registered command.
"""

import discord

from src.services.dispatch import CommandHandler, ExecutionContext


class HelpCommand(CommandHandler):
    """List registered commands."""

    name = "!help"
    description = "Show this list"

    async def execute(self, ctx: ExecutionContext) -> None:
        embed = discord.Embed(title="Herald Commands")
        for handler in ctx.app.gate.handlers():
            title = f"{handler.name} {handler.usage}".strip()
            embed.add_field(name=title, value=handler.description or "\u200b", inline=False)
        await ctx.reply_embed(embed)


__all__ = ["HelpCommand"]
