"""
Herald - Twitch Command
=======================

"!twitch" manages the streams announced in a server.

Usage:
    !twitch add <login>
    !twitch remove <login>
    !twitch list
    !twitch custom <login> [image_url] <message...>
    !twitch reset <login>

DESIGN:
    Every subcommand except list requires Administrator (checked with
    ctx.require_server_admin, answered by the gate). Registry errors
    become one-line replies; anything unexpected propagates to the gate.
    Notifications go to the channel the stream was added from.
"""

import discord

from src.core.constants import EMBED_FIELD_VALUE_LIMIT, TWITCH_CHANNEL_URL
from src.core.errors import (
    AlreadyExistsError,
    ExternalServiceError,
    NotFoundError,
    PersistenceError,
)
from src.core.logger import logger
from src.services.dispatch import CommandHandler, ExecutionContext


USAGE = (
    "`!twitch add <login>` • `!twitch remove <login>` • `!twitch list` • "
    "`!twitch custom <login> [image_url] <message>` • `!twitch reset <login>`"
)


class TwitchCommand(CommandHandler):
    """Add, remove, list and customize watched Twitch streams."""

    name = "!twitch"
    description = "Announce when Twitch streamers go live"
    usage = "add|remove|list|custom|reset"

    async def execute(self, ctx: ExecutionContext) -> None:
        sub = (ctx.arg(0) or "").lower()

        if sub == "list":
            await self._list(ctx)
            return

        if sub not in ("add", "remove", "custom", "reset"):
            await ctx.reply(f"Usage: {USAGE}")
            return

        ctx.require_server_admin()

        login = ctx.arg(1)
        if not login:
            await ctx.reply(f"Missing Twitch login. Usage: {USAGE}")
            return

        if sub == "add":
            await self._add(ctx, login)
        elif sub == "remove":
            await self._remove(ctx, login)
        elif sub == "custom":
            await self._custom(ctx, login)
        else:
            await self._reset(ctx, login)

    # =========================================================================
    # Subcommands
    # =========================================================================

    async def _add(self, ctx: ExecutionContext, login: str) -> None:
        try:
            display_name = await ctx.streams.add_stream(ctx.guild_id, ctx.channel_id, login)
        except (AlreadyExistsError, NotFoundError) as e:
            await ctx.reply(str(e))
            return
        except ExternalServiceError as e:
            logger.warning("Twitch Lookup Failed", [
                ("Login", login),
                ("Error", str(e)[:100]),
            ])
            await ctx.reply("Twitch didn't answer. Try again in a minute.")
            return
        except PersistenceError:
            await ctx.reply("Couldn't save the stream. Nothing was changed.")
            return

        await ctx.log("Twitch", f"{ctx.user} added {login.lower()} in #{ctx.channel_id}")
        await ctx.reply(f"Added **{display_name}**. Notifications will be posted in this channel.")

    async def _remove(self, ctx: ExecutionContext, login: str) -> None:
        try:
            await ctx.streams.remove_stream(ctx.guild_id, login)
        except NotFoundError as e:
            await ctx.reply(str(e))
            return
        except PersistenceError:
            await ctx.reply("Couldn't remove the stream. Nothing was changed.")
            return

        await ctx.log("Twitch", f"{ctx.user} removed {login.lower()}")
        await ctx.reply(f"Removed **{login.lower()}**.")

    async def _custom(self, ctx: ExecutionContext, login: str) -> None:
        image_url = None
        start = 2
        candidate = ctx.arg(2)
        if candidate and candidate.startswith(("https://", "http://")):
            image_url = candidate
            start = 3

        message = ctx.rest(start)
        if not message:
            await ctx.reply("Missing message. Usage: `!twitch custom <login> [image_url] <message>`")
            return

        try:
            await ctx.streams.set_custom(ctx.guild_id, login, message, image_url)
        except NotFoundError as e:
            await ctx.reply(str(e))
            return
        except PersistenceError:
            await ctx.reply("Couldn't save the custom message. Nothing was changed.")
            return

        await ctx.log("Twitch", f"{ctx.user} set a custom message for {login.lower()}")
        await ctx.reply(f"Custom notification set for **{login.lower()}**.")

    async def _reset(self, ctx: ExecutionContext, login: str) -> None:
        try:
            await ctx.streams.set_custom(ctx.guild_id, login, None)
        except NotFoundError as e:
            await ctx.reply(str(e))
            return
        except PersistenceError:
            await ctx.reply("Couldn't reset the notification. Nothing was changed.")
            return

        await ctx.log("Twitch", f"{ctx.user} reset the notification for {login.lower()}")
        await ctx.reply(f"Notification for **{login.lower()}** reset to default.")

    async def _list(self, ctx: ExecutionContext) -> None:
        watches = ctx.streams.guild_streams(ctx.guild_id)
        if not watches:
            await ctx.reply("No Twitch streams are watched in this server.")
            return

        lines = []
        for watch in watches:
            state = "🔴 live" if watch.is_online else "⚫ offline"
            custom = " • custom" if watch.is_custom else ""
            url = TWITCH_CHANNEL_URL.format(login=watch.login)
            lines.append(f"[{watch.login}]({url}) → <#{watch.channel_id}> • {state}{custom}")

        embed = discord.Embed(title="Twitch Streams")
        chunk = ""
        for line in lines:
            if len(chunk) + len(line) + 1 > EMBED_FIELD_VALUE_LIMIT:
                embed.add_field(name="\u200b", value=chunk, inline=False)
                chunk = ""
            chunk += line + "\n"
        if chunk:
            embed.add_field(name="\u200b", value=chunk, inline=False)
        embed.set_footer(text=f"{len(watches)} watched")

        await ctx.reply_embed(embed)


__all__ = ["TwitchCommand"]
