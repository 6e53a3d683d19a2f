"""
Herald - Bot Settings Command
=============================

"!b" groups the guild settings and owner tools.

Usage:
    !b setconf <key> <value>   (server admin)
    !b conf                    (server admin)
    !b logs [n]                (bot owner)
    !b stats                   (bot owner)

Keys:
    general.language, general.timezone, weather.city,
    news.country, embed.color
"""

from datetime import datetime
from typing import Dict

import discord

from src.core.constants import (
    DEFAULT_LOG_TAIL,
    EMBED_DESCRIPTION_LIMIT,
    LOG_LINE_MAX_LENGTH,
    MAX_LOG_TAIL,
)
from src.core.errors import NotFoundError, PersistenceError
from src.core.logger import LOG_TZ, logger
from src.services.dispatch import CommandHandler, ExecutionContext


# =============================================================================
# Constants
# =============================================================================

CONFIG_KEYS: Dict[str, str] = {
    "general.language": "language",
    "general.timezone": "timezone",
    "weather.city": "weather_city",
    "news.country": "news_country",
    "embed.color": "embed_color",
}
"""User-facing setting keys mapped to GuildRecord fields."""


def _format_uptime(seconds: float) -> str:
    total = int(seconds)
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# =============================================================================
# Settings Command
# =============================================================================

class SettingsCommand(CommandHandler):
    """Guild configuration, audit log tail and runtime stats."""

    name = "!b"
    description = "Server settings and bot tools"
    usage = "setconf <key> <value> | conf | logs [n] | stats"

    async def execute(self, ctx: ExecutionContext) -> None:
        sub = (ctx.arg(0) or "").lower()

        if sub in ("setconf", "conf"):
            ctx.require_server_admin()
            if sub == "setconf":
                await self._setconf(ctx)
            else:
                await self._conf(ctx)
            return

        if sub in ("logs", "stats"):
            ctx.require_developer()
            if sub == "logs":
                await self._logs(ctx)
            else:
                await self._stats(ctx)
            return

        await ctx.reply(f"Usage: `!b {self.usage}`")

    # =========================================================================
    # Settings
    # =========================================================================

    async def _setconf(self, ctx: ExecutionContext) -> None:
        key = (ctx.arg(1) or "").lower()
        value = ctx.rest(2)

        if key not in CONFIG_KEYS or not value:
            keys = ", ".join(f"`{k}`" for k in CONFIG_KEYS)
            await ctx.reply(f"Usage: `!b setconf <key> <value>`. Keys: {keys}")
            return

        field = CONFIG_KEYS[key]
        try:
            record = await ctx.guilds.update(ctx.guild_id, field, value)
        except NotFoundError as e:
            await ctx.reply(str(e))
            return
        except ValueError:
            await ctx.reply(f"`{value}` isn't a valid value for `{key}`.")
            return
        except PersistenceError:
            await ctx.reply(f"`{key}` changed for now, but couldn't be saved. It will reset on restart.")
            return

        shown = getattr(record, field)
        if field == "embed_color":
            shown = f"#{shown:06X}"

        await ctx.log("Config", f"{ctx.user} set {key} = {shown}")
        await ctx.reply(f"`{key}` set to `{shown}`.")

    async def _conf(self, ctx: ExecutionContext) -> None:
        record = ctx.record
        embed = discord.Embed(title="Server Settings")
        embed.add_field(name="general.language", value=f"`{record.language}`", inline=True)
        embed.add_field(name="general.timezone", value=f"`UTC{record.timezone:+d}`", inline=True)
        embed.add_field(name="weather.city", value=f"`{record.weather_city}`", inline=True)
        embed.add_field(name="news.country", value=f"`{record.news_country}`", inline=True)
        embed.add_field(name="embed.color", value=f"`#{record.embed_color:06X}`", inline=True)
        embed.set_footer(text=f"Guild {record.guild_id}")
        await ctx.reply_embed(embed)

    # =========================================================================
    # Owner Tools
    # =========================================================================

    async def _logs(self, ctx: ExecutionContext) -> None:
        raw = ctx.arg(1)
        count = DEFAULT_LOG_TAIL
        if raw is not None:
            try:
                count = int(raw)
            except ValueError:
                await ctx.reply(f"Usage: `!b logs [1-{MAX_LOG_TAIL}]`")
                return
        count = max(1, min(count, MAX_LOG_TAIL))

        try:
            rows = await ctx.db.run(ctx.db.get_recent_logs, count, timeout=ctx.app.config.store_timeout)
        except PersistenceError as e:
            logger.error("Audit Log Read Failed", [("Error", str(e))])
            await ctx.reply("Couldn't read the audit log.")
            return

        if not rows:
            await ctx.reply("The audit log is empty.")
            return

        lines = []
        # Oldest first, like a tail
        for row in reversed(rows):
            when = datetime.fromtimestamp(row["timestamp"], LOG_TZ).strftime("%Y-%m-%d %H:%M:%S")
            line = f"[{when}] {row['module']} {row['guild_id'] or '-'}: {row['text']}"
            if len(line) > LOG_LINE_MAX_LENGTH:
                line = line[: LOG_LINE_MAX_LENGTH - 3] + "..."
            lines.append(line)

        body = "\n".join(lines)
        # Keep the newest lines if the block is too long
        limit = EMBED_DESCRIPTION_LIMIT - 10
        if len(body) > limit:
            body = body[-limit:]
            body = body[body.find("\n") + 1:]

        embed = discord.Embed(title=f"Audit Log (last {len(rows)})", description=f"```\n{body}\n```")
        await ctx.reply_embed(embed)

    async def _stats(self, ctx: ExecutionContext) -> None:
        summary = ctx.app.metrics.get_summary()
        counters = summary["counters"]

        embed = discord.Embed(title="Herald Stats")
        embed.add_field(name="Uptime", value=f"`{_format_uptime(summary['uptime_seconds'])}`", inline=True)
        embed.add_field(name="Guilds", value=f"`{len(ctx.guilds)}`", inline=True)
        embed.add_field(name="Streams", value=f"`{len(ctx.streams)}`", inline=True)

        for name in ("messages", "commands", "permission_denied", "command_errors",
                     "twitch.notifications", "twitch.failures"):
            embed.add_field(name=name, value=f"`{counters.get(name, 0)}`", inline=True)

        sweep = summary["metrics"].get("twitch.sweep")
        if sweep:
            embed.add_field(
                name="twitch.sweep",
                value=f"`{sweep['count']} runs, avg {sweep['avg_ms']}ms, p95 {sweep['p95_ms']}ms`",
                inline=False,
            )

        await ctx.reply_embed(embed)


__all__ = ["SettingsCommand", "CONFIG_KEYS"]
