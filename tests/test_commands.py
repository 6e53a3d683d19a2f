"""
Herald - Command Tests
======================

End-to-end tests for !twitch, !b and !help through the CommandGate.
"""

import pytest

from src.core.errors import ExternalServiceError

GUILD = "987654321"
CHANNEL = "555666777"
DEVELOPER_ID = 111111111


def _last_reply(mock_gateway):
    return mock_gateway.send_message.await_args.args[1]


def _last_embed(mock_gateway):
    return mock_gateway.send_embed.await_args.args[1]


class TestTwitchCommand:
    """Tests for !twitch."""

    @pytest.mark.asyncio
    async def test_add(self, app_with_commands, make_message, mock_gateway, test_db):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add Ninja", admin=True))

        assert "Ninja" in _last_reply(mock_gateway)
        watch = app.streams.find(GUILD, "ninja")
        assert watch.channel_id == CHANNEL
        assert test_db.get_stream(GUILD, "ninja") is not None
        assert test_db.get_recent_logs(1)[0]["module"] == "Twitch"

    @pytest.mark.asyncio
    async def test_add_requires_admin(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add ninja", admin=False))

        assert "administrators" in _last_reply(mock_gateway)
        assert len(app.streams) == 0

    @pytest.mark.asyncio
    async def test_add_duplicate_and_unknown(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))
        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))
        assert "already watched" in _last_reply(mock_gateway)

        await app.gate.dispatch(make_message("!twitch add ghost_user", admin=True))
        assert "not found" in _last_reply(mock_gateway)
        assert len(app.streams) == 1

    @pytest.mark.asyncio
    async def test_add_twitch_down(self, app_with_commands, make_message, mock_gateway, fake_twitch):
        app = app_with_commands
        fake_twitch.user_error = ExternalServiceError("HTTP 502", status=502)

        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))

        assert "Twitch didn't answer" in _last_reply(mock_gateway)
        assert app.metrics.get_counter("command_errors") == 0

    @pytest.mark.asyncio
    async def test_remove(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))
        await app.gate.dispatch(make_message("!twitch remove ninja", admin=True))

        assert "Removed" in _last_reply(mock_gateway)
        assert app.streams.guild_streams(GUILD) == []

        await app.gate.dispatch(make_message("!twitch remove ninja", admin=True))
        assert "not watched" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_list(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch list"))
        assert "No Twitch streams" in _last_reply(mock_gateway)

        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))
        await app.gate.dispatch(make_message("!twitch list"))

        embed = _last_embed(mock_gateway)
        assert "ninja" in embed.fields[0].value
        assert f"<#{CHANNEL}>" in embed.fields[0].value

    @pytest.mark.asyncio
    async def test_custom_with_image_and_reset(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))

        await app.gate.dispatch(make_message(
            "!twitch custom ninja https://img.example/a.png Ninja is live, come hang out",
            admin=True,
        ))
        watch = app.streams.find(GUILD, "ninja")
        assert watch.custom_image_url == "https://img.example/a.png"
        assert watch.custom_message == "Ninja is live, come hang out"

        await app.gate.dispatch(make_message("!twitch reset ninja", admin=True))
        assert watch.custom_message is None
        assert watch.custom_image_url is None

    @pytest.mark.asyncio
    async def test_custom_without_image(self, app_with_commands, make_message):
        app = app_with_commands
        await app.gate.dispatch(make_message("!twitch add ninja", admin=True))
        await app.gate.dispatch(make_message("!twitch custom ninja Going live!", admin=True))

        watch = app.streams.find(GUILD, "ninja")
        assert watch.custom_message == "Going live!"
        assert watch.custom_image_url is None

    @pytest.mark.asyncio
    async def test_usage(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!twitch"))
        assert _last_reply(mock_gateway).startswith("Usage:")


class TestSettingsCommand:
    """Tests for !b."""

    @pytest.mark.asyncio
    async def test_setconf_updates_registry_and_store(self, app_with_commands, make_message, mock_gateway, test_db):
        app = app_with_commands
        await app.gate.dispatch(make_message("!b setconf weather.city New York", admin=True))

        assert app.guilds.get(GUILD).weather_city == "New York"
        assert test_db.get_guild(GUILD)["weather_city"] == "New York"
        assert "New York" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_setconf_color(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!b setconf embed.color #FF8800", admin=True))

        assert app.guilds.get(GUILD).embed_color == 0xFF8800
        assert "#FF8800" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_setconf_invalid_value(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!b setconf general.timezone banana", admin=True))

        assert "isn't a valid value" in _last_reply(mock_gateway)
        assert app.guilds.get(GUILD).timezone == 0

    @pytest.mark.asyncio
    async def test_setconf_unknown_key(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!b setconf music.volume 11", admin=True))
        assert "Keys:" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_setconf_requires_admin(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!b setconf general.language fr"))

        assert "administrators" in _last_reply(mock_gateway)
        assert app.guilds.get(GUILD).language == "en"

    @pytest.mark.asyncio
    async def test_conf_uses_guild_color(self, app_with_commands, make_message, mock_gateway):
        app = app_with_commands
        await app.gate.dispatch(make_message("!b setconf embed.color 00FF00", admin=True))
        await app.gate.dispatch(make_message("!b conf", admin=True))

        embed = _last_embed(mock_gateway)
        assert embed.color.value == 0x00FF00
        assert any(f.name == "weather.city" and "London" in f.value for f in embed.fields)

    @pytest.mark.asyncio
    async def test_logs_developer_only(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!b logs", admin=True))
        assert "bot owner" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_logs_tail(self, app_with_commands, make_message, mock_gateway, test_db):
        for i in range(60):
            test_db.add_log("Message", GUILD, f"entry {i}")

        await app_with_commands.gate.dispatch(make_message("!b logs 100", author_id=DEVELOPER_ID))

        embed = _last_embed(mock_gateway)
        assert embed.title == "Audit Log (last 50)"
        assert "entry 59" in embed.description
        assert "entry 9\n" not in embed.description

    @pytest.mark.asyncio
    async def test_logs_empty(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!b logs", author_id=DEVELOPER_ID))
        assert "empty" in _last_reply(mock_gateway)

    @pytest.mark.asyncio
    async def test_stats(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!b stats", author_id=DEVELOPER_ID))

        embed = _last_embed(mock_gateway)
        fields = {f.name: f.value for f in embed.fields}
        assert fields["messages"] == "`1`"
        assert fields["commands"] == "`1`"


class TestHelpCommand:
    """Tests for !help."""

    @pytest.mark.asyncio
    async def test_lists_commands(self, app_with_commands, make_message, mock_gateway):
        await app_with_commands.gate.dispatch(make_message("!help"))

        names = [f.name for f in _last_embed(mock_gateway).fields]
        assert names[0].startswith("!twitch")
        assert any(n.startswith("!b") for n in names)
        assert any(n.startswith("!help") for n in names)
