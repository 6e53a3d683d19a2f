"""
Herald - Database Tests
=======================

Tests for the database layer to ensure data integrity.
"""

import asyncio
import sqlite3
import time

import pytest

from src.core.errors import PersistenceError


def _guild_row(guild_id="G1", **overrides):
    row = {
        "guild_id": guild_id,
        "language": "en",
        "timezone": 0,
        "weather_city": "London",
        "news_country": "us",
        "embed_color": 0,
    }
    row.update(overrides)
    return row


def _stream_row(login="ninja", guild_id="G1", channel_id="C1"):
    return {
        "guild_id": guild_id,
        "login": login,
        "channel_id": channel_id,
        "is_online": False,
        "custom_message": None,
        "custom_image_url": None,
    }


class TestGuilds:
    """Tests for guild settings operations."""

    def test_insert_and_get_guild(self, test_db):
        assert test_db.insert_guild(_guild_row()) is True
        row = test_db.get_guild("G1")
        assert row == _guild_row()

    def test_insert_guild_ignores_duplicate(self, test_db):
        assert test_db.insert_guild(_guild_row()) is True
        assert test_db.insert_guild(_guild_row(language="fr")) is False
        assert test_db.get_guild("G1")["language"] == "en"
        assert len(test_db.get_all_guilds()) == 1

    def test_get_missing_guild(self, test_db):
        assert test_db.get_guild("nope") is None

    def test_update_guild_field(self, test_db):
        test_db.insert_guild(_guild_row())
        assert test_db.update_guild_field("G1", "weather_city", "Paris") is True
        assert test_db.get_guild("G1")["weather_city"] == "Paris"

    def test_update_missing_guild_returns_false(self, test_db):
        assert test_db.update_guild_field("nope", "language", "de") is False

    def test_update_rejects_unknown_column(self, test_db):
        test_db.insert_guild(_guild_row())
        with pytest.raises(ValueError):
            test_db.update_guild_field("G1", "guild_id; DROP TABLE guilds", "x")


class TestStreams:
    """Tests for watched stream operations."""

    def test_insert_and_list(self, test_db):
        test_db.insert_stream(_stream_row("ninja"))
        test_db.insert_stream(_stream_row("shroud"))
        test_db.insert_stream(_stream_row("other", guild_id="G2"))

        logins = {row["login"] for row in test_db.get_guild_streams("G1")}
        assert logins == {"ninja", "shroud"}
        assert [row["login"] for row in test_db.get_guild_streams("G2")] == ["other"]

    def test_is_online_is_bool(self, test_db):
        test_db.insert_stream(_stream_row())
        row = test_db.get_stream("G1", "ninja")
        assert row["is_online"] is False

        test_db.update_stream_state("G1", "ninja", True)
        assert test_db.get_stream("G1", "ninja")["is_online"] is True

    def test_duplicate_insert_raises(self, test_db):
        test_db.insert_stream(_stream_row())
        with pytest.raises(sqlite3.IntegrityError):
            test_db.insert_stream(_stream_row(channel_id="C2"))

    def test_same_login_in_two_guilds(self, test_db):
        test_db.insert_stream(_stream_row(guild_id="G1"))
        test_db.insert_stream(_stream_row(guild_id="G2"))
        assert test_db.get_stream("G1", "ninja") is not None
        assert test_db.get_stream("G2", "ninja") is not None

    def test_update_custom_and_clear(self, test_db):
        test_db.insert_stream(_stream_row())
        test_db.update_stream_custom("G1", "ninja", "We're live!", "https://img.example/a.png")
        row = test_db.get_stream("G1", "ninja")
        assert row["custom_message"] == "We're live!"
        assert row["custom_image_url"] == "https://img.example/a.png"

        test_db.update_stream_custom("G1", "ninja", None, None)
        row = test_db.get_stream("G1", "ninja")
        assert row["custom_message"] is None
        assert row["custom_image_url"] is None

    def test_delete_stream(self, test_db):
        test_db.insert_stream(_stream_row())
        assert test_db.delete_stream("G1", "ninja") == 1
        assert test_db.delete_stream("G1", "ninja") == 0
        assert test_db.get_stream("G1", "ninja") is None


class TestLogs:
    """Tests for the audit log."""

    def test_add_and_tail(self, test_db):
        for i in range(15):
            test_db.add_log("Message", "G1", f"entry {i}")

        rows = test_db.get_recent_logs(10)
        assert len(rows) == 10
        assert rows[0]["text"] == "entry 14"
        assert rows[-1]["text"] == "entry 5"
        assert test_db.count_logs() == 15

    def test_log_without_guild(self, test_db):
        test_db.add_log("Twitch", None, "sweep failed")
        row = test_db.get_recent_logs(1)[0]
        assert row["guild_id"] is None
        assert row["module"] == "Twitch"

    def test_tail_of_empty_log(self, test_db):
        assert test_db.get_recent_logs(5) == []


class TestAsyncBridge:
    """Tests for DatabaseManager.run()."""

    @pytest.mark.asyncio
    async def test_run_returns_result(self, test_db):
        test_db.insert_guild(_guild_row())
        row = await test_db.run(test_db.get_guild, "G1", timeout=2.0)
        assert row["guild_id"] == "G1"

    @pytest.mark.asyncio
    async def test_run_maps_sqlite_errors(self, test_db):
        test_db.insert_stream(_stream_row())
        with pytest.raises(PersistenceError) as exc_info:
            await test_db.run(test_db.insert_stream, _stream_row(), timeout=2.0)
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert exc_info.value.operation == "insert_stream"

    @pytest.mark.asyncio
    async def test_run_times_out(self, test_db):
        def slow():
            time.sleep(0.5)

        with pytest.raises(PersistenceError):
            await test_db.run(slow, timeout=0.05)
        # Let the worker thread finish before the fixture closes the db
        await asyncio.sleep(0.6)

    @pytest.mark.asyncio
    async def test_run_settle_returns_late_result(self, test_db):
        def slow():
            time.sleep(0.2)
            return "done"

        assert await test_db.run(slow, timeout=0.05, settle=True) == "done"

    @pytest.mark.asyncio
    async def test_run_settle_maps_late_sqlite_error(self, test_db):
        test_db.insert_stream(_stream_row())

        def slow_insert():
            time.sleep(0.2)
            test_db.insert_stream(_stream_row())

        with pytest.raises(PersistenceError) as exc_info:
            await test_db.run(slow_insert, timeout=0.05, settle=True)
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert exc_info.value.operation == "slow_insert"
