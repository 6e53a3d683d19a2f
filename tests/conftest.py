"""
Herald - Test Fixtures
======================

Shared fixtures for all tests.
"""

import asyncio
import os
import tempfile
from typing import Dict, List, Optional, Set, Union
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep TreeLogger output out of the working tree
os.environ.setdefault("HERALD_LOGS_DIR", tempfile.mkdtemp(prefix="herald-logs-"))

from src.core.config import Config, GuildDefaults  # noqa: E402
from src.core.errors import ExternalServiceError  # noqa: E402
from src.services.twitch.models import (  # noqa: E402
    TwitchGame,
    TwitchStreamStatus,
    TwitchUser,
)


GUILD_ID = 987654321
CHANNEL_ID = 555666777
BOT_USER_ID = 999888777
DEVELOPER_ID = 111111111


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path for testing."""
    return tmp_path / "test_herald.db"


@pytest.fixture
def test_db(temp_db_path, monkeypatch):
    """Create a fresh test database instance."""
    from src.core.database import manager as manager_module

    # Reset singleton
    manager_module.DatabaseManager._instance = None

    # Patch the DB path read by DatabaseManager.__init__
    monkeypatch.setattr(manager_module, "DB_PATH", temp_db_path)

    db = manager_module.DatabaseManager()

    yield db

    # Cleanup
    db.close()
    manager_module.DatabaseManager._instance = None


# =============================================================================
# Config
# =============================================================================

@pytest.fixture
def config():
    """A real Config with short timeouts."""
    return Config(
        discord_token="test-token",
        twitch_client_id="test-client-id",
        developer_id=DEVELOPER_ID,
        defaults=GuildDefaults(),
        twitch_sweep_interval=60,
        twitch_request_timeout=0.2,
        store_timeout=2.0,
        gateway_timeout=1.0,
    )


# =============================================================================
# Fake Twitch
# =============================================================================

class FakeTwitch:
    """
    In-memory stand-in for TwitchClient.

    statuses maps login to a TwitchStreamStatus (live), None (offline)
    or an exception instance (raised). Logins in hanging never answer
    in time.
    """

    def __init__(self) -> None:
        self.users: Dict[str, TwitchUser] = {}
        self.statuses: Dict[str, Union[TwitchStreamStatus, None, Exception]] = {}
        self.hanging: Set[str] = set()
        self.games: Dict[str, TwitchGame] = {}
        self.user_error: Optional[Exception] = None
        self.stream_calls: List[str] = []
        self.closed = False

    def add_user(self, login: str, display_name: Optional[str] = None) -> None:
        self.users[login] = TwitchUser(
            id=str(len(self.users) + 1),
            login=login,
            display_name=display_name or login.capitalize(),
        )

    def set_live(
        self,
        login: str,
        title: str = "Big Game",
        viewers: int = 100,
        game_id: str = "",
    ) -> None:
        self.statuses[login] = TwitchStreamStatus(
            user_login=login,
            user_name=login.capitalize(),
            title=title,
            game_id=game_id,
            viewer_count=viewers,
            thumbnail_url=f"https://static-cdn.jtvnw.net/previews-ttv/live_user_{login}-{{width}}x{{height}}.jpg",
        )

    def set_offline(self, login: str) -> None:
        self.statuses[login] = None

    async def get_user(self, login: str) -> Optional[TwitchUser]:
        if self.user_error is not None:
            raise self.user_error
        return self.users.get(login)

    async def get_stream(self, login: str) -> Optional[TwitchStreamStatus]:
        self.stream_calls.append(login)
        if login in self.hanging:
            await asyncio.sleep(10)
            return None
        value = self.statuses.get(login)
        if isinstance(value, Exception):
            raise value
        return value

    async def get_game(self, game_id: str) -> Optional[TwitchGame]:
        if game_id == "broken":
            raise ExternalServiceError("games endpoint down")
        return self.games.get(game_id)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_twitch():
    """Fake Helix client with one known user, "ninja"."""
    twitch = FakeTwitch()
    twitch.add_user("ninja", "Ninja")
    return twitch


# =============================================================================
# Gateway
# =============================================================================

@pytest.fixture
def mock_gateway():
    """Mock DiscordGateway that allows everything and records sends."""
    gateway = MagicMock()
    gateway.client = MagicMock()
    gateway.client.user = MagicMock()
    gateway.client.user.id = BOT_USER_ID
    gateway.check_send_permissions = MagicMock(return_value=(True, ""))
    gateway.send_message = AsyncMock(return_value=MagicMock(id=1))
    gateway.send_embed = AsyncMock(return_value=MagicMock(id=2))
    return gateway


# =============================================================================
# App Context
# =============================================================================

@pytest.fixture
def app(config, test_db, mock_gateway, fake_twitch):
    """AppContext wired to the temp database, fake Twitch and mock gateway."""
    from src.core.app import AppContext
    return AppContext(config=config, db=test_db, gateway=mock_gateway, twitch=fake_twitch)


@pytest.fixture
def app_with_commands(app):
    """AppContext with every command registered and the table frozen."""
    from src.commands import register_commands
    register_commands(app.gate)
    return app


# =============================================================================
# Mock Discord Objects
# =============================================================================

@pytest.fixture
def mock_discord_guild():
    """Create a mock Discord guild."""
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.me = MagicMock()
    guild.me.id = BOT_USER_ID
    return guild


@pytest.fixture
def mock_discord_channel(mock_discord_guild):
    """Create a mock Discord text channel."""
    channel = MagicMock()
    channel.id = CHANNEL_ID
    channel.name = "general"
    channel.guild = mock_discord_guild
    channel.send = AsyncMock(return_value=MagicMock(id=111222333))
    return channel


@pytest.fixture
def make_message(mock_discord_guild, mock_discord_channel):
    """
    Factory for mock Discord messages.

    Usage:
        message = make_message("!twitch add ninja", admin=True)
    """
    def _make(
        content: str,
        author_id: int = 123456789,
        bot: bool = False,
        admin: bool = False,
        in_guild: bool = True,
    ) -> MagicMock:
        author = MagicMock()
        author.id = author_id
        author.bot = bot
        author.name = "testuser"
        author.__str__ = MagicMock(return_value="testuser")
        author.guild_permissions = MagicMock()
        author.guild_permissions.administrator = admin

        message = MagicMock()
        message.id = 111222333
        message.content = content
        message.author = author
        message.guild = mock_discord_guild if in_guild else None
        message.channel = mock_discord_channel
        return message

    return _make
