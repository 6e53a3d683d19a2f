"""
Herald - Config Tests
=====================

Tests for environment loading, defaults and color parsing.
"""

import pytest

from src.core.config import ConfigValidationError, load_config, parse_color


ENV_VARS = [
    "DISCORD_TOKEN",
    "TWITCH_CLIENT_ID",
    "TWITCH_OAUTH_TOKEN",
    "DEVELOPER_ID",
    "DEFAULT_LANGUAGE",
    "DEFAULT_TIMEZONE",
    "DEFAULT_WEATHER_CITY",
    "DEFAULT_NEWS_COUNTRY",
    "DEFAULT_EMBED_COLOR",
    "TWITCH_SWEEP_INTERVAL",
    "TWITCH_REQUEST_TIMEOUT",
    "STORE_TIMEOUT",
    "GATEWAY_TIMEOUT",
    "ERROR_WEBHOOK_URL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def base_env(clean_env):
    clean_env.setenv("DISCORD_TOKEN", "token")
    clean_env.setenv("TWITCH_CLIENT_ID", "client")
    return clean_env


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_required_lists_all(self, clean_env):
        with pytest.raises(ConfigValidationError) as exc:
            load_config()
        assert "DISCORD_TOKEN" in str(exc.value)
        assert "TWITCH_CLIENT_ID" in str(exc.value)

    def test_defaults(self, base_env):
        config = load_config()

        assert config.developer_id is None
        assert config.twitch_oauth_token is None
        assert config.twitch_sweep_interval == 60
        assert config.twitch_request_timeout == 1.0
        assert config.defaults.language == "en"
        assert config.defaults.timezone == 0
        assert config.defaults.weather_city == "London"
        assert config.defaults.news_country == "us"
        assert config.defaults.embed_color == 0
        assert config.error_webhook_url is None

    def test_overrides(self, base_env):
        base_env.setenv("DEVELOPER_ID", "111111111")
        base_env.setenv("DEFAULT_LANGUAGE", "fr")
        base_env.setenv("DEFAULT_TIMEZONE", "2")
        base_env.setenv("DEFAULT_EMBED_COLOR", "#9146FF")
        base_env.setenv("TWITCH_REQUEST_TIMEOUT", "2.5")

        config = load_config()

        assert config.developer_id == 111111111
        assert config.defaults.language == "fr"
        assert config.defaults.timezone == 2
        assert config.defaults.embed_color == 0x9146FF
        assert config.twitch_request_timeout == 2.5

    def test_interval_is_clamped(self, base_env):
        base_env.setenv("TWITCH_SWEEP_INTERVAL", "1")
        assert load_config().twitch_sweep_interval == 10

        base_env.setenv("TWITCH_SWEEP_INTERVAL", "not-a-number")
        assert load_config().twitch_sweep_interval == 60

    def test_timezone_is_clamped(self, base_env):
        base_env.setenv("DEFAULT_TIMEZONE", "20")
        assert load_config().defaults.timezone == 14

    def test_invalid_embed_color(self, base_env):
        base_env.setenv("DEFAULT_EMBED_COLOR", "purple")
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_invalid_webhook_is_ignored(self, base_env):
        base_env.setenv("ERROR_WEBHOOK_URL", "discord.com/api/webhooks/1")
        assert load_config().error_webhook_url is None


class TestParseColor:
    """Tests for parse_color."""

    @pytest.mark.parametrize("value,expected", [
        ("#FF8800", 0xFF8800),
        ("0xff8800", 0xFF8800),
        ("ff8800", 0xFF8800),
        ("16711680", 16711680),
        (" #000000 ", 0),
    ])
    def test_valid(self, value, expected):
        assert parse_color(value) == expected

    @pytest.mark.parametrize("value", ["#GGGGGG", "purple", "#1000000", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_color(value)
