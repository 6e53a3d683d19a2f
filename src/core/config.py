"""
Herald Discord Bot - Configuration Module
=========================================

Environment-driven configuration, parsed once and shared.

DESIGN:
    main.py lets python-dotenv fill os.environ from .env, then calls
    validate_and_log_config(). load_config() reads every variable in one
    pass: missing required values are collected and reported together,
    malformed optional values fall back to their default with a warning.

    get_config() caches the result; guild defaults are kept in their own
    frozen dataclass so the registries never need the whole Config.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple


# =============================================================================
# Guild Defaults
# =============================================================================

@dataclass(frozen=True)
class GuildDefaults:
    """
    Values given to a guild the first time the bot sees it.

    Attributes:
        language: Locale code used for replies.
        timezone: Offset from UTC in hours.
        weather_city: City used by weather commands.
        news_country: Country code used by news commands.
        embed_color: 24-bit color for embeds.
    """

    language: str = "en"
    timezone: int = 0
    weather_city: str = "London"
    news_country: str = "us"
    embed_color: int = 0


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Everything Herald reads from the environment.

    Only the Discord token and the Twitch client ID are required; every
    other field has a default that works for local development.

    Attributes:
        discord_token: Discord bot authentication token.
        twitch_client_id: Client-ID header sent to the Twitch Helix API.
        twitch_oauth_token: Optional app access token for Helix.
        developer_id: User ID of the bot owner (logs/stats commands).
        defaults: Initial settings for newly seen guilds.
    """

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    discord_token: str
    twitch_client_id: str

    # -------------------------------------------------------------------------
    # Optional: Credentials / Ownership
    # -------------------------------------------------------------------------

    twitch_oauth_token: Optional[str] = None
    developer_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Optional: Guild Defaults
    # -------------------------------------------------------------------------

    defaults: GuildDefaults = GuildDefaults()

    # -------------------------------------------------------------------------
    # Optional: Intervals & Timeouts (seconds)
    # -------------------------------------------------------------------------

    twitch_sweep_interval: int = 60         # Time between presence sweeps
    twitch_request_timeout: float = 1.0     # Per-call Helix timeout inside a sweep
    store_timeout: float = 5.0              # Bound on any database call
    gateway_timeout: float = 10.0           # Bound on Discord sends

    # -------------------------------------------------------------------------
    # Optional: Alerts
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None




# =============================================================================
# Parsing
# =============================================================================

REQUIRED_VARS: Tuple[str, ...] = ("DISCORD_TOKEN", "TWITCH_CLIENT_ID")


class ConfigValidationError(Exception):
    """Required configuration is missing or a value can't be used."""


def _warn(message: str) -> None:
    from src.core.logger import logger
    logger.warning(message)


def _env_int(name: str, default: int, low: Optional[int] = None, high: Optional[int] = None) -> int:
    """Integer variable, clamped to [low, high]; unset or malformed gives default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        _warn(f"Config {name}='{raw}' is not an integer, using {default}")
        return default
    if low is not None and value < low:
        _warn(f"Config {name}={value} clamped to {low}")
        return low
    if high is not None and value > high:
        _warn(f"Config {name}={value} clamped to {high}")
        return high
    return value


def _env_seconds(name: str, default: float, low: float = 0.1) -> float:
    """Positive float variable (seconds)."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        _warn(f"Config {name}='{raw}' is not a number, using {default}")
        return default
    if value < low:
        _warn(f"Config {name}={value} clamped to {low}")
        return low
    return value


def _env_id(name: str) -> Optional[int]:
    """Discord snowflake variable; unset or malformed gives None."""
    raw = os.getenv(name)
    if raw and raw.strip().isdigit():
        return int(raw)
    return None


def _env_url(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if not raw:
        return None
    if not raw.startswith(("https://", "http://")):
        _warn(f"Config {name} is not an http(s) URL, ignoring")
        return None
    return raw


def parse_color(value: str) -> int:
    """
    Parse an embed color written as "#RRGGBB", "0xRRGGBB", "RRGGBB" or decimal.

    Raises:
        ValueError: If the value isn't a 24-bit color.
    """
    text = value.strip()
    if text.startswith("#"):
        color = int(text[1:], 16)
    elif text.lower().startswith("0x"):
        color = int(text, 16)
    elif text.isdigit():
        color = int(text)
    else:
        color = int(text, 16)
    if not 0 <= color <= 0xFFFFFF:
        raise ValueError(f"Color out of range: {value}")
    return color


# =============================================================================
# Loading
# =============================================================================

def load_config() -> Config:
    """
    Build a Config from the environment.

    Raises:
        ConfigValidationError: If a required variable is missing (all of
            them are listed) or DEFAULT_EMBED_COLOR isn't a color.
    """
    missing = [name for name in REQUIRED_VARS if not os.getenv(name)]
    if missing:
        raise ConfigValidationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    raw_color = os.getenv("DEFAULT_EMBED_COLOR")
    try:
        embed_color = parse_color(raw_color) if raw_color else 0
    except ValueError:
        raise ConfigValidationError(f"Invalid DEFAULT_EMBED_COLOR: {raw_color}")

    defaults = GuildDefaults(
        language=os.getenv("DEFAULT_LANGUAGE", "en"),
        timezone=_env_int("DEFAULT_TIMEZONE", 0, low=-12, high=14),
        weather_city=os.getenv("DEFAULT_WEATHER_CITY", "London"),
        news_country=os.getenv("DEFAULT_NEWS_COUNTRY", "us"),
        embed_color=embed_color,
    )

    return Config(
        discord_token=os.environ["DISCORD_TOKEN"],
        twitch_client_id=os.environ["TWITCH_CLIENT_ID"],
        twitch_oauth_token=os.getenv("TWITCH_OAUTH_TOKEN") or None,
        developer_id=_env_id("DEVELOPER_ID"),
        defaults=defaults,
        twitch_sweep_interval=_env_int("TWITCH_SWEEP_INTERVAL", 60, low=10, high=3600),
        twitch_request_timeout=_env_seconds("TWITCH_REQUEST_TIMEOUT", 1.0),
        store_timeout=_env_seconds("STORE_TIMEOUT", 5.0),
        gateway_timeout=_env_seconds("GATEWAY_TIMEOUT", 10.0),
        error_webhook_url=_env_url("ERROR_WEBHOOK_URL"),
    )


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Return the cached Config, loading it on first use.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """Load the config (raising ConfigValidationError) and log a summary."""
    from src.core.logger import logger

    config = get_config()

    unset = [
        name for name, value in (
            ("DEVELOPER_ID", config.developer_id),
            ("TWITCH_OAUTH_TOKEN", config.twitch_oauth_token),
        ) if not value
    ]
    if unset:
        logger.info(f"Optional config not set: {', '.join(unset)}")

    logger.tree("Configuration Validated", [
        ("Default Language", config.defaults.language),
        ("Default Timezone", f"UTC{config.defaults.timezone:+d}"),
        ("Sweep Interval", f"{config.twitch_sweep_interval}s"),
        ("Twitch Timeout", f"{config.twitch_request_timeout}s"),
        ("Owner Commands", "Enabled" if config.developer_id else "Disabled"),
        ("Error Webhook", "Enabled" if config.error_webhook_url else "Disabled"),
    ], emoji="⚙️")


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "GuildDefaults",
    "get_config",
    "load_config",
    "parse_color",
    "validate_and_log_config",
]
