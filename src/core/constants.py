"""
Herald - Centralized Constants
==============================

Magic numbers used across the bot. Import from this module instead of
hardcoding values.
"""

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0          # sqlite3.connect lock timeout
SQLITE_BUSY_TIMEOUT = 5000            # PRAGMA busy_timeout (ms)

# =============================================================================
# Twitch Constants
# =============================================================================

TWITCH_API_BASE = "https://api.twitch.tv/helix"
TWITCH_CHANNEL_URL = "https://www.twitch.tv/{login}"

# Thumbnail templates contain literal {width}/{height} placeholders
THUMBNAIL_WIDTH = 720
THUMBNAIL_HEIGHT = 480
BOX_ART_WIDTH = 144
BOX_ART_HEIGHT = 192

TWITCH_CONNECTION_LIMIT = 10          # aiohttp connector pool size

# =============================================================================
# Command Constants
# =============================================================================

DEFAULT_LOG_TAIL = 10                 # Rows shown by "!b logs"
MAX_LOG_TAIL = 50                     # Upper bound for "!b logs <n>"
LOG_LINE_MAX_LENGTH = 180             # Truncation per audit line

# =============================================================================
# Discord Limits
# =============================================================================

EMBED_DESCRIPTION_LIMIT = 4096
EMBED_FIELD_VALUE_LIMIT = 1024
