"""
Herald - Events Package
=======================

Event handler Cogs for Herald.

DESIGN:
    Each event file contains a Cog class with @commands.Cog.listener decorators.
    Cogs are loaded dynamically by the bot using load_extension().

    Event routing:
    - message_events.py: Every message into the CommandGate
    - guild_events.py: Guild join/leave bookkeeping
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "src.events.message_events",
    "src.events.guild_events",
]
"""
List of event cog module paths for dynamic loading.

DESIGN:
    Bot iterates this list and calls load_extension() for each.
    Add new event cogs here to have them loaded automatically.
"""


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "EVENT_COGS",
]
