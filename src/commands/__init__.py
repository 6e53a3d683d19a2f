"""
Herald - Commands Package
=========================

Chat command handlers routed by the CommandGate.

DESIGN:
    Each command file contains one CommandHandler subclass.
    Handlers are registered with the gate at startup, then the table
    is frozen.

    To add a new command:
    1. Create new_command.py in this directory
    2. Subclass CommandHandler and implement execute(ctx)
    3. Add the class to COMMAND_HANDLERS below

Available Commands:
    !twitch: Manage watched Twitch streams (server admin)
    !b: Guild settings, audit log and stats
    !help: List commands
"""

from typing import TYPE_CHECKING

from .help import HelpCommand
from .settings import SettingsCommand
from .twitch import TwitchCommand

if TYPE_CHECKING:
    from src.services.dispatch import CommandGate


# =============================================================================
# Command Registry
# =============================================================================

COMMAND_HANDLERS = [
    TwitchCommand,
    SettingsCommand,
    HelpCommand,
]
"""
Handler classes registered with the gate, in help-listing order.
"""


def register_commands(gate: "CommandGate") -> None:
    """Register every handler in COMMAND_HANDLERS and freeze the table."""
    for handler_cls in COMMAND_HANDLERS:
        gate.register_handler(handler_cls())
    gate.freeze()


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "COMMAND_HANDLERS",
    "register_commands",
    "HelpCommand",
    "SettingsCommand",
    "TwitchCommand",
]
