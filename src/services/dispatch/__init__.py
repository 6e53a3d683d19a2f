"""
Herald - Command Dispatch Package
=================================

Routes inbound messages to command handlers.
"""

from .base import CommandHandler
from .context import ExecutionContext
from .gate import CommandGate

__all__ = ["CommandGate", "CommandHandler", "ExecutionContext"]
