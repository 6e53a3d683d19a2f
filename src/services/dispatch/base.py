"""
Herald - Command Handler Interface
==================================

Base class for everything the gate can route a message to.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from .context import ExecutionContext


class CommandHandler(ABC):
    """
    A chat command.

    Attributes:
        name: Primary token, e.g. "!twitch".
        aliases: Extra tokens routed to the same handler.
        description: One line shown by "!help".
        usage: Argument synopsis shown by "!help".
    """

    name: str = ""
    aliases: Tuple[str, ...] = ()
    description: str = ""
    usage: str = ""

    @property
    def tokens(self) -> Tuple[str, ...]:
        return (self.name, *self.aliases)

    @abstractmethod
    async def execute(self, ctx: "ExecutionContext") -> None:
        """Handle one invocation. Exceptions are caught and logged by the gate."""


__all__ = ["CommandHandler"]
