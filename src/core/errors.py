"""
Herald - Error Taxonomy
=======================

Exceptions raised by the registries, the Twitch client and the gate.

DESIGN:
    Every error carries a short user-facing message so command handlers
    can reply with str(error). Internal detail goes to the logger.
"""

from typing import Optional


class HeraldError(Exception):
    """Base class for all recoverable Herald errors."""

    pass


class NotFoundError(HeraldError):
    """A referenced guild, stream or config key is absent."""

    pass


class AlreadyExistsError(HeraldError):
    """A duplicate registration was attempted."""

    pass


class PersistenceError(HeraldError):
    """
    The store was unreachable, timed out or rejected a write.

    Attributes:
        operation: Name of the store operation that failed.
    """

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class ExternalServiceError(HeraldError):
    """
    The Twitch API timed out, answered non-2xx or sent a malformed payload.

    Attributes:
        status: HTTP status if a response was received.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AuthorizationError(HeraldError):
    """The bot lacks permission to act in a channel."""

    pass


__all__ = [
    "HeraldError",
    "NotFoundError",
    "AlreadyExistsError",
    "PersistenceError",
    "ExternalServiceError",
    "AuthorizationError",
]
