"""
Geode Discord Bot - Exceptions
==============================

Exceptions whose message is meant to be shown to the invoking user.

DESIGN:
    Services raise MessageError with the exact text to send back.
    Cogs catch it and reply ephemerally, so services never touch
    the interaction themselves.
"""


class MessageError(Exception):
    """An error carrying a user-facing message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IndexAPIError(MessageError):
    """The mod index returned a non-success response or could not be reached."""

    def __init__(self, message: str, status: int = 0) -> None:
        super().__init__(message)
        self.status = status


__all__ = ["MessageError", "IndexAPIError"]
