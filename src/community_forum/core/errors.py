"""Domain errors raised by the forum services.

Every error carries the HTTP status the API layer should answer with, so the
services raise plain exceptions and never build HTTP responses themselves.
"""

from __future__ import annotations

from fastapi import status


class ForumError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ForumError):
    """A required field is missing, blank or out of range."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ForumError):
    """The referenced post or comment does not exist or is hidden."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(ForumError):
    """The supplied comment password does not match."""

    status_code = status.HTTP_403_FORBIDDEN


class DepthExceededError(ForumError):
    """A reply would nest deeper than the configured maximum."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, max_depth: int) -> None:
        super().__init__(f"Replies cannot be nested deeper than {max_depth} levels")
        self.max_depth = max_depth


__all__ = [
    "AuthorizationError",
    "DepthExceededError",
    "ForumError",
    "NotFoundError",
    "ValidationError",
]
