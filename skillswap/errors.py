"""
Directory Error Taxonomy.

``NotFoundError``, ``AlreadyExistsError``, ``InvalidSkillTypeError`` and
``InvalidRatingError`` are expected conditions the caller can recover from.
``BackendUnavailableError`` is an infrastructure fault (file system or
network) that the core cannot recover from locally; it always carries the
underlying exception as ``original_error``.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "AlreadyExistsError",
    "BackendUnavailableError",
    "DirectoryError",
    "InvalidRatingError",
    "InvalidSkillTypeError",
    "NotFoundError",
]


class DirectoryError(Exception):
    """Base class for every failure raised by the directory core."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class NotFoundError(DirectoryError):
    """The id does not resolve to an active record."""

    def __init__(self, user_id: str) -> None:
        self.user_id: str = user_id
        super().__init__(f"User not found: {user_id}")


class AlreadyExistsError(DirectoryError):
    """An active record already uses the requested email."""

    def __init__(self, email: str, original_error: Optional[Exception] = None) -> None:
        self.email: str = email
        super().__init__(f"A user with email '{email}' already exists.", original_error)


class InvalidSkillTypeError(DirectoryError, ValueError):
    """Skill kind other than ``offered`` / ``wanted``."""

    def __init__(self, kind: object) -> None:
        self.kind: object = kind
        super().__init__(
            f"Invalid skill type '{kind}'. Must be one of: offered, wanted."
        )


class InvalidRatingError(DirectoryError, ValueError):
    """Submitted rating outside the accepted 1..5 range."""

    def __init__(self, rating: object) -> None:
        self.rating: object = rating
        super().__init__(f"Invalid rating {rating!r}. Must be between 1 and 5.")


class BackendUnavailableError(DirectoryError):
    """The underlying store could not be read or written."""
