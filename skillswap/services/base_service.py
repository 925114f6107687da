"""
Base Service Class.

Every directory service reads and writes through a single injected
``UserRepository`` and logs through a ``StructuredLogger``.
"""

from __future__ import annotations

from skillswap.errors import NotFoundError
from skillswap.logger import StructuredLogger
from skillswap.models.user import UserRecord
from skillswap.repositories.base_repository import UserRepository


class BaseService:
    """Holds the repository and logger shared by the directory services."""

    def __init__(self, repo: UserRepository, logger: StructuredLogger) -> None:
        self._repo: UserRepository = repo
        self._logger: StructuredLogger = logger

    def _require_user(self, user_id: str) -> UserRecord:
        """Active record for *user_id*; raises :class:`NotFoundError` otherwise."""
        record = self._repo.get_by_id(user_id)
        if record is None:
            raise NotFoundError(user_id)
        return record
