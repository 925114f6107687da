"""
Rating Aggregator Service.

A user's rating is a monotonically accumulating running average held on
the record itself (``rating``, ``total_ratings``).  Individual ratings are
not retained; there is no history to recompute from.
"""

from __future__ import annotations

from typing import Optional

from skillswap.logger import StructuredLogger
from skillswap.models.enums import AuditAction
from skillswap.models.user import UserRecord
from skillswap.repositories.base_repository import UserRepository
from skillswap.services.base_service import BaseService
from skillswap.utils.audit import log_audit_event


class RatingService(BaseService):
    """Applies ratings through :meth:`UserRepository.rate`."""

    def __init__(self, repo: UserRepository, logger: StructuredLogger) -> None:
        super().__init__(repo, logger)

    def rate_user(
        self,
        user_id: str,
        rating: float,
        rated_by: Optional[str] = None,
    ) -> UserRecord:
        """Fold *rating* into *user_id*'s average.

        Raises:
            InvalidRatingError: *rating* is outside 1..5.
            NotFoundError: *user_id* is not an active record.
            BackendUnavailableError: the store could not be written.
        """
        updated = self._repo.rate(user_id, rating)
        log_audit_event(
            logger=self._logger,
            action=AuditAction.RATE_USER,
            entity_id=user_id,
            actor_id=rated_by,
            details={
                "rating": float(rating),
                "new_average": updated.rating,
                "total_ratings": updated.total_ratings,
            },
        )
        return updated
