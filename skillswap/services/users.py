"""
User Directory Service.

Caller-facing facade over the directory core.  Every method returns a
``ServiceResult`` envelope so the (external) transport layer can map the
outcome without knowing the error taxonomy:

=========================  ===========
Failure                    status_code
=========================  ===========
``NotFoundError``          404
``AlreadyExistsError``     409
``InvalidSkillTypeError``  400
``InvalidRatingError``     400
``ValidationError``        400
``BackendUnavailableError`` 503
=========================  ===========

Architectural notes:
    - All reads and writes go through the injected ``UserRepository``.
    - Every successful mutation emits a structured audit event.
    - ``acting_user_id`` is the already-authenticated caller (``None`` for
      anonymous/public calls); no authentication happens here.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from typing import Optional, Union

from pydantic import ValidationError

from skillswap.errors import (
    AlreadyExistsError,
    BackendUnavailableError,
    DirectoryError,
    InvalidRatingError,
    InvalidSkillTypeError,
    NotFoundError,
)
from skillswap.logger import StructuredLogger
from skillswap.models.enums import AuditAction, SkillKind
from skillswap.models.match import MatchCandidate
from skillswap.models.service_models import (
    PopularSkill,
    ServiceResult,
    UserPage,
    UserSkills,
    UserStats,
)
from skillswap.models.user import UserCreate, UserRecord, UserUpdate
from skillswap.repositories.base_repository import UserRepository
from skillswap.services.base_service import BaseService
from skillswap.services.matching import MatchingService
from skillswap.services.ratings import RatingService
from skillswap.utils.audit import log_audit_event

_STATUS_BY_ERROR: dict[type[DirectoryError], int] = {
    NotFoundError: 404,
    AlreadyExistsError: 409,
    InvalidSkillTypeError: 400,
    InvalidRatingError: 400,
    BackendUnavailableError: 503,
}


class UserService(BaseService):
    """Service layer for directory, skill, matching and rating operations."""

    def __init__(
        self,
        repo: UserRepository,
        matching: MatchingService,
        ratings: RatingService,
        logger: StructuredLogger,
        default_page_size: int = 50,
        popular_skills_limit: int = 12,
    ) -> None:
        super().__init__(repo, logger)
        self._matching = matching
        self._ratings = ratings
        self._default_page_size = default_page_size
        self._popular_skills_limit = popular_skills_limit

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def register_user(
        self,
        data: Union[UserCreate, Mapping[str, object]],
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserRecord]:
        """Create a directory entry.  409 when the email is taken."""
        try:
            user = self._repo.create(data)
        except (DirectoryError, ValidationError) as exc:
            return self._failure("register_user", exc)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.CREATE_USER,
            entity_id=user.user_id,
            actor_id=acting_user_id or user.user_id,
            details={"email": user.email},
        )
        return ServiceResult(success=True, data=user, status_code=201)

    def get_user(self, user_id: str) -> ServiceResult[UserRecord]:
        try:
            user = self._require_user(user_id)
        except DirectoryError as exc:
            return self._failure("get_user", exc)
        return ServiceResult(success=True, data=user)

    def get_user_by_email(self, email: str) -> ServiceResult[UserRecord]:
        try:
            user = self._repo.get_by_email(email)
        except DirectoryError as exc:
            return self._failure("get_user_by_email", exc)
        if user is None:
            return ServiceResult(
                success=False, error="User not found.", status_code=404,
            )
        return ServiceResult(success=True, data=user)

    def update_profile(
        self,
        user_id: str,
        fields: Union[UserUpdate, Mapping[str, object]],
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserRecord]:
        """Merge *fields* into the profile.  Identity fields are ignored."""
        try:
            updated = self._repo.update(user_id, fields)
        except (DirectoryError, ValidationError) as exc:
            return self._failure("update_profile", exc)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.UPDATE_USER,
            entity_id=user_id,
            actor_id=acting_user_id,
        )
        return ServiceResult(success=True, data=updated)

    def delete_user(
        self,
        user_id: str,
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[dict[str, str]]:
        try:
            self._repo.delete(user_id)
        except DirectoryError as exc:
            return self._failure("delete_user", exc)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.DELETE_USER,
            entity_id=user_id,
            actor_id=acting_user_id,
        )
        return ServiceResult(
            success=True, data={"message": "User profile deleted successfully."},
        )

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------

    def add_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserRecord]:
        try:
            updated = self._repo.add_skill(user_id, skill, kind)
        except DirectoryError as exc:
            return self._failure("add_skill", exc)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.ADD_SKILL,
            entity_id=user_id,
            actor_id=acting_user_id,
            details={"skill": skill, "kind": str(kind)},
        )
        return ServiceResult(success=True, data=updated)

    def remove_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserRecord]:
        try:
            updated = self._repo.remove_skill(user_id, skill, kind)
        except DirectoryError as exc:
            return self._failure("remove_skill", exc)

        log_audit_event(
            logger=self._logger,
            action=AuditAction.REMOVE_SKILL,
            entity_id=user_id,
            actor_id=acting_user_id,
            details={"skill": skill, "kind": str(kind)},
        )
        return ServiceResult(success=True, data=updated)

    def get_user_skills(self, user_id: str) -> ServiceResult[UserSkills]:
        result = self.get_user(user_id)
        if not result.success or result.data is None:
            return ServiceResult(
                success=False, error=result.error, status_code=result.status_code,
            )
        user = result.data
        return ServiceResult(
            success=True,
            data=UserSkills(
                skills_offered=user.skills_offered,
                skills_wanted=user.skills_wanted,
            ),
        )

    def get_popular_skills(self, limit: Optional[int] = None) -> ServiceResult[list[PopularSkill]]:
        """Most-offered skills across active users, count desc then label asc."""
        resolved_limit = self._popular_skills_limit if limit is None else limit
        counts: Counter[str] = Counter()
        cursor: Optional[str] = None
        try:
            while True:
                page = self._repo.list_all(self._default_page_size, cursor)
                for user in page.users:
                    counts.update(user.skills_offered)
                if page.next_cursor is None:
                    break
                cursor = page.next_cursor
        except DirectoryError as exc:
            return self._failure("get_popular_skills", exc)

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ServiceResult(
            success=True,
            data=[
                PopularSkill(skill=skill, offered_by=count)
                for skill, count in ranked[:max(resolved_limit, 0)]
            ],
        )

    # ------------------------------------------------------------------
    # Search, statistics, matching, rating
    # ------------------------------------------------------------------

    def search_users(
        self,
        skills: Optional[list[str]] = None,
        location: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserPage]:
        """Search by skills, else by location, else page through everyone.

        Skill searches exclude the acting user.
        """
        resolved_limit = self._default_page_size if limit is None else limit
        try:
            if skills:
                users = self._repo.list_by_skill(skills, exclude_user_id=acting_user_id)
                page = UserPage(users=users[:max(resolved_limit, 0)])
            elif location:
                page = UserPage(users=self._repo.list_by_location(location, resolved_limit))
            else:
                page = self._repo.list_all(resolved_limit, cursor)
        except DirectoryError as exc:
            return self._failure("search_users", exc)
        return ServiceResult(success=True, data=page)

    def get_user_stats(self, user_id: str) -> ServiceResult[UserStats]:
        result = self.get_user(user_id)
        if not result.success or result.data is None:
            return ServiceResult(
                success=False, error=result.error, status_code=result.status_code,
            )
        user = result.data
        return ServiceResult(
            success=True,
            data=UserStats(
                total_skills_offered=len(user.skills_offered),
                total_skills_wanted=len(user.skills_wanted),
                rating=user.rating,
                total_ratings=user.total_ratings,
                is_active=user.is_active,
                member_since=user.created_at,
            ),
        )

    def find_matches(
        self,
        user_id: str,
        limit: Optional[int] = None,
    ) -> ServiceResult[list[MatchCandidate]]:
        try:
            matches = self._matching.find_potential_matches(user_id, limit)
        except DirectoryError as exc:
            return self._failure("find_matches", exc)
        return ServiceResult(success=True, data=matches)

    def rate_user(
        self,
        user_id: str,
        rating: float,
        acting_user_id: Optional[str] = None,
    ) -> ServiceResult[UserRecord]:
        try:
            updated = self._ratings.rate_user(user_id, rating, rated_by=acting_user_id)
        except DirectoryError as exc:
            return self._failure("rate_user", exc)
        return ServiceResult(success=True, data=updated)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _failure(
        self,
        operation: str,
        exc: Union[DirectoryError, ValidationError],
    ) -> ServiceResult:
        if isinstance(exc, ValidationError):
            self._logger.warning("%s rejected invalid input: %s", operation, exc)
            return ServiceResult(success=False, error=str(exc), status_code=400)

        status_code = next(
            (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
            500,
        )
        if status_code >= 500:
            self._logger.error("%s failed: %s", operation, exc.message)
        else:
            self._logger.info("%s: %s", operation, exc.message)
        return ServiceResult(success=False, error=exc.message, status_code=status_code)
