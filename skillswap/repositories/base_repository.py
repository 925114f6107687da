"""
User Repository Interface.

Defines the storage contract both directory backends implement.  Services
depend on :class:`UserRepository` only; which concrete backend they receive
is decided once, at startup, by
:func:`skillswap.repositories.create_user_repository`.

Shared semantics (both backends)
--------------------------------
- Inactive and deleted records are absent: point reads return ``None``,
  listings skip them and mutations raise :class:`NotFoundError`.
- ``create`` raises :class:`AlreadyExistsError` when an active record
  already uses the email, leaving that record untouched.
- ``add_skill`` / ``remove_skill`` are idempotent.
- ``rate`` keeps a running average rounded to one decimal place.
- Infrastructure failures surface as :class:`BackendUnavailableError`.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from skillswap.errors import InvalidRatingError, InvalidSkillTypeError
from skillswap.logger import StructuredLogger
from skillswap.models.enums import SkillKind
from skillswap.models.service_models import UserPage
from skillswap.models.user import UserCreate, UserRecord, UserUpdate, utc_now

MIN_RATING: int = 1
MAX_RATING: int = 5

_ONE_DECIMAL = Decimal("0.1")


def compute_running_average(current: float, total: int, new_rating: float) -> float:
    """Fold *new_rating* into an average of *total* previous ratings.

    ``(current * total + new_rating) / (total + 1)``, rounded half-up to
    one decimal place.  The rounded value is what gets stored, so the next
    update builds on it.
    """
    numerator = Decimal(str(current)) * total + Decimal(str(new_rating))
    average = numerator / Decimal(total + 1)
    return float(average.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


class UserRepository(ABC):
    """Storage contract for user records.  Receives dependencies via __init__."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger = logger

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    def create(self, user: Union[UserCreate, Mapping[str, object]]) -> UserRecord:
        """Insert a new active record with a generated ``user_id``."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Active record with this id, or ``None``."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Active record with this email, or ``None``."""

    @abstractmethod
    def update(
        self,
        user_id: str,
        fields: Union[UserUpdate, Mapping[str, object]],
    ) -> UserRecord:
        """Merge *fields* into the record and refresh ``updated_at``."""

    @abstractmethod
    def delete(self, user_id: str) -> None:
        """Remove the record (hard or soft, depending on backend)."""

    @abstractmethod
    def list_by_location(self, location: str, limit: int) -> list[UserRecord]:
        """Active records at *location*, newest first."""

    @abstractmethod
    def list_by_skill(
        self,
        skills: list[str],
        exclude_user_id: Optional[str] = None,
    ) -> list[UserRecord]:
        """Active records offering at least one of *skills*."""

    @abstractmethod
    def add_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        """Union-add *skill* to the list selected by *kind*."""

    @abstractmethod
    def remove_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        """Remove *skill* from the list selected by *kind*, if present."""

    @abstractmethod
    def rate(self, user_id: str, new_rating: float) -> UserRecord:
        """Fold *new_rating* into the user's running average."""

    @abstractmethod
    def list_all(self, limit: int, cursor: Optional[str] = None) -> UserPage:
        """One page of active records ordered by ``user_id``."""

    @abstractmethod
    def count_active(self) -> int:
        """Number of active records."""

    def close(self) -> None:
        """Release backend resources.  Safe to call multiple times."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_kind(kind: Union[SkillKind, str]) -> SkillKind:
        try:
            return SkillKind(kind)
        except ValueError as exc:
            raise InvalidSkillTypeError(kind) from exc

    @staticmethod
    def _validate_rating(new_rating: float) -> float:
        if isinstance(new_rating, bool) or not isinstance(new_rating, (int, float)):
            raise InvalidRatingError(new_rating)
        if math.isnan(new_rating) or not MIN_RATING <= new_rating <= MAX_RATING:
            raise InvalidRatingError(new_rating)
        return float(new_rating)

    @staticmethod
    def _coerce_create(user: Union[UserCreate, Mapping[str, object]]) -> UserCreate:
        if isinstance(user, UserCreate):
            return user
        return UserCreate.model_validate(dict(user))

    @staticmethod
    def _coerce_update(fields: Union[UserUpdate, Mapping[str, object]]) -> dict[str, object]:
        if not isinstance(fields, UserUpdate):
            fields = UserUpdate.model_validate(dict(fields))
        return fields.changes()

    @staticmethod
    def _next_timestamp(record: UserRecord) -> datetime:
        """``updated_at`` for the next mutation of *record*; never moves backwards."""
        return max(utc_now(), record.updated_at, record.created_at)
