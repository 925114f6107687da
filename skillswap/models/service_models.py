"""
Service Layer Data Transfer Objects.

Pydantic models for validated output at service boundaries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from skillswap.models.user import DirectoryModel, UserRecord

T = TypeVar("T")

__all__ = [
    "PopularSkill",
    "ServiceResult",
    "UserPage",
    "UserSkills",
    "UserStats",
]


# ---------------------------------------------------------------------------
# Directory listing / statistics models
# ---------------------------------------------------------------------------

class UserPage(DirectoryModel):
    """One page of a paginated scan over active records.

    ``next_cursor`` is an opaque token to pass back to ``list_all``; it is
    ``None`` once the scan is exhausted.
    """

    users: list[UserRecord] = Field(default_factory=list)
    next_cursor: Optional[str] = None


class UserSkills(DirectoryModel):
    """Both skill lists of a single user."""

    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)


class UserStats(DirectoryModel):
    """Profile summary shown alongside a user's directory entry."""

    total_skills_offered: int
    total_skills_wanted: int
    rating: float
    total_ratings: int
    is_active: bool
    member_since: datetime


class PopularSkill(DirectoryModel):
    """A skill label and how many active users offer it."""

    skill: str
    offered_by: int


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    Directory services return this so the (external) transport layer can
    map ``status_code`` straight onto its own responses without knowing
    the error taxonomy.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[UserRecord]``).
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200
