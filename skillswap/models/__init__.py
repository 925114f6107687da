from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models:
    from skillswap.models import UserRecord, UserCreate, UserUpdate, MatchCandidate
    from skillswap.models import AuditAction, SkillKind, StorageBackend
"""

from skillswap.models.enums import AuditAction, SkillKind, StorageBackend
from skillswap.models.user import UserCreate, UserRecord, UserUpdate
from skillswap.models.match import MatchCandidate
from skillswap.models.service_models import (
    PopularSkill,
    ServiceResult,
    UserPage,
    UserSkills,
    UserStats,
)

__all__ = [
    "AuditAction",
    "SkillKind",
    "StorageBackend",
    "UserRecord",
    "UserCreate",
    "UserUpdate",
    "MatchCandidate",
    "PopularSkill",
    "ServiceResult",
    "UserPage",
    "UserSkills",
    "UserStats",
]
