"""
Shared Enumerations for SkillSwap Models.

StrEnum values compare equal to their string equivalents, so callers
passing ``"offered"`` or ``"wanted"`` keep working.
"""

from __future__ import annotations
from enum import StrEnum


class SkillKind(StrEnum):
    """Which of a user's two skill lists an operation targets."""

    OFFERED = "offered"
    WANTED = "wanted"

    @property
    def field_name(self) -> str:
        """Model attribute (and table column) holding this kind of skill."""
        return "skills_offered" if self is SkillKind.OFFERED else "skills_wanted"


class StorageBackend(StrEnum):
    """Storage backends the directory can be configured with.

    ``FILE`` is the single-process, durable-file backend used in
    development.  ``SUPABASE`` is the managed, multi-writer backend.
    """

    FILE = "file"
    SUPABASE = "supabase"


class AuditAction(StrEnum):
    """Directory state changes recorded in the audit trail."""

    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    ADD_SKILL = "ADD_SKILL"
    REMOVE_SKILL = "REMOVE_SKILL"
    RATE_USER = "RATE_USER"
