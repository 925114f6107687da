"""
User Models.

``UserRecord`` is the canonical stored profile.  ``UserCreate`` and
``UserUpdate`` are the validated inputs accepted by the repository layer.

Attributes are snake_case (matching the ``users`` table columns); the JSON
aliases are camelCase (matching the durable-file document and outbound
payloads).  Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from skillswap.utils.string_helpers import to_camel_case


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def dedupe_skills(skills: Optional[list[str]]) -> list[str]:
    """Drop repeated labels, keeping the first occurrence's position.

    Labels are compared exactly as entered (case-sensitive, no trimming).
    """
    if skills is None:
        return []
    return list(dict.fromkeys(skills))


class DirectoryModel(BaseModel):
    """Shared configuration for every directory model."""

    model_config = ConfigDict(
        alias_generator=to_camel_case,
        populate_by_name=True,
        from_attributes=True,
    )


class UserRecord(DirectoryModel):
    """Represents one person's profile in the directory.

    Optional display fields default to empty values rather than ``None`` so
    matching code can always iterate skill lists and compare strings.
    """

    user_id: str
    email: str = Field(min_length=1)
    name: str = ""
    bio: str = ""
    location: str = ""
    profile_photo: Optional[str] = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)
    rating: float = Field(default=0.0, ge=0, le=5)
    total_ratings: int = Field(default=0, ge=0)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("name", "bio", "location", mode="before")
    @classmethod
    def _default_blank(cls, value: Optional[str]) -> str:
        return "" if value is None else value

    @field_validator("skills_offered", "skills_wanted", mode="before")
    @classmethod
    def _unique_skills(cls, value: Optional[list[str]]) -> list[str]:
        return dedupe_skills(value)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _clamp_timestamps(self) -> "UserRecord":
        # updated_at never precedes created_at, even across clock skew.
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
        if self.total_ratings == 0:
            self.rating = 0.0
        return self

    def skills(self, field_name: str) -> list[str]:
        """Return a copy of the named skill list."""
        return list(getattr(self, field_name))


class UserCreate(DirectoryModel):
    """Validated input for :meth:`UserRepository.create`.

    Identity, timestamps and rating fields are assigned by the backend; if a
    caller supplies them they are ignored.
    """

    email: str = Field(min_length=1)
    name: str = ""
    bio: str = ""
    location: str = ""
    profile_photo: Optional[str] = None
    skills_offered: list[str] = Field(default_factory=list)
    skills_wanted: list[str] = Field(default_factory=list)

    @field_validator("name", "bio", "location", mode="before")
    @classmethod
    def _default_blank(cls, value: Optional[str]) -> str:
        return "" if value is None else value

    @field_validator("skills_offered", "skills_wanted", mode="before")
    @classmethod
    def _unique_skills(cls, value: Optional[list[str]]) -> list[str]:
        return dedupe_skills(value)


class UserUpdate(DirectoryModel):
    """Partial profile update.

    Only fields explicitly set are merged.  ``user_id``, ``created_at``,
    ``rating``, ``total_ratings`` and ``is_active`` are not part of this model,
    so they can never be overwritten through :meth:`UserRepository.update`.
    """

    email: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    profile_photo: Optional[str] = None
    skills_offered: Optional[list[str]] = None
    skills_wanted: Optional[list[str]] = None

    @field_validator("skills_offered", "skills_wanted", mode="before")
    @classmethod
    def _unique_skills(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return dedupe_skills(value)

    def changes(self) -> dict[str, object]:
        """Fields the caller set, keyed by attribute name.

        An explicit ``None`` for a string field means "clear it", so it is
        normalised to ``""``; ``None`` for a skill list or email is dropped.
        """
        result: dict[str, object] = {}
        for key, value in self.model_dump(exclude_unset=True).items():
            if value is None:
                if key in ("name", "bio", "location"):
                    result[key] = ""
                elif key == "profile_photo":
                    result[key] = None
                continue
            result[key] = value
        return result
