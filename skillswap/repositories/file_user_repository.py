"""
File User Repository.

Backend A: the single-process, durable-file directory used in development.
Every operation runs under the owning :class:`UserFileStore`'s lock, so the
compound operations (``create``'s email check, ``rate``'s read-then-write)
are atomic within the process.  Lookups not keyed by ``user_id`` or
``email`` are linear scans over the in-memory records.

``delete`` is a hard delete: the record leaves the map and the data file.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Optional, Union

from skillswap.errors import AlreadyExistsError, NotFoundError
from skillswap.file_store import UserFileStore
from skillswap.logger import StructuredLogger
from skillswap.models.enums import SkillKind
from skillswap.models.service_models import UserPage
from skillswap.models.user import UserCreate, UserRecord, UserUpdate, utc_now
from skillswap.repositories.base_repository import (
    UserRepository,
    compute_running_average,
)


class FileUserRepository(UserRepository):
    """Directory backed by an owned :class:`UserFileStore`."""

    def __init__(self, store: UserFileStore, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._store = store

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def create(self, user: Union[UserCreate, Mapping[str, object]]) -> UserRecord:
        data = self._coerce_create(user)
        with self._store.transaction():
            if self._store.get_by_email(data.email) is not None:
                self._logger.warning("Create rejected, email already in use: %s", data.email)
                raise AlreadyExistsError(data.email)

            user_id = str(uuid.uuid4())
            while self._store.get(user_id) is not None:
                user_id = str(uuid.uuid4())

            timestamp = utc_now()
            record = UserRecord(
                **data.model_dump(),
                user_id=user_id,
                created_at=timestamp,
                updated_at=timestamp,
            )
            self._store.put(record)

        self._logger.info("User created: %s", record.user_id)
        return record

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        record = self._store.get(user_id)
        return record if record is not None and record.is_active else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return self._store.get_by_email(email)

    def update(
        self,
        user_id: str,
        fields: Union[UserUpdate, Mapping[str, object]],
    ) -> UserRecord:
        changes = self._coerce_update(fields)
        with self._store.transaction():
            existing = self._require_active(user_id)

            new_email = changes.get("email")
            if new_email is not None and new_email != existing.email:
                holder = self._store.get_by_email(str(new_email))
                if holder is not None and holder.user_id != user_id:
                    raise AlreadyExistsError(str(new_email))

            updated = existing.model_copy(
                update={**changes, "updated_at": self._next_timestamp(existing)}
            )
            self._store.put(updated)

        self._logger.info("User updated: %s (%s)", user_id, ", ".join(sorted(changes)))
        return updated

    def delete(self, user_id: str) -> None:
        with self._store.transaction():
            self._require_active(user_id)
            self._store.remove(user_id)
        self._logger.info("User deleted: %s", user_id)

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------

    def add_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        field_name = self._resolve_kind(kind).field_name
        with self._store.transaction():
            existing = self._require_active(user_id)
            skills = existing.skills(field_name)
            if skill in skills:
                return existing
            updated = existing.model_copy(
                update={
                    field_name: [*skills, skill],
                    "updated_at": self._next_timestamp(existing),
                }
            )
            self._store.put(updated)
        return updated

    def remove_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        field_name = self._resolve_kind(kind).field_name
        with self._store.transaction():
            existing = self._require_active(user_id)
            skills = existing.skills(field_name)
            if skill not in skills:
                return existing
            updated = existing.model_copy(
                update={
                    field_name: [s for s in skills if s != skill],
                    "updated_at": self._next_timestamp(existing),
                }
            )
            self._store.put(updated)
        return updated

    # ------------------------------------------------------------------
    # Rating
    # ------------------------------------------------------------------

    def rate(self, user_id: str, new_rating: float) -> UserRecord:
        value = self._validate_rating(new_rating)
        with self._store.transaction():
            existing = self._require_active(user_id)
            updated = existing.model_copy(
                update={
                    "rating": compute_running_average(
                        existing.rating, existing.total_ratings, value,
                    ),
                    "total_ratings": existing.total_ratings + 1,
                    "updated_at": self._next_timestamp(existing),
                }
            )
            self._store.put(updated)
        self._logger.info(
            "User rated: %s -> %.1f (%d ratings)",
            user_id,
            updated.rating,
            updated.total_ratings,
        )
        return updated

    # ------------------------------------------------------------------
    # Listings (linear scans)
    # ------------------------------------------------------------------

    def list_by_location(self, location: str, limit: int) -> list[UserRecord]:
        if limit <= 0:
            return []
        matches = [r for r in self._active() if r.location == location]
        matches.sort(key=lambda r: r.user_id)
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches[:limit]

    def list_by_skill(
        self,
        skills: list[str],
        exclude_user_id: Optional[str] = None,
    ) -> list[UserRecord]:
        wanted = set(skills)
        if not wanted:
            return []
        return [
            r
            for r in self._active()
            if r.user_id != exclude_user_id and wanted.intersection(r.skills_offered)
        ]

    def list_all(self, limit: int, cursor: Optional[str] = None) -> UserPage:
        if limit <= 0:
            return UserPage(users=[], next_cursor=cursor)
        ordered = sorted(self._active(), key=lambda r: r.user_id)
        if cursor is not None:
            ordered = [r for r in ordered if r.user_id > cursor]
        page = ordered[:limit]
        next_cursor = page[-1].user_id if len(ordered) > limit else None
        return UserPage(users=page, next_cursor=next_cursor)

    def count_active(self) -> int:
        return len(self._active())

    def close(self) -> None:
        self._store.close()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _active(self) -> list[UserRecord]:
        return [r for r in self._store.records() if r.is_active]

    def _require_active(self, user_id: str) -> UserRecord:
        record = self._store.get(user_id)
        if record is None or not record.is_active:
            raise NotFoundError(user_id)
        return record
