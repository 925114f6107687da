"""
Supabase User Repository.

Backend B: the managed, multi-writer directory.  Every operation is a point
read/write, an index query, or a call to one of the server-side functions
defined in :mod:`skillswap.schema`.

Atomicity
---------
- ``create`` relies on the partial unique index on ``email``; there is no
  read-before-insert, so two concurrent creates cannot both succeed.
- ``rate``, ``add_skill`` and ``remove_skill`` run as single server-side
  ``UPDATE ... RETURNING`` statements, so concurrent calls never lose an
  update.

``delete`` is a soft delete (``is_active = false``); the row is kept but is
invisible to every read and listing, and its email becomes free again.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Callable, Optional, TypeVar, Union

from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from supabase import Client as SupabaseClient

from skillswap.database import DatabaseManager
from skillswap.errors import (
    AlreadyExistsError,
    BackendUnavailableError,
    DirectoryError,
    NotFoundError,
)
from skillswap.logger import StructuredLogger
from skillswap.models.enums import SkillKind
from skillswap.models.service_models import UserPage
from skillswap.models.user import UserCreate, UserRecord, UserUpdate, utc_now
from skillswap.repositories.base_repository import UserRepository
from skillswap.schema import RPC_FUNCTIONS

T = TypeVar("T")

# PostgreSQL SQLSTATE for unique_violation.
UNIQUE_VIOLATION: str = "23505"


def _is_uuid(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class SupabaseUserRepository(UserRepository):
    """Directory backed by the Supabase ``users`` table."""

    TABLE: str = "users"

    def __init__(
        self,
        db: DatabaseManager,
        logger: StructuredLogger,
        table: str = "users",
    ) -> None:
        super().__init__(logger)
        self._db = db
        self.TABLE = table

    @property
    def supabase(self) -> SupabaseClient:
        """Returns the Supabase client for cloud operations."""
        return self._db.supabase

    # ------------------------------------------------------------------
    # Point operations
    # ------------------------------------------------------------------

    def create(self, user: Union[UserCreate, Mapping[str, object]]) -> UserRecord:
        data = self._coerce_create(user)
        timestamp = utc_now().isoformat()
        row = {
            **data.model_dump(mode="json"),
            "user_id": str(uuid.uuid4()),
            "rating": 0,
            "total_ratings": 0,
            "is_active": True,
            "created_at": timestamp,
            "updated_at": timestamp,
        }

        response = self._run(
            "create",
            lambda: self.supabase.table(self.TABLE).insert(row).execute(),
            email=data.email,
        )
        record = self._first(response.data)
        if record is None:
            raise BackendUnavailableError("Insert returned no row for new user.")
        self._logger.info("User created: %s", record.user_id)
        return record

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        if not _is_uuid(user_id):
            return None
        response = self._run(
            "get_by_id",
            lambda: (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("user_id", user_id)
                .eq("is_active", True)
                .limit(1)
                .execute()
            ),
        )
        return self._first(response.data)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        response = self._run(
            "get_by_email",
            lambda: (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("email", email)
                .eq("is_active", True)
                .limit(1)
                .execute()
            ),
        )
        return self._first(response.data)

    def update(
        self,
        user_id: str,
        fields: Union[UserUpdate, Mapping[str, object]],
    ) -> UserRecord:
        changes = self._coerce_update(fields)
        if not _is_uuid(user_id):
            raise NotFoundError(user_id)

        payload = {**changes, "updated_at": utc_now().isoformat()}
        new_email = changes.get("email")
        response = self._run(
            "update",
            lambda: (
                self.supabase.table(self.TABLE)
                .update(payload)
                .eq("user_id", user_id)
                .eq("is_active", True)
                .execute()
            ),
            email=str(new_email) if new_email is not None else None,
        )
        record = self._first(response.data)
        if record is None:
            raise NotFoundError(user_id)
        self._logger.info("User updated: %s (%s)", user_id, ", ".join(sorted(changes)))
        return record

    def delete(self, user_id: str) -> None:
        if not _is_uuid(user_id):
            raise NotFoundError(user_id)
        payload = {"is_active": False, "updated_at": utc_now().isoformat()}
        response = self._run(
            "delete",
            lambda: (
                self.supabase.table(self.TABLE)
                .update(payload)
                .eq("user_id", user_id)
                .eq("is_active", True)
                .execute()
            ),
        )
        if not response.data:
            raise NotFoundError(user_id)
        self._logger.info("User deactivated: %s", user_id)

    # ------------------------------------------------------------------
    # Skills (server-side set union / difference)
    # ------------------------------------------------------------------

    def add_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        resolved = self._resolve_kind(kind)
        return self._call_row_function(
            RPC_FUNCTIONS["add_skill"],
            user_id,
            {"p_column": resolved.field_name, "p_skill": skill},
        )

    def remove_skill(
        self,
        user_id: str,
        skill: str,
        kind: Union[SkillKind, str] = SkillKind.OFFERED,
    ) -> UserRecord:
        resolved = self._resolve_kind(kind)
        return self._call_row_function(
            RPC_FUNCTIONS["remove_skill"],
            user_id,
            {"p_column": resolved.field_name, "p_skill": skill},
        )

    # ------------------------------------------------------------------
    # Rating (server-side atomic running average)
    # ------------------------------------------------------------------

    def rate(self, user_id: str, new_rating: float) -> UserRecord:
        value = self._validate_rating(new_rating)
        record = self._call_row_function(
            RPC_FUNCTIONS["rate"], user_id, {"p_rating": value},
        )
        self._logger.info(
            "User rated: %s -> %.1f (%d ratings)",
            user_id,
            record.rating,
            record.total_ratings,
        )
        return record

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def list_by_location(self, location: str, limit: int) -> list[UserRecord]:
        if limit <= 0:
            return []
        response = self._run(
            "list_by_location",
            lambda: (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("location", location)
                .eq("is_active", True)
                .order("created_at", desc=True)
                .order("user_id")
                .limit(limit)
                .execute()
            ),
        )
        return [UserRecord.model_validate(row) for row in response.data or []]

    def list_by_skill(
        self,
        skills: list[str],
        exclude_user_id: Optional[str] = None,
    ) -> list[UserRecord]:
        unique_skills = list(dict.fromkeys(skills))
        if not unique_skills:
            return []
        # An id that is not a UUID cannot match any row.
        params = {
            "p_skills": unique_skills,
            "p_exclude_user_id": exclude_user_id if _is_uuid(exclude_user_id) else None,
        }
        response = self._run(
            "list_by_skill",
            lambda: self.supabase.rpc(RPC_FUNCTIONS["list_by_skill"], params).execute(),
        )
        return [
            record
            for record in (UserRecord.model_validate(row) for row in self._rows(response.data))
            if record.is_active and record.user_id != exclude_user_id
        ]

    def list_all(self, limit: int, cursor: Optional[str] = None) -> UserPage:
        if limit <= 0:
            return UserPage(users=[], next_cursor=cursor)

        def _query():
            query = (
                self.supabase.table(self.TABLE)
                .select("*")
                .eq("is_active", True)
            )
            if cursor is not None:
                query = query.gt("user_id", cursor)
            # One extra row tells us whether another page exists.
            return query.order("user_id").limit(limit + 1).execute()

        response = self._run("list_all", _query)
        rows = [UserRecord.model_validate(row) for row in response.data or []]
        page = rows[:limit]
        next_cursor = page[-1].user_id if len(rows) > limit else None
        return UserPage(users=page, next_cursor=next_cursor)

    def count_active(self) -> int:
        response = self._run(
            "count_active",
            lambda: (
                self.supabase.table(self.TABLE)
                .select("user_id", count=CountMethod.exact)
                .eq("is_active", True)
                .limit(1)
                .execute()
            ),
        )
        return int(response.count or 0)

    def close(self) -> None:
        self._db.close()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _call_row_function(
        self,
        function_name: str,
        user_id: str,
        params: dict[str, object],
    ) -> UserRecord:
        if not _is_uuid(user_id):
            raise NotFoundError(user_id)
        response = self._run(
            function_name,
            lambda: self.supabase.rpc(
                function_name, {"p_user_id": user_id, **params},
            ).execute(),
        )
        record = self._first(response.data)
        if record is None:
            raise NotFoundError(user_id)
        return record

    def _run(
        self,
        operation_name: str,
        operation: Callable[[], T],
        *,
        email: Optional[str] = None,
    ) -> T:
        """Execute a Supabase call, translating failures into the error taxonomy.

        A unique violation becomes :class:`AlreadyExistsError` when *email*
        identifies the contested value; every other failure is an
        infrastructure fault.
        """
        try:
            return operation()
        except DirectoryError:
            raise
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION and email is not None:
                self._logger.warning(
                    "%s rejected, email already in use: %s", operation_name, email,
                )
                raise AlreadyExistsError(email, exc) from exc
            self._logger.error(
                "Supabase %s failed (%s): %s", operation_name, exc.code, exc.message,
            )
            raise BackendUnavailableError(
                f"Supabase {operation_name} failed: {exc.message}", exc,
            ) from exc
        except Exception as exc:
            self._logger.error("Supabase unavailable for %s: %s", operation_name, exc)
            raise BackendUnavailableError(
                f"Supabase unavailable for {operation_name}: {exc}", exc,
            ) from exc

    @staticmethod
    def _rows(data: object) -> list[dict[str, object]]:
        if not data:
            return []
        if isinstance(data, dict):
            return [data]
        return list(data)

    def _first(self, data: object) -> Optional[UserRecord]:
        rows = self._rows(data)
        return UserRecord.model_validate(rows[0]) if rows else None
