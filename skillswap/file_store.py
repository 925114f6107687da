"""
Durable-File Directory Store.

The single-process store behind the file backend.  Holds the whole
directory in memory, keyed by ``user_id`` with a secondary ``email`` index,
and writes the full set back to one JSON document after every mutation.

Constraints
-----------
- **Single writer, single process.**  The store takes an exclusive lock
  file (``<data file>.lock``) containing the owner's PID.  A second store
  opened on the same data file, in this process or another one, fails with
  :class:`BackendUnavailableError`.  Lock files left behind by dead
  processes are reclaimed on POSIX; on Windows they must be removed by hand.
- **Write-through.**  Every mutation is persisted before the call returns,
  via temp file + ``os.replace`` (whole-file replace, never append).
- **Rollback on write failure.**  If the file cannot be written, the
  in-memory mutation is undone and :class:`BackendUnavailableError` is
  raised, so memory and disk never diverge.
- **Copies in, copies out.**  Records handed to :meth:`UserFileStore.put`
  and returned by reads are deep copies; callers cannot alter stored state
  by mutating them.

Usage::

    store = UserFileStore(path=Path("data/users.json"), logger=logger)
    with store.transaction():
        store.put(record)
"""

from __future__ import annotations

import json
import os
import sys
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

from pydantic import ValidationError

from skillswap.errors import BackendUnavailableError
from skillswap.logger import StructuredLogger
from skillswap.models.user import UserRecord

# A lock file younger than this may still be waiting for its PID.
_LOCK_WRITE_GRACE_S: float = 5.0


def placeholder_user() -> UserRecord:
    """Development record seeded into a brand-new data file."""
    return UserRecord(
        user_id=str(uuid.uuid4()),
        email="dev@example.com",
        name="Development User",
        bio="This is a development user for testing purposes.",
        location="Development City",
        skills_offered=["JavaScript", "React", "Node.js"],
        skills_wanted=["Python", "Machine Learning", "Data Science"],
        rating=4.8,
        total_ratings=25,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _detached(record: Optional[UserRecord]) -> Optional[UserRecord]:
    return record.model_copy(deep=True) if record is not None else None

def _pid_alive(pid: int) -> bool:
    if pid == os.getpid():
        return True
    if sys.platform == "win32":
        # No side-effect-free liveness probe; treat the owner as alive.
        return True
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


class UserFileStore:
    """Explicitly owned, single-writer in-memory directory with file persistence.

    Parameters
    ----------
    path:
        JSON data file.  Parent directories are created on demand.
    logger:
        A ``StructuredLogger`` instance.
    seed_placeholder:
        When the data file does not exist yet, seed it with
        :func:`placeholder_user`.
    """

    def __init__(
        self,
        path: Path,
        logger: StructuredLogger,
        seed_placeholder: bool = True,
    ) -> None:
        self._path: Path = Path(path)
        self._lock_path: Path = self._path.with_name(self._path.name + ".lock")
        self._logger: StructuredLogger = logger
        self._lock: threading.RLock = threading.RLock()
        self._users: dict[str, UserRecord] = {}
        self._by_email: dict[str, str] = {}
        self._owns_lock: bool = False
        self._closed: bool = False
        self._dirty: bool = False

        self._acquire_process_lock()
        try:
            self._load(seed_placeholder)
        except Exception:
            self._release_process_lock()
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            self._ensure_open()
            return _detached(self._users.get(user_id))

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            self._ensure_open()
            user_id = self._by_email.get(email)
            return _detached(self._users.get(user_id)) if user_id is not None else None

    def records(self) -> list[UserRecord]:
        """Copies of every record, in insertion order."""
        with self._lock:
            self._ensure_open()
            return [record.model_copy(deep=True) for record in self._users.values()]

    # ------------------------------------------------------------------
    # Writes (only valid inside ``transaction()``)
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(
        self, *, always_persist: bool = False,
    ) -> Generator["UserFileStore", None, None]:
        """Hold the store lock, apply mutations, then persist them.

        The file is only rewritten when the block called :meth:`put` or
        :meth:`remove`, unless *always_persist* is set.

        On any exception raised inside the block, or while writing the
        file, both maps are restored to their state on entry.  File-system
        failures surface as :class:`BackendUnavailableError`.
        """
        with self._lock:
            self._ensure_open()
            users_before = dict(self._users)
            email_before = dict(self._by_email)
            self._dirty = False
            try:
                yield self
                if self._dirty or always_persist:
                    self._persist()
            except OSError as exc:
                self._users, self._by_email = users_before, email_before
                self._logger.error(
                    "Failed to write %s; in-memory change rolled back: %s",
                    self._path,
                    exc,
                )
                raise BackendUnavailableError(
                    f"Could not write user data file '{self._path}': {exc}", exc,
                ) from exc
            except Exception:
                self._users, self._by_email = users_before, email_before
                raise

    def put(self, record: UserRecord) -> None:
        """Store a copy of *record*, keeping the email index consistent."""
        record = record.model_copy(deep=True)
        previous = self._users.get(record.user_id)
        if previous is not None and self._by_email.get(previous.email) == previous.user_id:
            del self._by_email[previous.email]
        self._users[record.user_id] = record
        if record.is_active:
            self._by_email[record.email] = record.user_id
        self._dirty = True

    def remove(self, user_id: str) -> Optional[UserRecord]:
        record = self._users.pop(user_id, None)
        if record is not None and self._by_email.get(record.email) == user_id:
            del self._by_email[record.email]
        if record is not None:
            self._dirty = True
        return record

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release the process lock.  Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._release_process_lock()
            self._logger.info("User file store closed: %s", self._path)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._closed:
            raise BackendUnavailableError(
                f"User file store for '{self._path}' has been closed."
            )

    def _load(self, seed_placeholder: bool) -> None:
        if not self._path.exists():
            self._logger.info("No user data at %s; initialising.", self._path)
            with self.transaction(always_persist=True):
                if seed_placeholder:
                    self.put(placeholder_user())
            return

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            # Older files stored an object keyed by userId.
            items = list(raw.values()) if isinstance(raw, dict) else raw
            if not isinstance(items, list):
                raise ValueError("expected a JSON array of user records")
            records = [UserRecord.model_validate(item) for item in items]
        except (OSError, ValueError, ValidationError) as exc:
            self._logger.error("Cannot load user data from %s: %s", self._path, exc)
            raise BackendUnavailableError(
                f"User data file '{self._path}' is unreadable: {exc}", exc,
            ) from exc

        for record in records:
            if record.is_active and record.email in self._by_email:
                self._logger.warning(
                    "Duplicate active email %s in %s; keeping the first record.",
                    record.email,
                    self._path,
                )
                continue
            self.put(record)
        self._logger.info("Loaded %d users from %s", len(self._users), self._path)

    def _persist(self) -> None:
        payload = [
            record.model_dump(mode="json", by_alias=True)
            for record in self._users.values()
        ]
        self._write_file(json.dumps(payload, indent=2, ensure_ascii=False))

    def _write_file(self, content: str) -> None:
        tmp_path = self._path.with_name(f".{self._path.name}.{os.getpid()}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _acquire_process_lock(self) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackendUnavailableError(
                f"Cannot create data directory for '{self._path}': {exc}", exc,
            ) from exc

        for _attempt in range(2):
            try:
                fd = os.open(self._lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                owner = self._read_lock_owner()
                if self._lock_is_stale(owner):
                    self._logger.warning(
                        "Reclaiming stale lock %s left by process %s.",
                        self._lock_path,
                        owner if owner is not None else "unknown",
                    )
                    self._lock_path.unlink(missing_ok=True)
                    continue
                raise BackendUnavailableError(
                    f"User data file '{self._path}' is already in use by process "
                    f"{owner if owner is not None else 'unknown'}. The file "
                    "backend supports a single writer process only."
                )
            except OSError as exc:
                raise BackendUnavailableError(
                    f"Cannot create lock file '{self._lock_path}': {exc}", exc,
                ) from exc

            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(str(os.getpid()))
            self._owns_lock = True
            return

        raise BackendUnavailableError(
            f"Could not acquire lock file '{self._lock_path}'."
        )

    def _lock_is_stale(self, owner: Optional[int]) -> bool:
        if owner is not None:
            return not _pid_alive(owner)
        # Empty or garbled: the writer died before recording its PID.
        try:
            age = time.time() - self._lock_path.stat().st_mtime
        except FileNotFoundError:
            return True
        except OSError:
            return False
        return age > _LOCK_WRITE_GRACE_S

    def _read_lock_owner(self) -> Optional[int]:
        try:
            return int(self._lock_path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

    def _release_process_lock(self) -> None:
        if not self._owns_lock:
            return
        try:
            self._lock_path.unlink(missing_ok=True)
        except OSError as exc:
            self._logger.warning("Could not remove lock file %s: %s", self._lock_path, exc)
        self._owns_lock = False
