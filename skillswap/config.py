"""
Application Configuration.

Pydantic Settings model for the SkillSwap directory core.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.

The storage backend is chosen exactly once, at startup, from
``STORAGE_BACKEND``.  Nothing in the codebase switches backends at runtime.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

from skillswap.models.enums import StorageBackend


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Backend selection ---
    STORAGE_BACKEND: StorageBackend = StorageBackend.FILE

    # --- Supabase (managed-document backend) ---
    SUPABASE_URL: str = ""
    SUPABASE_KEY: SecretStr = SecretStr("")
    USERS_TABLE: str = "users"

    # --- Durable-file backend ---
    DATA_FILE: Path = Path("data") / "users.json"
    SEED_PLACEHOLDER_USER: bool = True

    # --- Directory defaults ---
    DEFAULT_MATCH_LIMIT: int = Field(default=20, ge=1)
    DEFAULT_PAGE_SIZE: int = Field(default=50, ge=1)
    POPULAR_SKILLS_LIMIT: int = Field(default=12, ge=1)

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "skillswap.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when the selected backend is under-configured.

        Pydantic silently falls back to defaults when ``.env`` is missing.
        The Supabase backend cannot start without credentials, so operators
        are told up-front rather than on the first directory call.
        """
        _log = logging.getLogger("skillswap.config")

        if self.STORAGE_BACKEND == StorageBackend.SUPABASE and (
            not self.SUPABASE_URL or not self.SUPABASE_KEY.get_secret_value()
        ):
            _log.warning(
                "STORAGE_BACKEND=supabase but SUPABASE_URL / SUPABASE_KEY are "
                "empty. Every directory call will fail as backend-unavailable."
            )

        return self


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern so the fast path takes no lock.

    Prefer direct constructor injection of ``AppConfig`` in new code.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
