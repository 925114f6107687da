"""
Repository Layer Package.

Provides the user directory storage contract and its two backends:
the durable-file backend (single process) and the Supabase backend
(managed, multi-writer).  All directory reads and writes flow through a
repository; services never touch the file store or the Supabase client.

Usage:
    from skillswap.repositories import create_user_repository
    repo = create_user_repository(config, logger)
"""

from __future__ import annotations

from skillswap.config import AppConfig
from skillswap.database import DatabaseManager
from skillswap.file_store import UserFileStore
from skillswap.logger import StructuredLogger
from skillswap.models.enums import StorageBackend
from skillswap.repositories.base_repository import UserRepository
from skillswap.repositories.file_user_repository import FileUserRepository
from skillswap.repositories.supabase_user_repository import SupabaseUserRepository

__all__ = [
    "UserRepository",
    "FileUserRepository",
    "SupabaseUserRepository",
    "create_user_repository",
]


def create_user_repository(config: AppConfig, logger: StructuredLogger) -> UserRepository:
    """Build the repository selected by ``config.STORAGE_BACKEND``.

    Called once at startup; the returned repository owns its backend
    resources and must be closed on shutdown.
    """
    if config.STORAGE_BACKEND == StorageBackend.SUPABASE:
        db = DatabaseManager(
            supabase_url=config.SUPABASE_URL,
            supabase_key=config.SUPABASE_KEY.get_secret_value(),
            logger=logger,
        )
        logger.info("Using Supabase backend (table %s).", config.USERS_TABLE)
        return SupabaseUserRepository(db=db, logger=logger, table=config.USERS_TABLE)

    store = UserFileStore(
        path=config.DATA_FILE,
        logger=logger,
        seed_placeholder=config.SEED_PLACEHOLDER_USER,
    )
    logger.info("Using file backend (%s).", config.DATA_FILE)
    return FileUserRepository(store=store, logger=logger)
