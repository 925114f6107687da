"""Shared fixtures: a logger, both repository backends, and wired services."""

from __future__ import annotations

import logging

import pytest

from skillswap.config import AppConfig
from skillswap.database import DatabaseManager
from skillswap.file_store import UserFileStore
from skillswap.logger import StructuredLogger
from skillswap.repositories.file_user_repository import FileUserRepository
from skillswap.repositories.supabase_user_repository import SupabaseUserRepository
from skillswap.services import create_services
from tests.fake_supabase import FakeSupabaseClient


@pytest.fixture(scope="session")
def logger(tmp_path_factory) -> StructuredLogger:
    log_file = tmp_path_factory.mktemp("logs") / "skillswap-test.log"
    return StructuredLogger(name="skillswap-test", level=logging.DEBUG, log_file=str(log_file))


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "users.json"


@pytest.fixture
def file_store(data_file, logger):
    store = UserFileStore(path=data_file, logger=logger, seed_placeholder=False)
    yield store
    store.close()


@pytest.fixture
def file_repo(file_store, logger) -> FileUserRepository:
    return FileUserRepository(store=file_store, logger=logger)


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def supabase_repo(fake_client, logger) -> SupabaseUserRepository:
    db = DatabaseManager(supabase_url="", supabase_key="", logger=logger, client=fake_client)
    return SupabaseUserRepository(db=db, logger=logger)


@pytest.fixture(params=["file", "supabase"])
def repo(request):
    """Run the test once per backend: both must honour the same contract."""
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def config(data_file) -> AppConfig:
    return AppConfig(
        DATA_FILE=data_file,
        SEED_PLACEHOLDER_USER=False,
        DEFAULT_MATCH_LIMIT=20,
        DEFAULT_PAGE_SIZE=2,
        _env_file=None,
    )


@pytest.fixture
def services(config, repo, logger):
    return create_services(config=config, repo=repo, logger=logger)
