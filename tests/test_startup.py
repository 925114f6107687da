"""
Tests for configuration, backend selection, the schema DDL and the entry point.
"""

import json

import pytest

import main
from skillswap import config as config_module
from skillswap.config import AppConfig
from skillswap.errors import BackendUnavailableError
from skillswap.models import StorageBackend
from skillswap.repositories import (
    FileUserRepository,
    SupabaseUserRepository,
    create_user_repository,
)
from skillswap.schema import RPC_FUNCTIONS, SCHEMA_SQL, render_schema


@pytest.fixture
def fresh_config(monkeypatch, tmp_path):
    """Point the cached config at a temporary data file and log file."""
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "users.json"))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "skillswap.log"))
    monkeypatch.setattr(config_module, "_config_instance", None)
    return tmp_path


def test_config_defaults():
    cfg = AppConfig(_env_file=None)
    assert cfg.STORAGE_BACKEND is StorageBackend.FILE
    assert cfg.DEFAULT_MATCH_LIMIT == 20
    assert cfg.USERS_TABLE == "users"


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "supabase")
    monkeypatch.setenv("DEFAULT_PAGE_SIZE", "7")
    cfg = AppConfig(_env_file=None)
    assert cfg.STORAGE_BACKEND is StorageBackend.SUPABASE
    assert cfg.DEFAULT_PAGE_SIZE == 7


def test_get_config_is_cached(fresh_config):
    assert config_module.get_config() is config_module.get_config()


def test_file_backend_selected(config, logger):
    repo = create_user_repository(config, logger)
    try:
        assert isinstance(repo, FileUserRepository)
    finally:
        repo.close()


def test_supabase_backend_without_credentials_fails_on_use(logger):
    cfg = AppConfig(STORAGE_BACKEND="supabase", _env_file=None)
    repo = create_user_repository(cfg, logger)
    assert isinstance(repo, SupabaseUserRepository)
    with pytest.raises(BackendUnavailableError):
        repo.count_active()


def test_schema_declares_indexes_and_functions():
    ddl = render_schema("members")
    assert "CREATE TABLE IF NOT EXISTS members" in ddl
    assert "CREATE UNIQUE INDEX IF NOT EXISTS members_email_active_key" in ddl
    assert "WHERE is_active" in ddl
    for function_name in RPC_FUNCTIONS.values():
        assert f"FUNCTION {function_name}(" in ddl
    assert SCHEMA_SQL == render_schema("users")


def test_main_prints_schema(fresh_config, capsys):
    assert main.main(["--print-schema"]) == 0
    assert "users_email_active_key" in capsys.readouterr().out


def test_main_seeds_file_backend_and_exits_cleanly(fresh_config):
    assert main.main([]) == 0

    data = json.loads((fresh_config / "users.json").read_text(encoding="utf-8"))
    assert [u["email"] for u in data] == ["dev@example.com"]
    # The lock is released on shutdown.
    assert not (fresh_config / "users.json.lock").exists()


def test_main_reports_busy_backend(fresh_config):
    (fresh_config / "users.json.lock").write_text("1", encoding="utf-8")
    assert main.main([]) == 1
