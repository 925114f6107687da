"""
Tests specific to the Supabase backend: which calls are issued, soft
deletion, and how client failures are translated.
"""

import uuid

import pytest
from postgrest.exceptions import APIError

from skillswap.database import DatabaseManager
from skillswap.errors import AlreadyExistsError, BackendUnavailableError, NotFoundError
from skillswap.models import UserCreate
from skillswap.repositories.supabase_user_repository import SupabaseUserRepository
from skillswap.schema import RPC_FUNCTIONS


def test_rate_and_skills_use_server_side_functions(supabase_repo, fake_client):
    user = supabase_repo.create(UserCreate(email="a@x.com"))
    fake_client.calls.clear()

    supabase_repo.rate(user.user_id, 5)
    supabase_repo.add_skill(user.user_id, "Go", "offered")
    supabase_repo.remove_skill(user.user_id, "Go", "offered")

    assert fake_client.calls == [
        ("rpc", RPC_FUNCTIONS["rate"]),
        ("rpc", RPC_FUNCTIONS["add_skill"]),
        ("rpc", RPC_FUNCTIONS["remove_skill"]),
    ]


def test_create_does_not_read_before_insert(supabase_repo, fake_client):
    supabase_repo.create(UserCreate(email="a@x.com"))
    assert fake_client.calls == [("insert", "users")]


def test_skill_labels_with_punctuation_match(supabase_repo):
    supabase_repo.create(UserCreate(email="a@x.com", skills_offered=["Node.js", "C++"]))
    found = supabase_repo.list_by_skill(["C++"])
    assert [u.email for u in found] == ["a@x.com"]


def test_delete_is_soft(supabase_repo, fake_client):
    user = supabase_repo.create(UserCreate(email="a@x.com"))

    supabase_repo.delete(user.user_id)

    row = fake_client.rows[user.user_id]
    assert row["is_active"] is False
    assert supabase_repo.get_by_id(user.user_id) is None
    assert supabase_repo.count_active() == 0


def test_unique_violation_maps_to_already_exists(supabase_repo, fake_client):
    fake_client.fail_with = APIError({"code": "23505", "message": "duplicate key", "details": "", "hint": ""})
    with pytest.raises(AlreadyExistsError) as excinfo:
        supabase_repo.create(UserCreate(email="a@x.com"))
    assert excinfo.value.email == "a@x.com"


def test_other_api_errors_are_backend_faults(supabase_repo, fake_client):
    fake_client.fail_with = APIError({"code": "42P01", "message": "relation does not exist", "details": "", "hint": ""})
    with pytest.raises(BackendUnavailableError):
        supabase_repo.create(UserCreate(email="a@x.com"))
    with pytest.raises(BackendUnavailableError):
        supabase_repo.get_by_email("a@x.com")


def test_network_failure_is_backend_fault(supabase_repo, fake_client):
    fake_client.fail_with = ConnectionError("connection refused")
    with pytest.raises(BackendUnavailableError) as excinfo:
        supabase_repo.list_all(10)
    assert isinstance(excinfo.value.original_error, ConnectionError)


def test_unique_violation_without_email_is_backend_fault(supabase_repo, fake_client):
    user = supabase_repo.create(UserCreate(email="a@x.com"))
    fake_client.fail_with = APIError({"code": "23505", "message": "duplicate key", "details": "", "hint": ""})
    with pytest.raises(BackendUnavailableError):
        supabase_repo.delete(user.user_id)


def test_non_uuid_ids_never_reach_the_server(supabase_repo, fake_client):
    with pytest.raises(NotFoundError):
        supabase_repo.rate("dev-user-123", 4)
    with pytest.raises(NotFoundError):
        supabase_repo.delete("dev-user-123")
    assert supabase_repo.get_by_id("dev-user-123") is None
    assert fake_client.calls == []


def test_count_active_requests_exact_count(supabase_repo):
    for i in range(3):
        supabase_repo.create(UserCreate(email=f"u{i}@x.com"))
    assert supabase_repo.count_active() == 3


def test_missing_client_is_backend_unavailable(logger):
    db = DatabaseManager(supabase_url="", supabase_key="", logger=logger)
    repo = SupabaseUserRepository(db=db, logger=logger)

    assert db.is_online is False
    with pytest.raises(BackendUnavailableError):
        repo.get_by_id(str(uuid.uuid4()))
    with pytest.raises(BackendUnavailableError):
        repo.create(UserCreate(email="a@x.com"))


def test_close_releases_client(supabase_repo):
    supabase_repo.close()
    with pytest.raises(BackendUnavailableError):
        supabase_repo.count_active()
