"""
Tests for the matching engine, run against both backends.
"""

import uuid

import pytest

from skillswap.errors import NotFoundError
from skillswap.models import UserCreate, UserRecord
from skillswap.services.matching import score_candidates


def _create(repo, email, offered=(), wanted=()):
    return repo.create(
        UserCreate(email=email, skills_offered=list(offered), skills_wanted=list(wanted))
    )


@pytest.fixture
def matching(services):
    return services["matching_service"]


def test_single_match_end_to_end(repo, matching):
    u1 = _create(repo, "u1@x.com", wanted=["Python"])
    u2 = _create(repo, "u2@x.com", offered=["Python", "Go"])

    matches = matching.find_potential_matches(u1.user_id, 10)

    assert len(matches) == 1
    assert matches[0].user_id == u2.user_id
    assert matches[0].matching_skills == ["Python"]
    assert matches[0].relevance_score == 1


def test_matching_is_one_directional(repo, matching):
    u1 = _create(repo, "u1@x.com", wanted=["Python"])
    u2 = _create(repo, "u2@x.com", offered=["Python", "Go"])

    # u2 wants nothing, so nobody is a match for u2, even though u1 exists.
    assert matching.find_potential_matches(u2.user_id, 10) == []
    assert [m.user_id for m in matching.find_potential_matches(u1.user_id, 10)] == [u2.user_id]


def test_offered_skills_of_requester_do_not_count(repo, matching):
    me = _create(repo, "me@x.com", offered=["Rust"], wanted=["Go"])
    _create(repo, "wants-rust@x.com", wanted=["Rust"])
    assert matching.find_potential_matches(me.user_id, 10) == []


def test_ranking_by_score_then_user_id(repo, matching):
    me = _create(repo, "me@x.com", wanted=["Python", "Go", "Rust"])
    two_a = _create(repo, "a@x.com", offered=["Go", "Python"])
    three = _create(repo, "b@x.com", offered=["Rust", "Go", "Python", "Cobol"])
    two_b = _create(repo, "c@x.com", offered=["Rust", "Python"])
    one = _create(repo, "d@x.com", offered=["Go"])

    matches = matching.find_potential_matches(me.user_id, 10)

    assert [m.relevance_score for m in matches] == [3, 2, 2, 1]
    assert matches[0].user_id == three.user_id
    assert matches[0].matching_skills == ["Rust", "Go", "Python"]
    assert [m.user_id for m in matches[1:3]] == sorted([two_a.user_id, two_b.user_id])
    assert matches[3].user_id == one.user_id
    for match in matches:
        assert match.relevance_score == len(match.matching_skills)
        assert set(match.matching_skills) <= set(me.skills_wanted)
        assert match.user_id != me.user_id


def test_limit_truncates_and_non_positive_limit_is_empty(repo, matching):
    me = _create(repo, "me@x.com", wanted=["Go"])
    for i in range(4):
        _create(repo, f"g{i}@x.com", offered=["Go"])

    assert len(matching.find_potential_matches(me.user_id, 2)) == 2
    assert matching.find_potential_matches(me.user_id, 0) == []
    assert matching.find_potential_matches(me.user_id, -3) == []
    assert len(matching.find_potential_matches(me.user_id)) == 4


def test_requester_without_wanted_skills_gets_nothing(repo, matching):
    me = _create(repo, "me@x.com", offered=["Go"])
    _create(repo, "other@x.com", offered=["Go"])
    assert matching.find_potential_matches(me.user_id, 10) == []


def test_deleted_users_are_not_candidates(repo, matching):
    me = _create(repo, "me@x.com", wanted=["Go"])
    gone = _create(repo, "gone@x.com", offered=["Go"])
    repo.delete(gone.user_id)
    assert matching.find_potential_matches(me.user_id, 10) == []


def test_unknown_requester_raises(matching):
    with pytest.raises(NotFoundError):
        matching.find_potential_matches(str(uuid.uuid4()), 10)


def test_score_candidates_filters_self_and_inactive():
    requester = UserRecord(user_id="r", email="r@x.com", skills_wanted=["Go"])
    candidates = [
        UserRecord(user_id="r", email="r@x.com", skills_offered=["Go"]),
        UserRecord(user_id="b", email="b@x.com", skills_offered=["Go"], is_active=False),
        UserRecord(user_id="c", email="c@x.com", skills_offered=["Rust"]),
        UserRecord(user_id="a", email="a@x.com", skills_offered=["Go"]),
    ]

    matches = score_candidates(requester, candidates, 10)

    assert [m.user_id for m in matches] == ["a"]
