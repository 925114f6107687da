"""
Unit tests for the directory models.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from skillswap.models import MatchCandidate, SkillKind, UserCreate, UserRecord, UserUpdate
from skillswap.utils.string_helpers import to_camel_case, to_snake_case


def test_record_requires_email():
    with pytest.raises(ValidationError):
        UserRecord(user_id="u1")
    with pytest.raises(ValidationError):
        UserRecord(user_id="u1", email="")


def test_record_defaults_optional_fields():
    record = UserRecord(user_id="u1", email="a@x.com", name=None, bio=None, location=None,
                        skills_offered=None, skills_wanted=None)
    assert record.name == ""
    assert record.bio == ""
    assert record.location == ""
    assert record.skills_offered == []
    assert record.skills_wanted == []
    assert record.rating == 0.0
    assert record.total_ratings == 0
    assert record.is_active is True


def test_skills_are_deduplicated_preserving_order_and_case():
    record = UserRecord(
        user_id="u1",
        email="a@x.com",
        skills_offered=["Go", "Python", "Go", "python"],
    )
    assert record.skills_offered == ["Go", "Python", "python"]


def test_camel_case_aliases_round_trip():
    payload = {
        "userId": "u1",
        "email": "a@x.com",
        "skillsOffered": ["Go"],
        "skillsWanted": ["Rust"],
        "totalRatings": 2,
        "rating": 3.5,
        "isActive": True,
        "createdAt": "2024-01-01T00:00:00.000Z",
        "updatedAt": "2024-01-02T00:00:00.000Z",
    }
    record = UserRecord.model_validate(payload)
    assert record.user_id == "u1"
    assert record.skills_wanted == ["Rust"]

    dumped = record.model_dump(mode="json", by_alias=True)
    assert dumped["userId"] == "u1"
    assert dumped["skillsOffered"] == ["Go"]
    assert dumped["totalRatings"] == 2
    assert "user_id" not in dumped


def test_updated_at_never_precedes_created_at():
    created = datetime(2024, 1, 2, tzinfo=timezone.utc)
    record = UserRecord(
        user_id="u1",
        email="a@x.com",
        created_at=created,
        updated_at=created - timedelta(days=1),
    )
    assert record.updated_at == created


def test_naive_timestamps_are_treated_as_utc():
    record = UserRecord(user_id="u1", email="a@x.com", created_at=datetime(2024, 1, 1))
    assert record.created_at.tzinfo is not None


def test_rating_is_zero_without_ratings():
    record = UserRecord(user_id="u1", email="a@x.com", rating=4.0, total_ratings=0)
    assert record.rating == 0.0


def test_rating_range_enforced():
    with pytest.raises(ValidationError):
        UserRecord(user_id="u1", email="a@x.com", rating=5.5, total_ratings=1)


def test_update_ignores_identity_fields():
    update = UserUpdate.model_validate(
        {"userId": "other", "createdAt": "2020-01-01T00:00:00Z", "rating": 5, "name": "New"}
    )
    assert update.changes() == {"name": "New"}


def test_update_none_clears_text_fields_only():
    update = UserUpdate(bio=None, skills_offered=None)
    assert update.changes() == {"bio": ""}


def test_create_accepts_camel_case_input():
    data = UserCreate.model_validate({"email": "a@x.com", "skillsWanted": ["Python", "Python"]})
    assert data.skills_wanted == ["Python"]


def test_match_candidate_score_is_matching_skill_count():
    record = UserRecord(user_id="u2", email="b@x.com", skills_offered=["Python", "Go"])
    candidate = MatchCandidate.from_record(record, ["Python"])
    assert candidate.relevance_score == 1
    assert candidate.model_dump(by_alias=True)["matchingSkills"] == ["Python"]
    assert candidate.user_id == "u2"


def test_skill_kind_field_names():
    assert SkillKind("offered").field_name == "skills_offered"
    assert SkillKind.WANTED.field_name == "skills_wanted"


@pytest.mark.parametrize(
    "snake, camel",
    [("user_id", "userId"), ("skills_offered", "skillsOffered"), ("email", "email"),
     ("profile_photo", "profilePhoto"), ("total_ratings", "totalRatings")],
)
def test_case_conversion(snake, camel):
    assert to_camel_case(snake) == camel
    assert to_snake_case(camel) == snake
