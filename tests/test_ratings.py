"""
Tests for the running-average arithmetic and the rating service.
"""

import pytest

from skillswap.errors import InvalidRatingError
from skillswap.models import AuditAction, UserCreate
from skillswap.repositories.base_repository import compute_running_average
from skillswap.services import ratings as ratings_module
from skillswap.utils.audit import ANONYMOUS_ACTOR, log_audit_event


@pytest.mark.parametrize(
    "current, total, new_rating, expected",
    [
        (0.0, 0, 4, 4.0),
        (4.0, 1, 2, 3.0),
        (4.5, 2, 4, 4.3),
        (4.8, 25, 1, 4.7),
        # Half-up, never banker's rounding: (1.0 + 1.5) / 2 = 1.25
        (1.0, 1, 1.5, 1.3),
    ],
)
def test_compute_running_average(current, total, new_rating, expected):
    assert compute_running_average(current, total, new_rating) == expected


def test_rate_user_emits_audit_event(repo, services, monkeypatch):
    events = []
    real = ratings_module.log_audit_event

    def _capture(**kwargs):
        events.append(real(**kwargs))
        return events[-1]

    monkeypatch.setattr(ratings_module, "log_audit_event", _capture)
    user = repo.create(UserCreate(email="a@x.com"))
    rater = repo.create(UserCreate(email="b@x.com"))

    updated = services["rating_service"].rate_user(user.user_id, 4, rated_by=rater.user_id)

    assert updated.rating == 4.0
    assert len(events) == 1
    event = events[0]
    assert event.action == "RATE_USER"
    assert event.entity_id == user.user_id
    assert event.actor_id == rater.user_id
    assert event.details == {"rating": 4.0, "new_average": 4.0, "total_ratings": 1}


def test_invalid_rating_emits_no_audit_event(repo, services, monkeypatch):
    events = []
    monkeypatch.setattr(ratings_module, "log_audit_event", lambda **kw: events.append(kw))
    user = repo.create(UserCreate(email="a@x.com"))

    with pytest.raises(InvalidRatingError):
        services["rating_service"].rate_user(user.user_id, 6)
    assert events == []


def test_audit_event_defaults_to_anonymous_actor(logger):
    event = log_audit_event(logger=logger, action=AuditAction.DELETE_USER, entity_id="u1")
    assert event.actor_id == ANONYMOUS_ACTOR
    assert event.entity_type == "User"
    assert event.details == {}
    assert event.to_log_line().startswith("AUDIT: {")
