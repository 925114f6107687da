"""
Match Candidate Model.

Request-scoped result of the matching engine.  Never persisted and never
cached: every matching query computes candidates afresh.
"""

from __future__ import annotations

from pydantic import Field

from skillswap.models.user import UserRecord


class MatchCandidate(UserRecord):
    """A candidate partner plus the skills connecting them to the requester."""

    matching_skills: list[str] = Field(default_factory=list)
    relevance_score: int = Field(default=0, ge=0)

    @classmethod
    def from_record(
        cls,
        record: UserRecord,
        matching_skills: list[str],
    ) -> "MatchCandidate":
        """Wrap *record*; the score is the number of connecting skills."""
        return cls(
            **record.model_dump(),
            matching_skills=matching_skills,
            relevance_score=len(matching_skills),
        )
