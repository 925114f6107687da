"""
Matching Engine.

Ranks potential skill-swap partners for a user.  The algorithm is a
deliberately simple baseline:

1. Candidates are active users who **offer** at least one skill the
   requester **wants** (``list_by_skill``, OR across skills).
2. ``matching_skills`` is the candidate's offered skills that the
   requester wants, in the candidate's order.
3. ``relevance_score`` is ``len(matching_skills)``.
4. Sort by score descending, then ``user_id`` ascending; truncate.

Matching is one-directional: what the requester offers plays no part.
There is no weighting by rating, recency or location.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from skillswap.logger import StructuredLogger
from skillswap.models.match import MatchCandidate
from skillswap.models.user import UserRecord
from skillswap.repositories.base_repository import UserRepository
from skillswap.services.base_service import BaseService


def score_candidates(
    requester: UserRecord,
    candidates: Iterable[UserRecord],
    limit: int,
) -> list[MatchCandidate]:
    """Score, rank and truncate *candidates* for *requester*.

    Candidates that turn out to share no wanted skill, the requester
    themselves, and inactive records are dropped.
    """
    if limit <= 0:
        return []
    wanted = set(requester.skills_wanted)
    if not wanted:
        return []

    scored: list[MatchCandidate] = []
    for candidate in candidates:
        if candidate.user_id == requester.user_id or not candidate.is_active:
            continue
        matching = [skill for skill in candidate.skills_offered if skill in wanted]
        if matching:
            scored.append(MatchCandidate.from_record(candidate, matching))

    scored.sort(key=lambda m: (-m.relevance_score, m.user_id))
    return scored[:limit]


class MatchingService(BaseService):
    """Computes ranked match candidates through the repository's skill index."""

    def __init__(
        self,
        repo: UserRepository,
        logger: StructuredLogger,
        default_limit: int = 20,
    ) -> None:
        super().__init__(repo, logger)
        self._default_limit = default_limit

    def find_potential_matches(
        self,
        user_id: str,
        limit: Optional[int] = None,
    ) -> list[MatchCandidate]:
        """Return up to *limit* ranked candidates for *user_id*.

        Raises:
            NotFoundError: *user_id* does not resolve to an active record.
        """
        resolved_limit = self._default_limit if limit is None else limit
        requester = self._require_user(user_id)
        if not requester.skills_wanted or resolved_limit <= 0:
            return []

        candidates = self._repo.list_by_skill(
            requester.skills_wanted, exclude_user_id=user_id,
        )
        matches = score_candidates(requester, candidates, resolved_limit)
        self._logger.info(
            "Matching for %s: %d candidates, %d returned.",
            user_id,
            len(candidates),
            len(matches),
        )
        return matches
