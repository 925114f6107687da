"""
String Helpers: Naming Convention Converter.

Python attributes and database columns are snake_case; the persisted JSON
document and the outbound payloads are camelCase.  Every key conversion
between the two flows through here.
"""

from __future__ import annotations

import re

__all__ = [
    "to_camel_case",
    "to_snake_case",
]

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# "HTTPStatus" -> "HTTP_Status"
_RE_UPPER_RUN = re.compile(r"([A-Z]+)([A-Z][a-z])")

# "userId" -> "user_Id"
_RE_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

_RE_MULTI_UNDERSCORE = re.compile(r"_+")


def to_snake_case(name: str) -> str:
    """Convert a camelCase or PascalCase string to snake_case.

    ::

        userId        -> user_id
        skillsOffered -> skills_offered
        totalRatings  -> total_ratings
        isActive      -> is_active
    """
    s1 = _RE_UPPER_RUN.sub(r"\1_\2", name)
    s2 = _RE_CAMEL_BOUNDARY.sub(r"\1_\2", s1)
    s3 = _RE_MULTI_UNDERSCORE.sub("_", s2)
    return s3.lower()


def to_camel_case(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Used as the pydantic alias generator for directory models::

        user_id        -> userId
        skills_wanted  -> skillsWanted
        profile_photo  -> profilePhoto
        email          -> email
    """
    head, *tail = to_snake_case(name).split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)
