"""Shared utility functions and models for the SkillSwap directory core.

Convenience re-exports so that consumers can import directly from
``skillswap.utils`` while full absolute imports remain supported.
"""

from skillswap.utils.audit import ANONYMOUS_ACTOR, AuditEvent, log_audit_event
from skillswap.utils.string_helpers import to_camel_case, to_snake_case

__all__ = [
    "ANONYMOUS_ACTOR",
    "AuditEvent",
    "log_audit_event",
    "to_camel_case",
    "to_snake_case",
]
