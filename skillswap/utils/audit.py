"""
Directory Audit Trail.

Every successful directory mutation is written to the log as one
``AUDIT:`` line holding a validated JSON object, so the trail can be
grepped out of the regular structured log without a separate sink.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from skillswap.logger import StructuredLogger
from skillswap.models.enums import AuditAction

__all__ = ["ANONYMOUS_ACTOR", "AuditEvent", "log_audit_event"]

# Flat scalar values only; nested structures belong in explicit models.
DetailValue = Union[str, int, float, bool, None]

# Recorded when the caller did not supply an authenticated user id.
ANONYMOUS_ACTOR: str = "anonymous"


class AuditEvent(BaseModel):
    """One directory state change and who caused it."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    action: AuditAction
    entity_type: str = "User"
    entity_id: str
    actor_id: str = ANONYMOUS_ACTOR
    details: dict[str, DetailValue] = Field(default_factory=dict)

    def to_log_line(self) -> str:
        return "AUDIT: " + self.model_dump_json()


def log_audit_event(
    logger: StructuredLogger,
    action: AuditAction,
    entity_id: str,
    actor_id: Optional[str] = None,
    details: Optional[dict[str, DetailValue]] = None,
    entity_type: str = "User",
) -> AuditEvent:
    """Validate, log and return an audit event.

    Args:
        logger: Destination logger.
        action: The mutation performed.
        entity_id: ``user_id`` of the record that changed.
        actor_id: Authenticated caller, or ``None`` for anonymous calls.
        details: Flat context such as the skill added or the new average.
        entity_type: Kind of record affected.
    """
    event = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id or ANONYMOUS_ACTOR,
        details=details or {},
    )
    logger.info(event.to_log_line(), extra={"audit_action": event.action.value})
    return event
