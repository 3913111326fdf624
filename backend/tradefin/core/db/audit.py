from __future__ import annotations

from typing import Any

from pydantic_core import to_jsonable_python
from sqlalchemy import select
from sqlalchemy.orm import Session

from tradefin.core.db.models import AuditEvent
from tradefin.core.middleware.context import get_actor_id, get_actor_role, get_request_id
from tradefin.shared.utils import utcnow


def _snapshot(value: dict[str, Any] | None) -> dict[str, Any] | None:
    # Decimals serialize as strings so amounts and scores keep their exact value.
    if value is None:
        return None
    return to_jsonable_python(value, fallback=str)


def write_audit_event(
    db: Session,
    *,
    actor_id: str | None = None,
    actor_role: str | None = None,
    request_id: str | None = None,
    action: str,
    entity_type: str,
    entity_id: str | int,
    before: dict[str, Any] | None,
    after: dict[str, Any] | None,
) -> AuditEvent:
    """Stage a status-change record in the caller's transaction.

    Flushes but never commits: the event lands or rolls back together with the
    entity change it describes.
    """
    actor_id = actor_id or get_actor_id() or "unknown"
    now = utcnow()

    event = AuditEvent(
        actor_id=actor_id,
        actor_role=actor_role or get_actor_role(),
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before=_snapshot(before),
        after=_snapshot(after),
        request_id=request_id or get_request_id() or "unknown",
        created_at=now,
        updated_at=now,
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(event)
    db.flush()
    return event


def get_audit_log(
    db: Session,
    *,
    entity_id: str | int,
    entity_type: str | None = None,
    limit: int = 200,
) -> list[AuditEvent]:
    """Events for one entity, oldest first."""
    stmt = select(AuditEvent).where(AuditEvent.entity_id == str(entity_id))
    if entity_type:
        stmt = stmt.where(AuditEvent.entity_type == entity_type)
    stmt = stmt.order_by(AuditEvent.created_at.asc(), AuditEvent.id.asc()).limit(limit)
    return list(db.execute(stmt).scalars().all())
