from __future__ import annotations

from typing import Any

from tradefin.core.security.auth import Actor
from tradefin.shared.utils import utcnow


def append_reason(text: str | None, label: str, reason: str) -> str:
    """Append ``" | <label>: <reason>"`` to a free-text reason trail."""
    return f"{text or ''} | {label}: {reason}"


def stamp_created(entity: Any, actor: Actor) -> None:
    now = utcnow()
    entity.created_at = now
    entity.updated_at = now
    entity.created_by = actor.username
    entity.updated_by = actor.username


def stamp_updated(entity: Any, actor: Actor) -> None:
    entity.updated_at = utcnow()
    entity.updated_by = actor.username
