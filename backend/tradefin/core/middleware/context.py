from __future__ import annotations

import structlog
from structlog import contextvars


def set_request_id(request_id: str) -> None:
    contextvars.bind_contextvars(request_id=request_id)


def set_actor(username: str, role: str) -> None:
    contextvars.bind_contextvars(actor_id=username, actor_role=role)


def clear_context() -> None:
    contextvars.clear_contextvars()


def get_request_id() -> str | None:
    v = contextvars.get_contextvars().get("request_id")
    return str(v) if v is not None else None


def get_actor_id() -> str | None:
    v = contextvars.get_contextvars().get("actor_id")
    return str(v) if v is not None else None


def get_actor_role() -> str | None:
    v = contextvars.get_contextvars().get("actor_role")
    return str(v) if v is not None else None


def get_logger(name: str | None = None):
    return structlog.get_logger(name)
