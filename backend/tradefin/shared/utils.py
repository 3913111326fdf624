from __future__ import annotations

import datetime as dt

from sqlalchemy import inspect


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def today() -> dt.date:
    return dt.date.today()


def sa_model_to_dict(obj) -> dict:
    """Column values of a mapped instance, unconverted.

    Audit snapshots are made JSON-safe by ``write_audit_event``; column values
    are immutable scalars, so a snapshot taken before a mutation stays intact.
    """
    state = inspect(obj)
    return {attr.key: getattr(obj, attr.key) for attr in state.mapper.column_attrs}


def normalize_identity(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip().lower()
    return cleaned or None
