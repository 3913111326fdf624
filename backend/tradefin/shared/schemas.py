from __future__ import annotations

import datetime as dt
from typing import Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel, ConfigDict


T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    limit: int
    offset: int


class AuditEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: dt.datetime
    actor_id: str
    actor_role: str | None
    action: str
    entity_type: str
    entity_id: str
    before: dict | None
    after: dict | None
    request_id: str


def page_limit(limit: int = Query(50, ge=1, le=200)) -> int:
    return limit


def page_offset(offset: int = Query(0, ge=0, le=10_000)) -> int:
    return offset
