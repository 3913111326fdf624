from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class TimelineStepOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    description: str
    completed: bool
    current: bool
    date: dt.date | None = None


class TrackingOut(BaseModel):
    id: int
    reference: str
    transaction_type: str
    status: str
    applicant: str | None = None
    beneficiary: str | None = None
    amount: Decimal | None = None
    currency: str | None = None
    created_date: dt.date | None = None
    expiry_date: dt.date | None = None
    timeline: list[TimelineStepOut]
