from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tradefin.shared.enums import GuaranteeStatus


class GuaranteeRequest(BaseModel):
    applicant_name: str = Field(min_length=1, max_length=200)
    beneficiary_name: str = Field(min_length=1, max_length=200)
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    currency: str = Field(min_length=3, max_length=3)
    guarantee_type: str = Field(min_length=1, max_length=50)
    validity_period: dt.date
    purpose: str | None = None
    issuing_bank: str | None = Field(default=None, max_length=200)


class GuaranteeUpdate(BaseModel):
    applicant_name: str = Field(min_length=1, max_length=200)
    beneficiary_name: str = Field(min_length=1, max_length=200)
    amount: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    currency: str = Field(min_length=3, max_length=3)
    guarantee_type: str = Field(min_length=1, max_length=50)
    validity_period: dt.date
    purpose: str | None = None


class CancelIn(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class GuaranteeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference_number: str
    applicant_name: str
    beneficiary_name: str
    amount: Decimal
    currency: str
    guarantee_type: str
    issue_date: dt.date | None
    validity_period: dt.date
    status: GuaranteeStatus
    purpose: str | None
    issuing_bank: str | None
    created_by: str | None
    created_at: dt.datetime
    updated_at: dt.datetime
    version: int


class GuaranteeDetailOut(GuaranteeOut):
    available_operations: list[str] = Field(default_factory=list)
    can_edit: bool = False
