from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from tradefin.shared.enums import ComplianceStatus


class ComplianceGenerateIn(BaseModel):
    transaction_reference: str = Field(min_length=1, max_length=50)


class ComplianceUpdate(BaseModel):
    transaction_reference: str = Field(min_length=1, max_length=50)
    compliance_status: ComplianceStatus
    remarks: str | None = None
    report_date: dt.date | None = None


class ComplianceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_reference: str
    transaction_type: str | None
    compliance_status: ComplianceStatus
    documents_validated: bool
    risk_check_passed: bool
    party_check_passed: bool
    country_check_passed: bool
    remarks: str | None
    report_date: dt.date | None
    reviewed_by: str | None
    review_date: dt.date | None
    updated_at: dt.datetime


class ComplianceDashboardOut(BaseModel):
    compliant: int
    non_compliant: int
    pending: int
    under_review: int
    escalated: int
