from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tradefin.modules.guarantees.schemas import GuaranteeOut
from tradefin.modules.letters_of_credit.schemas import LetterOfCreditOut
from tradefin.shared.enums import RiskLevel


class RiskAnalyzeIn(BaseModel):
    transaction_reference: str = Field(min_length=1, max_length=50)
    transaction_type: str | None = Field(default=None, max_length=20)
    # Analyst override: recorded verbatim when both are supplied.
    risk_score: Decimal | None = Field(default=None, ge=0, le=100)
    risk_factors: dict[str, int] | None = None
    remarks: str | None = None


class RemarksIn(BaseModel):
    remarks: str | None = None


class RiskAssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_reference: str
    transaction_type: str | None
    risk_score: Decimal
    risk_level: RiskLevel
    risk_factors: dict | None
    recommendations: str | None
    remarks: str | None
    assessed_by: str
    assessment_date: dt.date
    created_at: dt.datetime


class RiskDashboardOut(BaseModel):
    total_assessments: int
    counts_by_level: dict[str, int]
    average_risk_score: Decimal | None
    lcs_sent_to_risk: int
    bgs_sent_to_risk: int
    recent_lcs_sent_to_risk: list[LetterOfCreditOut]
    recent_bgs_sent_to_risk: list[GuaranteeOut]
