from __future__ import annotations

from pydantic import BaseModel, Field

from tradefin.modules.documents.schemas import TradeDocumentOut
from tradefin.modules.guarantees.schemas import GuaranteeOut
from tradefin.modules.letters_of_credit.schemas import LetterOfCreditOut


class StaffDashboardOut(BaseModel):
    total_letters_of_credit: int
    total_guarantees: int
    total_documents: int
    pending_letters_of_credit: int
    pending_guarantees: int
    pending_documents: int
    letters_sent_to_risk: int
    guarantees_sent_to_risk: int
    lc_status_counts: dict[str, int]
    guarantee_status_counts: dict[str, int]
    document_status_counts: dict[str, int]
    risk_level_counts: dict[str, int]
    compliance_status_counts: dict[str, int]
    recent_letters_of_credit: list[LetterOfCreditOut] = Field(default_factory=list)
    recent_guarantees: list[GuaranteeOut] = Field(default_factory=list)
    recent_documents: list[TradeDocumentOut] = Field(default_factory=list)


class CustomerDashboardOut(BaseModel):
    my_letters_of_credit: int
    my_guarantees: int
    accessible_documents: int
    beneficiary_letters_of_credit: int
    beneficiary_guarantees: int
    recent_letters_of_credit: list[LetterOfCreditOut] = Field(default_factory=list)
    recent_guarantees: list[GuaranteeOut] = Field(default_factory=list)
