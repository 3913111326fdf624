from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import require_staff
from tradefin.modules.guarantees.schemas import GuaranteeOut
from tradefin.modules.letters_of_credit.schemas import LetterOfCreditOut
from tradefin.modules.risk import service
from tradefin.modules.risk.schemas import RemarksIn, RiskAnalyzeIn, RiskAssessmentOut, RiskDashboardOut
from tradefin.shared.enums import RiskLevel
from tradefin.shared.exceptions import NotFound
from tradefin.shared.schemas import Page, page_limit, page_offset

router = APIRouter(prefix="/risk", tags=["risk"])


@router.get("", response_model=Page[RiskAssessmentOut])
def list_assessments(
    db: Session = Depends(get_db),
    _role_guard: Actor = Depends(require_staff),
    level: RiskLevel | None = Query(default=None),
    limit: int = Depends(page_limit),
    offset: int = Depends(page_offset),
) -> Page[RiskAssessmentOut]:
    items = service.list_assessments(db, level=level, limit=limit, offset=offset)
    return Page(items=items, limit=limit, offset=offset)


@router.post("/analyze", response_model=RiskAssessmentOut, status_code=status.HTTP_201_CREATED)
def analyze(
    payload: RiskAnalyzeIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_staff),
) -> RiskAssessmentOut:
    return service.analyze_risk(db, payload=payload, actor=actor)


@router.get("/dashboard", response_model=RiskDashboardOut)
def dashboard(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> RiskDashboardOut:
    counts = service.count_by_level(db)
    lcs = service.letters_in_queue(db)
    bgs = service.guarantees_in_queue(db)
    return RiskDashboardOut(
        total_assessments=sum(counts.values()),
        counts_by_level=counts,
        average_risk_score=service.average_score(db),
        lcs_sent_to_risk=len(lcs),
        bgs_sent_to_risk=len(bgs),
        recent_lcs_sent_to_risk=[LetterOfCreditOut.model_validate(lc) for lc in lcs[:5]],
        recent_bgs_sent_to_risk=[GuaranteeOut.model_validate(bg) for bg in bgs[:5]],
    )


@router.get("/high-risk", response_model=list[RiskAssessmentOut])
def high_risk(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> list[RiskAssessmentOut]:
    return service.list_high_risk(db)


@router.get("/queue", response_model=list[LetterOfCreditOut])
def letter_queue(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> list[LetterOfCreditOut]:
    return service.letters_in_queue(db)


@router.get("/queue-bg", response_model=list[GuaranteeOut])
def guarantee_queue(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> list[GuaranteeOut]:
    return service.guarantees_in_queue(db)


@router.get("/score/{reference}", response_model=RiskAssessmentOut)
def current_score(reference: str, db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> RiskAssessmentOut:
    assessment = service.current_for_reference(db, reference=reference)
    if assessment is None:
        raise NotFound("RiskAssessment", "transactionReference", reference)
    return assessment


@router.get("/history/{reference}", response_model=list[RiskAssessmentOut])
def history(reference: str, db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> list[RiskAssessmentOut]:
    return service.list_for_reference(db, reference=reference)


@router.get("/{assessment_id}", response_model=RiskAssessmentOut)
def get_assessment(assessment_id: int, db: Session = Depends(get_db), _role_guard: Actor = Depends(require_staff)) -> RiskAssessmentOut:
    return service.get_assessment(db, assessment_id=assessment_id)


@router.post("/{assessment_id}/remarks", response_model=RiskAssessmentOut)
def update_remarks(
    assessment_id: int,
    payload: RemarksIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_staff),
) -> RiskAssessmentOut:
    assessment = service.get_assessment(db, assessment_id=assessment_id)
    return service.update_remarks(db, assessment=assessment, remarks=payload.remarks, actor=actor)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assessment(assessment_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_staff)) -> None:
    service.delete_assessment(db, assessment=service.get_assessment(db, assessment_id=assessment_id), actor=actor)
