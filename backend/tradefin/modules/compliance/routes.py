from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import require_officer
from tradefin.modules.compliance import service
from tradefin.modules.compliance.schemas import (
    ComplianceDashboardOut,
    ComplianceGenerateIn,
    ComplianceOut,
    ComplianceUpdate,
)
from tradefin.shared.enums import ComplianceStatus
from tradefin.shared.schemas import Page, page_limit, page_offset

router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.get("", response_model=Page[ComplianceOut])
def list_reports(
    db: Session = Depends(get_db),
    _role_guard: Actor = Depends(require_officer),
    status_filter: ComplianceStatus | None = Query(default=None, alias="status"),
    limit: int = Depends(page_limit),
    offset: int = Depends(page_offset),
) -> Page[ComplianceOut]:
    items = service.list_reports(db, status=status_filter, limit=limit, offset=offset)
    return Page(items=items, limit=limit, offset=offset)


@router.get("/dashboard", response_model=ComplianceDashboardOut)
def dashboard(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_officer)) -> ComplianceDashboardOut:
    counts = service.count_by_status(db)
    return ComplianceDashboardOut(
        compliant=counts[ComplianceStatus.COMPLIANT.value],
        non_compliant=counts[ComplianceStatus.NON_COMPLIANT.value],
        pending=counts[ComplianceStatus.PENDING.value],
        under_review=counts[ComplianceStatus.UNDER_REVIEW.value],
        escalated=counts[ComplianceStatus.ESCALATED.value],
    )


@router.post("/generate", response_model=ComplianceOut)
def generate(
    payload: ComplianceGenerateIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_officer),
) -> ComplianceOut:
    return service.generate_report(db, reference=payload.transaction_reference, actor=actor)


@router.get("/reference/{reference}", response_model=ComplianceOut)
def by_reference(reference: str, db: Session = Depends(get_db), _role_guard: Actor = Depends(require_officer)) -> ComplianceOut:
    return service.get_by_reference(db, reference=reference)


@router.get("/{report_id}", response_model=ComplianceOut)
def get_report(report_id: int, db: Session = Depends(get_db), _role_guard: Actor = Depends(require_officer)) -> ComplianceOut:
    return service.get_report(db, report_id=report_id)


@router.post("/{report_id}/submit", response_model=ComplianceOut)
def submit(report_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> ComplianceOut:
    report = service.get_report(db, report_id=report_id)
    return service.submit_regulatory_report(db, report=report, actor=actor)


@router.put("/{report_id}", response_model=ComplianceOut)
def update(
    report_id: int,
    payload: ComplianceUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_officer),
) -> ComplianceOut:
    report = service.get_report(db, report_id=report_id)
    return service.update_report(db, report=report, payload=payload, actor=actor)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete(report_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> None:
    service.delete_report(db, report=service.get_report(db, report_id=report_id), actor=actor)
