from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tradefin.core.config import settings
from tradefin.core.db.audit import write_audit_event
from tradefin.core.middleware.context import get_logger
from tradefin.core.security.auth import Actor
from tradefin.modules.compliance import evaluator
from tradefin.modules.compliance.models import Compliance
from tradefin.modules.compliance.schemas import ComplianceUpdate
from tradefin.modules.documents import service as documents_service
from tradefin.modules.risk import service as risk_service
from tradefin.services.instruments import find_instrument, transaction_type_of
from tradefin.services.lifecycle import stamp_created, stamp_updated
from tradefin.shared.enums import ComplianceStatus
from tradefin.shared.exceptions import NotFound, ValidationError
from tradefin.shared.utils import today


log = get_logger(__name__)

ENTITY_TYPE = "compliance"

AUTOMATED_REVIEWER = "Automated Check"


def _snapshot(report: Compliance) -> dict:
    return {
        "transaction_reference": report.transaction_reference,
        "compliance_status": report.compliance_status,
        "remarks": report.remarks,
        "report_date": report.report_date,
        "reviewed_by": report.reviewed_by,
        "review_date": report.review_date,
    }


def _audit(db: Session, *, report: Compliance, actor: Actor, action: str, before: dict | None, after: dict | None) -> None:
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action=action,
        entity_type=ENTITY_TYPE,
        entity_id=report.id,
        before=before,
        after=after,
    )


def get_report(db: Session, *, report_id: int) -> Compliance:
    report = db.get(Compliance, report_id)
    if report is None:
        raise NotFound("Compliance", "id", report_id)
    return report


def find_by_reference(db: Session, *, reference: str) -> Compliance | None:
    return db.execute(select(Compliance).where(Compliance.transaction_reference == reference)).scalar_one_or_none()


def get_by_reference(db: Session, *, reference: str) -> Compliance:
    report = find_by_reference(db, reference=reference)
    if report is None:
        raise NotFound("Compliance", "transactionReference", reference)
    return report


def list_reports(
    db: Session,
    *,
    status: ComplianceStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Compliance]:
    stmt = select(Compliance)
    if status is not None:
        stmt = stmt.where(Compliance.compliance_status == status)
    stmt = stmt.order_by(Compliance.updated_at.desc(), Compliance.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.execute(
        select(Compliance.compliance_status, func.count(Compliance.id)).group_by(Compliance.compliance_status)
    ).all()
    out = {s.value: 0 for s in ComplianceStatus}
    for status, count in rows:
        out[ComplianceStatus(status).value] = int(count)
    return out


def generate_report(db: Session, *, reference: str, actor: Actor) -> Compliance:
    """Run the compliance battery for ``reference`` and upsert its single report row."""
    reference = reference.strip()
    if not reference:
        raise ValidationError("Transaction reference is required", {"transaction_reference": "required"})

    report = find_by_reference(db, reference=reference)
    before = _snapshot(report) if report is not None else None
    if report is None:
        report = Compliance(transaction_reference=reference, compliance_status=ComplianceStatus.PENDING)
        stamp_created(report, actor)
        db.add(report)
    else:
        stamp_updated(report, actor)

    now = today()
    report.report_date = now

    instrument = find_instrument(db, reference)
    if instrument is None:
        report.compliance_status = ComplianceStatus.NON_COMPLIANT
        report.remarks = evaluator.NOT_FOUND
        report.documents_validated = False
        report.risk_check_passed = False
        report.party_check_passed = False
        report.country_check_passed = False
    else:
        report.transaction_type = transaction_type_of(instrument).value
        documents = documents_service.list_by_trade_reference(db, trade_reference=reference)
        assessment = risk_service.current_for_reference(db, reference=reference)
        result = evaluator.evaluate(
            instrument,
            document_types=[d.document_type for d in documents],
            risk_score=assessment.risk_score if assessment is not None else None,
            risk_assessed=assessment is not None,
            restricted_countries=settings.restricted_countries,
            today=now,
        )
        report.party_check_passed = result.instrument_valid
        report.documents_validated = result.documents_validated
        report.risk_check_passed = result.risk_check_passed
        report.country_check_passed = result.country_check_passed
        report.compliance_status = ComplianceStatus.COMPLIANT if result.compliant else ComplianceStatus.NON_COMPLIANT
        report.remarks = result.remarks_text()

        # An officer's review stamp survives re-runs.
        if not (report.reviewed_by or "").strip():
            report.reviewed_by = AUTOMATED_REVIEWER
        if report.review_date is None:
            report.review_date = now

    db.flush()
    _audit(
        db,
        report=report,
        actor=actor,
        action="compliance.generated",
        before=before,
        after={
            **_snapshot(report),
            "documents_validated": report.documents_validated,
            "risk_check_passed": report.risk_check_passed,
            "party_check_passed": report.party_check_passed,
            "country_check_passed": report.country_check_passed,
        },
    )
    db.commit()
    db.refresh(report)
    log.info("compliance.generated", reference=reference, status=report.compliance_status.value)
    return report


def submit_regulatory_report(db: Session, *, report: Compliance, actor: Actor) -> Compliance:
    before = _snapshot(report)
    report.reviewed_by = actor.username
    report.review_date = today()
    stamp_updated(report, actor)
    _audit(db, report=report, actor=actor, action="compliance.submitted", before=before, after=_snapshot(report))
    db.commit()
    db.refresh(report)
    log.info("compliance.submitted", reference=report.transaction_reference, reviewed_by=actor.username)
    return report


def update_report(db: Session, *, report: Compliance, payload: ComplianceUpdate, actor: Actor) -> Compliance:
    reference = payload.transaction_reference.strip()
    if reference != report.transaction_reference:
        clash = find_by_reference(db, reference=reference)
        if clash is not None:
            raise ValidationError(
                "A compliance report already exists for this reference",
                {"transaction_reference": reference},
            )

    before = _snapshot(report)
    report.transaction_reference = reference
    report.compliance_status = payload.compliance_status
    report.remarks = payload.remarks
    report.report_date = payload.report_date
    stamp_updated(report, actor)
    _audit(db, report=report, actor=actor, action="compliance.updated", before=before, after=_snapshot(report))
    db.commit()
    db.refresh(report)
    return report


def delete_report(db: Session, *, report: Compliance, actor: Actor) -> None:
    _audit(db, report=report, actor=actor, action="compliance.deleted", before=_snapshot(report), after=None)
    db.delete(report)
    db.commit()
    log.info("compliance.deleted", reference=report.transaction_reference)
