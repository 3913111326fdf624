from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tradefin.core.db.audit import write_audit_event
from tradefin.core.middleware.context import get_logger
from tradefin.core.security.auth import Actor
from tradefin.modules.guarantees import service as bg_service
from tradefin.modules.guarantees.models import BankGuarantee
from tradefin.modules.letters_of_credit import service as lc_service
from tradefin.modules.letters_of_credit.models import LetterOfCredit
from tradefin.modules.risk import scoring
from tradefin.modules.risk.models import RiskAssessment
from tradefin.modules.risk.schemas import RiskAnalyzeIn
from tradefin.services.instruments import find_instrument
from tradefin.services.lifecycle import stamp_created, stamp_updated
from tradefin.shared.enums import GuaranteeStatus, LCStatus, RiskLevel, TransactionType
from tradefin.shared.exceptions import NotFound, ValidationError
from tradefin.shared.utils import today


log = get_logger(__name__)

ENTITY_TYPE = "risk_assessment"


def _route(reference: str, transaction_type: str | None) -> TransactionType | None:
    """Explicit type wins; otherwise fall back to the reference prefix."""
    t = (transaction_type or "").strip().upper()
    if t == TransactionType.LC.value or reference.startswith(TransactionType.LC.value):
        return TransactionType.LC
    if t == TransactionType.BG.value or reference.startswith(TransactionType.BG.value):
        return TransactionType.BG
    return None


def compute(db: Session, *, payload: RiskAnalyzeIn) -> scoring.RiskResult:
    if payload.risk_factors and payload.risk_score is not None:
        return scoring.manual_result(payload.risk_score, payload.risk_factors, payload.remarks)

    reference = payload.transaction_reference.strip()
    kind = _route(reference, payload.transaction_type)
    if kind == TransactionType.LC:
        lc = lc_service.find_by_reference(db, reference=reference)
        return scoring.score_letter_of_credit(lc, today=today()) if lc else scoring.not_found_result()
    if kind == TransactionType.BG:
        bg = bg_service.find_by_reference(db, reference=reference)
        return scoring.score_guarantee(bg, today=today()) if bg else scoring.not_found_result()
    return scoring.unknown_type_result()


def _return_instrument_from_risk(db: Session, *, reference: str, actor: Actor) -> bool:
    # Resolved by reference alone: a declared transaction type never hides the instrument.
    instrument = find_instrument(db, reference)
    if isinstance(instrument, LetterOfCredit):
        return lc_service.return_from_risk(db, lc=instrument, actor=actor)
    if isinstance(instrument, BankGuarantee):
        return bg_service.return_from_risk(db, bg=instrument, actor=actor)
    return False


def analyze_risk(db: Session, *, payload: RiskAnalyzeIn, actor: Actor) -> RiskAssessment:
    reference = payload.transaction_reference.strip()
    if not reference:
        raise ValidationError("Transaction reference is required", {"transaction_reference": "required"})
    kind = _route(reference, payload.transaction_type)
    result = compute(db, payload=payload)

    assessment = RiskAssessment(
        transaction_reference=reference,
        transaction_type=(payload.transaction_type or (kind.value if kind else None)),
        risk_score=result.score,
        risk_level=scoring.risk_level_for(result.score),
        risk_factors=result.factors,
        recommendations=result.recommendations,
        remarks=payload.remarks,
        assessed_by=actor.username,
        assessment_date=today(),
    )
    stamp_created(assessment, actor)
    db.add(assessment)
    db.flush()

    # Assessment and status reversion commit together.
    returned = _return_instrument_from_risk(db, reference=reference, actor=actor)

    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action="risk.assessed",
        entity_type=ENTITY_TYPE,
        entity_id=assessment.id,
        before=None,
        after={
            "transaction_reference": reference,
            "risk_score": assessment.risk_score,
            "risk_level": assessment.risk_level,
            "instrument_returned_from_risk": returned,
        },
    )
    db.commit()
    db.refresh(assessment)
    log.info(
        "risk.assessed",
        reference=reference,
        score=str(assessment.risk_score),
        level=assessment.risk_level.value,
        returned_from_risk=returned,
    )
    return assessment


def get_assessment(db: Session, *, assessment_id: int) -> RiskAssessment:
    assessment = db.get(RiskAssessment, assessment_id)
    if assessment is None:
        raise NotFound("RiskAssessment", "id", assessment_id)
    return assessment


def current_for_reference(db: Session, *, reference: str) -> RiskAssessment | None:
    stmt = (
        select(RiskAssessment)
        .where(RiskAssessment.transaction_reference == reference)
        .order_by(RiskAssessment.assessment_date.desc(), RiskAssessment.id.desc())
        .limit(1)
    )
    return db.execute(stmt).scalar_one_or_none()


def list_for_reference(db: Session, *, reference: str) -> list[RiskAssessment]:
    stmt = (
        select(RiskAssessment)
        .where(RiskAssessment.transaction_reference == reference)
        .order_by(RiskAssessment.assessment_date.desc(), RiskAssessment.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_assessments(
    db: Session,
    *,
    level: RiskLevel | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[RiskAssessment]:
    stmt = select(RiskAssessment)
    if level is not None:
        stmt = stmt.where(RiskAssessment.risk_level == level)
    stmt = stmt.order_by(RiskAssessment.created_at.desc(), RiskAssessment.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_high_risk(db: Session) -> list[RiskAssessment]:
    stmt = (
        select(RiskAssessment)
        .where(RiskAssessment.risk_level.in_([RiskLevel.HIGH, RiskLevel.CRITICAL]))
        .order_by(RiskAssessment.created_at.desc(), RiskAssessment.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def count_by_level(db: Session) -> dict[str, int]:
    rows = db.execute(select(RiskAssessment.risk_level, func.count(RiskAssessment.id)).group_by(RiskAssessment.risk_level)).all()
    out = {level.value: 0 for level in RiskLevel}
    for level, count in rows:
        out[RiskLevel(level).value] = int(count)
    return out


def average_score(db: Session) -> Decimal | None:
    value = db.execute(select(func.avg(RiskAssessment.risk_score))).scalar_one_or_none()
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"))


def letters_in_queue(db: Session) -> list[LetterOfCredit]:
    return lc_service.list_letters(db, status=LCStatus.SENT_TO_RISK, limit=200)


def guarantees_in_queue(db: Session) -> list[BankGuarantee]:
    return bg_service.list_by_status(db, status=GuaranteeStatus.SENT_TO_RISK)


def update_remarks(db: Session, *, assessment: RiskAssessment, remarks: str | None, actor: Actor) -> RiskAssessment:
    before = {"remarks": assessment.remarks}
    assessment.remarks = remarks
    stamp_updated(assessment, actor)
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action="risk.remarks_updated",
        entity_type=ENTITY_TYPE,
        entity_id=assessment.id,
        before=before,
        after={"remarks": remarks},
    )
    db.commit()
    db.refresh(assessment)
    return assessment


def delete_assessment(db: Session, *, assessment: RiskAssessment, actor: Actor) -> None:
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action="risk.deleted",
        entity_type=ENTITY_TYPE,
        entity_id=assessment.id,
        before={"transaction_reference": assessment.transaction_reference, "risk_score": assessment.risk_score},
        after=None,
    )
    db.delete(assessment)
    db.commit()
