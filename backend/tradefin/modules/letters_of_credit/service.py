from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tradefin.core.db.audit import get_audit_log, write_audit_event
from tradefin.core.db.models import AuditEvent
from tradefin.core.middleware.context import get_logger
from tradefin.core.security.access import identities_of
from tradefin.core.security.auth import Actor
from tradefin.modules.letters_of_credit import workflow
from tradefin.modules.letters_of_credit.models import LetterOfCredit
from tradefin.modules.letters_of_credit.schemas import LetterOfCreditAmend, LetterOfCreditCreate
from tradefin.services.lifecycle import append_reason, stamp_created, stamp_updated
from tradefin.shared.enums import LCStatus
from tradefin.shared.exceptions import NotFound, ValidationError
from tradefin.shared.references import LC_PREFIX, new_reference
from tradefin.shared.utils import sa_model_to_dict, today


log = get_logger(__name__)

ENTITY_TYPE = "letter_of_credit"
DEFAULT_REJECTION_REASON = "Rejected by officer"


def _ensure_future_expiry(expiry_date) -> None:
    if expiry_date <= today():
        raise ValidationError(
            "Expiry date must be in the future",
            {"expiry_date": "must be after today"},
        )


def _audit(db: Session, *, lc: LetterOfCredit, actor: Actor, action: str, before: dict | None, after: dict | None) -> None:
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action=action,
        entity_type=ENTITY_TYPE,
        entity_id=lc.id,
        before=before,
        after=after,
    )


def get_letter(db: Session, *, lc_id: int) -> LetterOfCredit:
    lc = db.get(LetterOfCredit, lc_id)
    if lc is None:
        raise NotFound("LetterOfCredit", "id", lc_id)
    return lc


def find_by_reference(db: Session, *, reference: str) -> LetterOfCredit | None:
    return db.execute(select(LetterOfCredit).where(LetterOfCredit.reference_number == reference)).scalar_one_or_none()


def get_by_reference(db: Session, *, reference: str) -> LetterOfCredit:
    lc = find_by_reference(db, reference=reference)
    if lc is None:
        raise NotFound("LetterOfCredit", "referenceNumber", reference)
    return lc


def list_letters(db: Session, *, status: LCStatus | None = None, limit: int = 50, offset: int = 0) -> list[LetterOfCredit]:
    stmt = select(LetterOfCredit)
    if status is not None:
        stmt = stmt.where(LetterOfCredit.status == status)
    stmt = stmt.order_by(LetterOfCredit.created_at.desc(), LetterOfCredit.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_by_created_by(db: Session, *, username: str) -> list[LetterOfCredit]:
    stmt = select(LetterOfCredit).where(LetterOfCredit.created_by == username).order_by(LetterOfCredit.id.desc())
    return list(db.execute(stmt).scalars().all())


def visible_filter(actor: Actor):
    """SQL predicate matching what ``access.can_view`` allows for a customer."""
    identities = identities_of(actor)
    return or_(
        LetterOfCredit.created_by == actor.username,
        func.lower(func.trim(LetterOfCredit.beneficiary_name)).in_(identities),
    )


def list_visible(db: Session, *, actor: Actor, status: LCStatus | None = None, limit: int = 50, offset: int = 0) -> list[LetterOfCredit]:
    if actor.is_staff:
        return list_letters(db, status=status, limit=limit, offset=offset)
    stmt = select(LetterOfCredit).where(visible_filter(actor))
    if status is not None:
        stmt = stmt.where(LetterOfCredit.status == status)
    stmt = stmt.order_by(LetterOfCredit.created_at.desc(), LetterOfCredit.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_pending_approval(db: Session) -> list[LetterOfCredit]:
    stmt = (
        select(LetterOfCredit)
        .where(LetterOfCredit.status.in_(workflow.PENDING_APPROVAL))
        .order_by(LetterOfCredit.updated_at.asc(), LetterOfCredit.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.execute(select(LetterOfCredit.status, func.count(LetterOfCredit.id)).group_by(LetterOfCredit.status)).all()
    out = {s.value: 0 for s in LCStatus}
    for status, count in rows:
        out[LCStatus(status).value] = int(count)
    return out


def create_letter(db: Session, *, payload: LetterOfCreditCreate, actor: Actor) -> LetterOfCredit:
    _ensure_future_expiry(payload.expiry_date)

    lc = LetterOfCredit(
        reference_number=new_reference(LC_PREFIX),
        applicant_name=payload.applicant_name,
        beneficiary_name=payload.beneficiary_name,
        amount=payload.amount,
        currency=payload.currency.upper(),
        expiry_date=payload.expiry_date,
        description=payload.description,
        issuing_bank=payload.issuing_bank,
        advising_bank=payload.advising_bank,
        status=LCStatus.DRAFT,
    )
    stamp_created(lc, actor)
    db.add(lc)
    db.flush()

    _audit(db, lc=lc, actor=actor, action="lc.created", before=None, after=sa_model_to_dict(lc))
    db.commit()
    db.refresh(lc)
    log.info("lc.created", reference=lc.reference_number, amount=str(lc.amount), currency=lc.currency)
    return lc


def _transition(
    db: Session,
    *,
    lc: LetterOfCredit,
    operation: str,
    actor: Actor,
    reason_label: str | None = None,
    reason: str | None = None,
    commit: bool = True,
) -> LetterOfCredit:
    target = workflow.ensure_allowed(operation, lc.status)
    before = {"status": lc.status}

    lc.status = target
    if target == LCStatus.APPROVED:
        lc.issue_date = today()
    if reason_label is not None and reason is not None:
        lc.description = append_reason(lc.description, reason_label, reason)
    stamp_updated(lc, actor)

    after: dict = {"status": lc.status}
    if reason_label is not None:
        after["reason"] = {"label": reason_label, "text": reason}
    _audit(db, lc=lc, actor=actor, action=f"lc.{operation.replace(' ', '_')}", before=before, after=after)

    if commit:
        db.commit()
        db.refresh(lc)
    log.info(
        "lc.transition",
        reference=lc.reference_number,
        operation=operation,
        from_status=before["status"].value,
        to_status=lc.status.value,
    )
    return lc


def submit(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="submit", actor=actor)


def start_verification(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="start verification", actor=actor)


def send_to_risk(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="send to risk", actor=actor)


def approve(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="approve", actor=actor)


def reject(db: Session, *, lc: LetterOfCredit, actor: Actor, reason: str | None = None) -> LetterOfCredit:
    text = (reason or "").strip() or DEFAULT_REJECTION_REASON
    return _transition(db, lc=lc, operation="reject", actor=actor, reason_label="Rejection Reason", reason=text)


def close(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="close", actor=actor)


def open_letter(db: Session, *, lc: LetterOfCredit, actor: Actor) -> LetterOfCredit:
    return _transition(db, lc=lc, operation="open", actor=actor)


def return_from_risk(db: Session, *, lc: LetterOfCredit, actor: Actor) -> bool:
    """Move a SENT_TO_RISK letter back to verification; no-op otherwise.

    Does not commit: the caller persists it together with the assessment.
    """
    if not workflow.is_allowed("return from risk", lc.status):
        return False
    _transition(db, lc=lc, operation="return from risk", actor=actor, commit=False)
    return True


def amend(db: Session, *, lc: LetterOfCredit, payload: LetterOfCreditAmend, actor: Actor) -> LetterOfCredit:
    target = workflow.ensure_allowed("amend", lc.status)
    if payload.expiry_date is not None:
        _ensure_future_expiry(payload.expiry_date)

    before = sa_model_to_dict(lc)
    lc.applicant_name = payload.applicant_name
    lc.beneficiary_name = payload.beneficiary_name
    lc.amount = payload.amount
    lc.currency = payload.currency.upper()
    if payload.expiry_date is not None:
        lc.expiry_date = payload.expiry_date
    lc.description = payload.description
    lc.advising_bank = payload.advising_bank
    lc.status = target
    stamp_updated(lc, actor)

    _audit(db, lc=lc, actor=actor, action="lc.amend", before=before, after=sa_model_to_dict(lc))
    db.commit()
    db.refresh(lc)
    log.info("lc.transition", reference=lc.reference_number, operation="amend", to_status=lc.status.value)
    return lc


def delete_letter(db: Session, *, lc: LetterOfCredit, actor: Actor) -> None:
    before = sa_model_to_dict(lc)
    _audit(db, lc=lc, actor=actor, action="lc.deleted", before=before, after=None)
    db.delete(lc)
    db.commit()
    log.info("lc.deleted", reference=before["reference_number"])


def audit_log(db: Session, *, lc: LetterOfCredit) -> list[AuditEvent]:
    return get_audit_log(db, entity_id=lc.id, entity_type=ENTITY_TYPE)
