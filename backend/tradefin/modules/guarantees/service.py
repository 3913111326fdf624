from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tradefin.core.db.audit import get_audit_log, write_audit_event
from tradefin.core.db.models import AuditEvent
from tradefin.core.middleware.context import get_logger
from tradefin.core.security.access import identities_of
from tradefin.core.security.auth import Actor
from tradefin.modules.guarantees import workflow
from tradefin.modules.guarantees.models import BankGuarantee
from tradefin.modules.guarantees.schemas import GuaranteeRequest, GuaranteeUpdate
from tradefin.services.lifecycle import append_reason, stamp_created, stamp_updated
from tradefin.shared.enums import GuaranteeStatus
from tradefin.shared.exceptions import NotFound
from tradefin.shared.references import BG_PREFIX, new_reference
from tradefin.shared.utils import sa_model_to_dict, today


log = get_logger(__name__)

ENTITY_TYPE = "bank_guarantee"


def _audit(db: Session, *, bg: BankGuarantee, actor: Actor, action: str, before: dict | None, after: dict | None) -> None:
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action=action,
        entity_type=ENTITY_TYPE,
        entity_id=bg.id,
        before=before,
        after=after,
    )


def get_guarantee(db: Session, *, bg_id: int) -> BankGuarantee:
    bg = db.get(BankGuarantee, bg_id)
    if bg is None:
        raise NotFound("BankGuarantee", "id", bg_id)
    return bg


def find_by_reference(db: Session, *, reference: str) -> BankGuarantee | None:
    return db.execute(select(BankGuarantee).where(BankGuarantee.reference_number == reference)).scalar_one_or_none()


def get_by_reference(db: Session, *, reference: str) -> BankGuarantee:
    bg = find_by_reference(db, reference=reference)
    if bg is None:
        raise NotFound("BankGuarantee", "referenceNumber", reference)
    return bg


def visible_filter(actor: Actor):
    identities = identities_of(actor)
    return or_(
        BankGuarantee.created_by == actor.username,
        func.lower(func.trim(BankGuarantee.beneficiary_name)).in_(identities),
    )


def list_visible(
    db: Session,
    *,
    actor: Actor,
    status: GuaranteeStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[BankGuarantee]:
    stmt = select(BankGuarantee)
    if not actor.is_staff:
        stmt = stmt.where(visible_filter(actor))
    if status is not None:
        stmt = stmt.where(BankGuarantee.status == status)
    stmt = stmt.order_by(BankGuarantee.created_at.desc(), BankGuarantee.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_by_status(db: Session, *, status: GuaranteeStatus) -> list[BankGuarantee]:
    stmt = select(BankGuarantee).where(BankGuarantee.status == status).order_by(BankGuarantee.updated_at.asc(), BankGuarantee.id.asc())
    return list(db.execute(stmt).scalars().all())


def list_by_created_by(db: Session, *, username: str) -> list[BankGuarantee]:
    stmt = select(BankGuarantee).where(BankGuarantee.created_by == username).order_by(BankGuarantee.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_pending_approval(db: Session) -> list[BankGuarantee]:
    stmt = (
        select(BankGuarantee)
        .where(BankGuarantee.status.in_(workflow.PENDING_APPROVAL))
        .order_by(BankGuarantee.updated_at.asc(), BankGuarantee.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.execute(select(BankGuarantee.status, func.count(BankGuarantee.id)).group_by(BankGuarantee.status)).all()
    out = {s.value: 0 for s in GuaranteeStatus}
    for status, count in rows:
        out[GuaranteeStatus(status).value] = int(count)
    return out


def request_guarantee(db: Session, *, payload: GuaranteeRequest, actor: Actor) -> BankGuarantee:
    bg = BankGuarantee(
        reference_number=new_reference(BG_PREFIX),
        applicant_name=payload.applicant_name,
        beneficiary_name=payload.beneficiary_name,
        amount=payload.amount,
        currency=payload.currency.upper(),
        guarantee_type=payload.guarantee_type,
        validity_period=payload.validity_period,
        purpose=payload.purpose,
        issuing_bank=payload.issuing_bank,
        status=GuaranteeStatus.DRAFT,
    )
    stamp_created(bg, actor)
    db.add(bg)
    db.flush()

    _audit(db, bg=bg, actor=actor, action="bg.requested", before=None, after=sa_model_to_dict(bg))
    db.commit()
    db.refresh(bg)
    log.info("bg.requested", reference=bg.reference_number, guarantee_type=bg.guarantee_type)
    return bg


def _transition(
    db: Session,
    *,
    bg: BankGuarantee,
    operation: str,
    actor: Actor,
    reason_label: str | None = None,
    reason: str | None = None,
    commit: bool = True,
) -> BankGuarantee:
    target = workflow.ensure_allowed(operation, bg.status)
    before = {"status": bg.status}

    bg.status = target
    if target == GuaranteeStatus.ISSUED:
        bg.issue_date = today()
    if reason_label is not None and reason is not None:
        bg.purpose = append_reason(bg.purpose, reason_label, reason)
    stamp_updated(bg, actor)

    after: dict = {"status": bg.status}
    if reason_label is not None:
        after["reason"] = {"label": reason_label, "text": reason}
    _audit(db, bg=bg, actor=actor, action=f"bg.{operation.replace(' ', '_')}", before=before, after=after)

    if commit:
        db.commit()
        db.refresh(bg)
    log.info(
        "bg.transition",
        reference=bg.reference_number,
        operation=operation,
        from_status=before["status"].value,
        to_status=bg.status.value,
    )
    return bg


def submit_for_review(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="submit", actor=actor)


def send_to_risk(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="send to risk", actor=actor)


def return_to_officer(db: Session, *, bg: BankGuarantee, actor: Actor, commit: bool = True) -> BankGuarantee:
    return _transition(db, bg=bg, operation="return to officer", actor=actor, commit=commit)


def return_from_risk(db: Session, *, bg: BankGuarantee, actor: Actor) -> bool:
    """Risk feedback: SENT_TO_RISK goes back to UNDER_REVIEW, anything else is left alone."""
    if not workflow.is_allowed("return to officer", bg.status):
        return False
    return_to_officer(db, bg=bg, actor=actor, commit=False)
    return True


def issue(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="issue", actor=actor)


def activate(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="activate", actor=actor)


def cancel(db: Session, *, bg: BankGuarantee, actor: Actor, reason: str) -> BankGuarantee:
    return _transition(db, bg=bg, operation="cancel", actor=actor, reason_label="Cancellation Reason", reason=reason)


def claim(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="claim", actor=actor)


def expire(db: Session, *, bg: BankGuarantee, actor: Actor) -> BankGuarantee:
    return _transition(db, bg=bg, operation="expire", actor=actor)


def update_guarantee(db: Session, *, bg: BankGuarantee, payload: GuaranteeUpdate, actor: Actor) -> BankGuarantee:
    before = sa_model_to_dict(bg)
    bg.applicant_name = payload.applicant_name
    bg.beneficiary_name = payload.beneficiary_name
    bg.amount = payload.amount
    bg.currency = payload.currency.upper()
    bg.guarantee_type = payload.guarantee_type
    bg.validity_period = payload.validity_period
    bg.purpose = payload.purpose
    stamp_updated(bg, actor)

    _audit(db, bg=bg, actor=actor, action="bg.updated", before=before, after=sa_model_to_dict(bg))
    db.commit()
    db.refresh(bg)
    return bg


def delete_guarantee(db: Session, *, bg: BankGuarantee, actor: Actor) -> None:
    before = sa_model_to_dict(bg)
    _audit(db, bg=bg, actor=actor, action="bg.deleted", before=before, after=None)
    db.delete(bg)
    db.commit()
    log.info("bg.deleted", reference=before["reference_number"])


def audit_log(db: Session, *, bg: BankGuarantee) -> list[AuditEvent]:
    return get_audit_log(db, entity_id=bg.id, entity_type=ENTITY_TYPE)
