from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import get_actor, require_officer, require_roles
from tradefin.modules.guarantees import service, workflow
from tradefin.modules.guarantees.schemas import (
    CancelIn,
    GuaranteeDetailOut,
    GuaranteeOut,
    GuaranteeRequest,
    GuaranteeUpdate,
)
from tradefin.shared.enums import GuaranteeStatus, Role
from tradefin.shared.schemas import AuditEventOut, Page, page_limit, page_offset

router = APIRouter(prefix="/guarantees", tags=["bank-guarantees"])


def _load_viewable(db: Session, bg_id: int, actor: Actor):
    bg = service.get_guarantee(db, bg_id=bg_id)
    access.enforce(access.can_view(actor, bg), actor, f"view BankGuarantee:{bg_id}")
    return bg


def _load_owned(db: Session, bg_id: int, actor: Actor, operation: str):
    bg = service.get_guarantee(db, bg_id=bg_id)
    access.enforce(access.can_mutate(actor, bg), actor, f"{operation} BankGuarantee:{bg_id}")
    return bg


def _detail(bg, actor: Actor) -> GuaranteeDetailOut:
    out = GuaranteeDetailOut.model_validate(bg)
    out.available_operations = workflow.available_operations(bg.status)
    out.can_edit = access.can_mutate(actor, bg)
    return out


@router.get("", response_model=Page[GuaranteeOut])
def list_guarantees(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    status_filter: GuaranteeStatus | None = Query(default=None, alias="status"),
    limit: int = Depends(page_limit),
    offset: int = Depends(page_offset),
) -> Page[GuaranteeOut]:
    items = service.list_visible(db, actor=actor, status=status_filter, limit=limit, offset=offset)
    return Page(items=items, limit=limit, offset=offset)


@router.get("/pending", response_model=list[GuaranteeOut])
def pending_approval(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_officer)) -> list[GuaranteeOut]:
    return service.list_pending_approval(db)


@router.post("", response_model=GuaranteeOut, status_code=status.HTTP_201_CREATED)
def request_guarantee(
    payload: GuaranteeRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> GuaranteeOut:
    return service.request_guarantee(db, payload=payload, actor=actor)


@router.get("/track/{reference}", response_model=GuaranteeDetailOut)
def track_guarantee(reference: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> GuaranteeDetailOut:
    bg = service.get_by_reference(db, reference=reference)
    access.enforce(access.can_view(actor, bg), actor, f"track BankGuarantee:{reference}")
    return _detail(bg, actor)


@router.get("/{bg_id}", response_model=GuaranteeDetailOut)
def get_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> GuaranteeDetailOut:
    return _detail(_load_viewable(db, bg_id, actor), actor)


@router.put("/{bg_id}", response_model=GuaranteeOut)
def update_guarantee(
    bg_id: int,
    payload: GuaranteeUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> GuaranteeOut:
    bg = _load_owned(db, bg_id, actor, "edit")
    return service.update_guarantee(db, bg=bg, payload=payload, actor=actor)


@router.post("/{bg_id}/submit", response_model=GuaranteeOut)
def submit_guarantee(
    bg_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> GuaranteeOut:
    bg = _load_owned(db, bg_id, actor, "submit")
    return service.submit_for_review(db, bg=bg, actor=actor)


@router.post("/{bg_id}/send-to-risk", response_model=GuaranteeOut)
def send_to_risk(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> GuaranteeOut:
    return service.send_to_risk(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.post("/{bg_id}/return-to-officer", response_model=GuaranteeOut)
def return_to_officer(
    bg_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.RISK])),
) -> GuaranteeOut:
    return service.return_to_officer(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.post("/{bg_id}/issue", response_model=GuaranteeOut)
def issue_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> GuaranteeOut:
    return service.issue(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.post("/{bg_id}/activate", response_model=GuaranteeOut)
def activate_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> GuaranteeOut:
    return service.activate(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.post("/{bg_id}/cancel", response_model=GuaranteeOut)
def cancel_guarantee(
    bg_id: int,
    payload: CancelIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_officer),
) -> GuaranteeOut:
    return service.cancel(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor, reason=payload.reason)


@router.post("/{bg_id}/claim", response_model=GuaranteeOut)
def claim_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> GuaranteeOut:
    return service.claim(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.post("/{bg_id}/expire", response_model=GuaranteeOut)
def expire_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> GuaranteeOut:
    return service.expire(db, bg=service.get_guarantee(db, bg_id=bg_id), actor=actor)


@router.delete("/{bg_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guarantee(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> None:
    bg = _load_owned(db, bg_id, actor, "delete")
    service.delete_guarantee(db, bg=bg, actor=actor)


@router.get("/{bg_id}/audit", response_model=list[AuditEventOut])
def guarantee_audit(bg_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> list[AuditEventOut]:
    return service.audit_log(db, bg=_load_viewable(db, bg_id, actor))
