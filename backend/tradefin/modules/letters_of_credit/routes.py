from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tradefin.core.db.session import get_db
from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import get_actor, require_officer, require_roles
from tradefin.modules.letters_of_credit import service, workflow
from tradefin.modules.letters_of_credit.schemas import (
    LetterOfCreditAmend,
    LetterOfCreditCreate,
    LetterOfCreditDetailOut,
    LetterOfCreditOut,
    ReasonIn,
)
from tradefin.shared.enums import LCStatus, Role
from tradefin.shared.schemas import AuditEventOut, Page, page_limit, page_offset

router = APIRouter(prefix="/lc", tags=["letters-of-credit"])


def _load_viewable(db: Session, lc_id: int, actor: Actor):
    lc = service.get_letter(db, lc_id=lc_id)
    access.enforce(access.can_view(actor, lc), actor, f"view LetterOfCredit:{lc_id}")
    return lc


def _load_owned(db: Session, lc_id: int, actor: Actor, operation: str):
    lc = service.get_letter(db, lc_id=lc_id)
    access.enforce(access.can_mutate(actor, lc), actor, f"{operation} LetterOfCredit:{lc_id}")
    return lc


def _detail(lc, actor: Actor) -> LetterOfCreditDetailOut:
    out = LetterOfCreditDetailOut.model_validate(lc)
    out.available_operations = workflow.available_operations(lc.status)
    out.can_edit = access.can_mutate(actor, lc)
    return out


@router.get("", response_model=Page[LetterOfCreditOut])
def list_letters(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    status_filter: LCStatus | None = Query(default=None, alias="status"),
    limit: int = Depends(page_limit),
    offset: int = Depends(page_offset),
) -> Page[LetterOfCreditOut]:
    items = service.list_visible(db, actor=actor, status=status_filter, limit=limit, offset=offset)
    return Page(items=items, limit=limit, offset=offset)


@router.get("/pending", response_model=list[LetterOfCreditOut])
def pending_approval(
    db: Session = Depends(get_db),
    _role_guard: Actor = Depends(require_officer),
) -> list[LetterOfCreditOut]:
    return service.list_pending_approval(db)


@router.post("", response_model=LetterOfCreditOut, status_code=status.HTTP_201_CREATED)
def create_letter(
    payload: LetterOfCreditCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> LetterOfCreditOut:
    return service.create_letter(db, payload=payload, actor=actor)


@router.get("/track/{reference}", response_model=LetterOfCreditDetailOut)
def track_letter(reference: str, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> LetterOfCreditDetailOut:
    lc = service.get_by_reference(db, reference=reference)
    access.enforce(access.can_view(actor, lc), actor, f"track LetterOfCredit:{reference}")
    return _detail(lc, actor)


@router.get("/{lc_id}", response_model=LetterOfCreditDetailOut)
def get_letter(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> LetterOfCreditDetailOut:
    return _detail(_load_viewable(db, lc_id, actor), actor)


@router.put("/{lc_id}", response_model=LetterOfCreditOut)
def amend_letter(
    lc_id: int,
    payload: LetterOfCreditAmend,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> LetterOfCreditOut:
    lc = _load_owned(db, lc_id, actor, "edit")
    return service.amend(db, lc=lc, payload=payload, actor=actor)


@router.post("/{lc_id}/submit", response_model=LetterOfCreditOut)
def submit_letter(
    lc_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> LetterOfCreditOut:
    lc = _load_owned(db, lc_id, actor, "submit")
    return service.submit(db, lc=lc, actor=actor)


@router.post("/{lc_id}/start-verification", response_model=LetterOfCreditOut)
def start_verification(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> LetterOfCreditOut:
    return service.start_verification(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor)


@router.post("/{lc_id}/send-to-risk", response_model=LetterOfCreditOut)
def send_to_risk(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> LetterOfCreditOut:
    return service.send_to_risk(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor)


@router.post("/{lc_id}/approve", response_model=LetterOfCreditOut)
def approve_letter(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> LetterOfCreditOut:
    return service.approve(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor)


@router.post("/{lc_id}/reject", response_model=LetterOfCreditOut)
def reject_letter(
    lc_id: int,
    payload: ReasonIn | None = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_officer),
) -> LetterOfCreditOut:
    reason = payload.reason if payload else None
    return service.reject(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor, reason=reason)


@router.post("/{lc_id}/close", response_model=LetterOfCreditOut)
def close_letter(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> LetterOfCreditOut:
    return service.close(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor)


@router.post("/{lc_id}/open", response_model=LetterOfCreditOut)
def open_letter(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> LetterOfCreditOut:
    return service.open_letter(db, lc=service.get_letter(db, lc_id=lc_id), actor=actor)


@router.delete("/{lc_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_letter(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> None:
    # Officer role plus ownership: only the officer who created it may delete.
    lc = _load_owned(db, lc_id, actor, "delete")
    service.delete_letter(db, lc=lc, actor=actor)


@router.get("/{lc_id}/audit", response_model=list[AuditEventOut])
def letter_audit(lc_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> list[AuditEventOut]:
    lc = _load_viewable(db, lc_id, actor)
    return service.audit_log(db, lc=lc)
