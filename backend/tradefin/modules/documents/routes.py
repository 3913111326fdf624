from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from tradefin.core.db.session import get_db
from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.core.security.dependencies import get_actor, require_officer, require_roles
from tradefin.modules.documents import service
from tradefin.modules.documents.schemas import (
    DOCUMENT_TYPES,
    DocumentDetailsUpdate,
    DocumentRejectIn,
    TradeDocumentOut,
)
from tradefin.services.instruments import find_instrument
from tradefin.shared.enums import DocumentStatus, Role
from tradefin.shared.exceptions import NotFound
from tradefin.shared.schemas import Page, page_limit, page_offset

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=Page[TradeDocumentOut])
def list_documents(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    limit: int = Depends(page_limit),
    offset: int = Depends(page_offset),
) -> Page[TradeDocumentOut]:
    items = service.list_accessible(db, actor=actor, limit=limit, offset=offset)
    return Page(items=items, limit=limit, offset=offset)


@router.get("/types", response_model=list[str])
def document_types() -> list[str]:
    return DOCUMENT_TYPES


@router.get("/pending", response_model=list[TradeDocumentOut])
def pending_review(db: Session = Depends(get_db), _role_guard: Actor = Depends(require_officer)) -> list[TradeDocumentOut]:
    return service.list_by_status(db, status=DocumentStatus.PENDING_REVIEW)


@router.get("/by-trade/{trade_reference}", response_model=list[TradeDocumentOut])
def documents_for_trade(
    trade_reference: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> list[TradeDocumentOut]:
    instrument = find_instrument(db, trade_reference)
    if instrument is None:
        raise NotFound("Instrument", "referenceNumber", trade_reference)
    access.enforce(access.can_view(actor, instrument), actor, f"documents of trade:{trade_reference}")
    return service.list_by_trade_reference(db, trade_reference=trade_reference)


@router.post("", response_model=TradeDocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile = File(...),
    document_type: str = Form(..., min_length=1, max_length=100),
    trade_reference_number: str | None = Form(None),
    description: str | None = Form(None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
) -> TradeDocumentOut:
    data = await file.read()
    return await run_in_threadpool(
        service.upload_document,
        db,
        actor=actor,
        data=data,
        file_name=file.filename,
        content_type=file.content_type,
        document_type=document_type,
        trade_reference_number=trade_reference_number,
        description=description,
    )


@router.get("/{document_id}", response_model=TradeDocumentOut)
def get_document(document_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> TradeDocumentOut:
    return service.get_viewable(db, document_id=document_id, actor=actor)


@router.get("/{document_id}/download")
def download_document(document_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> Response:
    doc = service.get_viewable(db, document_id=document_id, actor=actor, operation="download")
    content = service.read_content(doc)
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{doc.file_name}"'},
    )


@router.put("/{document_id}", response_model=TradeDocumentOut)
def update_document(
    document_id: int,
    payload: DocumentDetailsUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> TradeDocumentOut:
    doc = service.get_viewable(db, document_id=document_id, actor=actor, operation="edit")
    return service.update_details(db, doc=doc, actor=actor, document_type=payload.document_type, description=payload.description)


@router.post("/{document_id}/submit", response_model=TradeDocumentOut)
def submit_document(
    document_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles([Role.CUSTOMER, Role.OFFICER])),
) -> TradeDocumentOut:
    doc = service.get_viewable(db, document_id=document_id, actor=actor, operation="submit")
    return service.submit_for_review(db, doc=doc, actor=actor)


@router.post("/{document_id}/approve", response_model=TradeDocumentOut)
def approve_document(document_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> TradeDocumentOut:
    return service.approve(db, doc=service.get_document(db, document_id=document_id), actor=actor)


@router.post("/{document_id}/reject", response_model=TradeDocumentOut)
def reject_document(
    document_id: int,
    payload: DocumentRejectIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_officer),
) -> TradeDocumentOut:
    return service.reject(db, doc=service.get_document(db, document_id=document_id), actor=actor, reason=payload.reason)


@router.post("/{document_id}/archive", response_model=TradeDocumentOut)
def archive_document(document_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> TradeDocumentOut:
    return service.archive(db, doc=service.get_document(db, document_id=document_id), actor=actor)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(document_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_officer)) -> None:
    service.delete_document(db, doc=service.get_document(db, document_id=document_id), actor=actor)
