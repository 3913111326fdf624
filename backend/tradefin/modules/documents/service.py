from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tradefin.core.db.audit import write_audit_event
from tradefin.core.middleware.context import get_logger
from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.core.storage import files
from tradefin.modules.documents.models import TradeDocument
from tradefin.services.instruments import find_instrument, visible_references
from tradefin.services.lifecycle import append_reason, stamp_created, stamp_updated
from tradefin.shared.enums import DocumentStatus
from tradefin.shared.exceptions import NotFound, ValidationError
from tradefin.shared.references import DOC_PREFIX, new_reference
from tradefin.shared.utils import sa_model_to_dict, today


log = get_logger(__name__)

ENTITY_TYPE = "trade_document"

# Document transitions carry no guard beyond existence.
TRANSITIONS: dict[str, DocumentStatus] = {
    "submit for review": DocumentStatus.PENDING_REVIEW,
    "approve": DocumentStatus.APPROVED,
    "reject": DocumentStatus.REJECTED,
    "archive": DocumentStatus.ARCHIVED,
}


def get_document(db: Session, *, document_id: int) -> TradeDocument:
    doc = db.get(TradeDocument, document_id)
    if doc is None:
        raise NotFound("TradeDocument", "id", document_id)
    return doc


def find_by_reference(db: Session, *, reference: str) -> TradeDocument | None:
    return db.execute(select(TradeDocument).where(TradeDocument.reference_number == reference)).scalar_one_or_none()


def list_by_trade_reference(db: Session, *, trade_reference: str) -> list[TradeDocument]:
    stmt = (
        select(TradeDocument)
        .where(TradeDocument.trade_reference_number == trade_reference)
        .order_by(TradeDocument.created_at.asc(), TradeDocument.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def list_by_status(db: Session, *, status: DocumentStatus) -> list[TradeDocument]:
    stmt = select(TradeDocument).where(TradeDocument.status == status).order_by(TradeDocument.id.asc())
    return list(db.execute(stmt).scalars().all())


def list_accessible(db: Session, *, actor: Actor, limit: int = 50, offset: int = 0) -> list[TradeDocument]:
    stmt = select(TradeDocument)
    if not actor.is_staff:
        stmt = stmt.where(
            or_(
                func.lower(TradeDocument.uploaded_by) == actor.username.strip().lower(),
                TradeDocument.trade_reference_number.in_(visible_references(db, actor)),
            )
        )
    stmt = stmt.order_by(TradeDocument.created_at.desc(), TradeDocument.id.desc()).offset(offset).limit(limit)
    return list(db.execute(stmt).scalars().all())


def count_by_status(db: Session) -> dict[str, int]:
    rows = db.execute(select(TradeDocument.status, func.count(TradeDocument.id)).group_by(TradeDocument.status)).all()
    out = {s.value: 0 for s in DocumentStatus}
    for status, count in rows:
        out[DocumentStatus(status).value] = int(count)
    return out


def can_view(db: Session, *, actor: Actor, doc: TradeDocument) -> bool:
    instrument = find_instrument(db, doc.trade_reference_number) if doc.trade_reference_number else None
    return access.can_view_document(actor, doc, instrument)


def get_viewable(db: Session, *, document_id: int, actor: Actor, operation: str = "view") -> TradeDocument:
    doc = get_document(db, document_id=document_id)
    access.enforce(can_view(db, actor=actor, doc=doc), actor, f"{operation} document:{document_id}")
    return doc


def upload_document(
    db: Session,
    *,
    actor: Actor,
    data: bytes,
    file_name: str | None,
    content_type: str | None,
    document_type: str,
    trade_reference_number: str | None = None,
    description: str | None = None,
) -> TradeDocument:
    trade_reference_number = (trade_reference_number or "").strip() or None
    if trade_reference_number:
        instrument = find_instrument(db, trade_reference_number)
        access.enforce(
            access.can_upload_for(actor, instrument),
            actor,
            f"upload document for trade:{trade_reference_number}",
        )
    else:
        access.enforce(access.can_upload_standalone(actor), actor, "upload standalone document")

    if not data:
        raise ValidationError("File is empty", {"file": "must not be empty"})

    stored = files.store(data, file_name, content_type)

    doc = TradeDocument(
        reference_number=new_reference(DOC_PREFIX),
        document_type=document_type,
        trade_reference_number=trade_reference_number,
        file_name=file_name or "document",
        file_path=stored.path,
        file_type=content_type,
        file_size=stored.size_bytes,
        uploaded_by=actor.username,
        upload_date=today(),
        description=description,
        status=DocumentStatus.ACTIVE,
    )
    stamp_created(doc, actor)
    try:
        db.add(doc)
        db.flush()
        write_audit_event(
            db,
            actor_id=actor.username,
            actor_role=actor.role.value,
            action="document.uploaded",
            entity_type=ENTITY_TYPE,
            entity_id=doc.id,
            before=None,
            after=sa_model_to_dict(doc),
        )
        db.commit()
    except Exception:
        db.rollback()
        # The row never landed, so nothing else can reach the stored file.
        files.delete(stored.path)
        log.warning("document.upload_rolled_back", path=stored.path)
        raise
    db.refresh(doc)
    log.info(
        "document.uploaded",
        reference=doc.reference_number,
        trade_reference=doc.trade_reference_number,
        size=doc.file_size,
    )
    return doc


def _transition(db: Session, *, doc: TradeDocument, operation: str, actor: Actor, reason: str | None = None) -> TradeDocument:
    before = {"status": doc.status}
    doc.status = TRANSITIONS[operation]
    if reason is not None:
        doc.description = append_reason(doc.description, "Rejection", reason)
    stamp_updated(doc, actor)

    after: dict = {"status": doc.status}
    if reason is not None:
        after["reason"] = {"label": "Rejection", "text": reason}
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action=f"document.{operation.replace(' ', '_')}",
        entity_type=ENTITY_TYPE,
        entity_id=doc.id,
        before=before,
        after=after,
    )
    db.commit()
    db.refresh(doc)
    log.info("document.transition", reference=doc.reference_number, operation=operation, to_status=doc.status.value)
    return doc


def submit_for_review(db: Session, *, doc: TradeDocument, actor: Actor) -> TradeDocument:
    return _transition(db, doc=doc, operation="submit for review", actor=actor)


def approve(db: Session, *, doc: TradeDocument, actor: Actor) -> TradeDocument:
    return _transition(db, doc=doc, operation="approve", actor=actor)


def reject(db: Session, *, doc: TradeDocument, actor: Actor, reason: str) -> TradeDocument:
    return _transition(db, doc=doc, operation="reject", actor=actor, reason=reason)


def archive(db: Session, *, doc: TradeDocument, actor: Actor) -> TradeDocument:
    return _transition(db, doc=doc, operation="archive", actor=actor)


def update_details(
    db: Session,
    *,
    doc: TradeDocument,
    actor: Actor,
    document_type: str,
    description: str | None,
) -> TradeDocument:
    before = {"document_type": doc.document_type, "description": doc.description}
    doc.document_type = document_type
    doc.description = description
    stamp_updated(doc, actor)

    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action="document.details_updated",
        entity_type=ENTITY_TYPE,
        entity_id=doc.id,
        before=before,
        after={"document_type": doc.document_type, "description": doc.description},
    )
    db.commit()
    db.refresh(doc)
    return doc


def read_content(doc: TradeDocument) -> bytes:
    try:
        return files.read(doc.file_path)
    except FileNotFoundError:
        raise NotFound("File", "document id", doc.id)


def delete_document(db: Session, *, doc: TradeDocument, actor: Actor) -> None:
    # Best effort: the record goes even when the file is already gone.
    removed = files.delete(doc.file_path)
    before = sa_model_to_dict(doc)
    write_audit_event(
        db,
        actor_id=actor.username,
        actor_role=actor.role.value,
        action="document.deleted",
        entity_type=ENTITY_TYPE,
        entity_id=doc.id,
        before=before,
        after={"file_removed": removed},
    )
    db.delete(doc)
    db.commit()
    log.info("document.deleted", reference=before["reference_number"], file_removed=removed)
