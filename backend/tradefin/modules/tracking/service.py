from __future__ import annotations

from sqlalchemy.orm import Session

from tradefin.core.middleware.context import get_logger
from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.modules.documents import service as documents_service
from tradefin.modules.guarantees import service as bg_service
from tradefin.modules.letters_of_credit import service as lc_service
from tradefin.modules.tracking import timeline
from tradefin.modules.tracking.schemas import TimelineStepOut, TrackingOut
from tradefin.shared.exceptions import NotFound
from tradefin.shared.references import BG_PREFIX, DOC_PREFIX, LC_PREFIX, prefix_of


log = get_logger(__name__)


def _steps(items: list[timeline.TimelineStep]) -> list[TimelineStepOut]:
    return [TimelineStepOut.model_validate(item) for item in items]


def track(db: Session, *, reference: str, actor: Actor) -> TrackingOut:
    """Status and progress timeline for an LC, BG or document reference."""
    reference = reference.strip()
    prefix = prefix_of(reference)

    if prefix == LC_PREFIX:
        lc = lc_service.find_by_reference(db, reference=reference)
        if lc is not None:
            access.enforce(access.can_view(actor, lc), actor, f"track LetterOfCredit:{reference}")
            return TrackingOut(
                id=lc.id,
                reference=lc.reference_number,
                transaction_type=LC_PREFIX,
                status=lc.status.value,
                applicant=lc.applicant_name,
                beneficiary=lc.beneficiary_name,
                amount=lc.amount,
                currency=lc.currency,
                created_date=lc.created_at.date(),
                expiry_date=lc.expiry_date,
                timeline=_steps(timeline.lc_timeline(lc.status, created=lc.created_at.date(), issued=lc.issue_date)),
            )

    if prefix == BG_PREFIX:
        bg = bg_service.find_by_reference(db, reference=reference)
        if bg is not None:
            access.enforce(access.can_view(actor, bg), actor, f"track BankGuarantee:{reference}")
            return TrackingOut(
                id=bg.id,
                reference=bg.reference_number,
                transaction_type=BG_PREFIX,
                status=bg.status.value,
                applicant=bg.applicant_name,
                beneficiary=bg.beneficiary_name,
                amount=bg.amount,
                currency=bg.currency,
                created_date=bg.created_at.date(),
                expiry_date=bg.validity_period,
                timeline=_steps(timeline.bg_timeline(bg.status, created=bg.created_at.date(), issued=bg.issue_date)),
            )

    if prefix == DOC_PREFIX:
        doc = documents_service.find_by_reference(db, reference=reference)
        if doc is not None:
            access.enforce(documents_service.can_view(db, actor=actor, doc=doc), actor, f"track document:{reference}")
            return TrackingOut(
                id=doc.id,
                reference=doc.reference_number,
                transaction_type=DOC_PREFIX,
                status=doc.status.value,
                applicant=doc.uploaded_by,
                created_date=doc.upload_date,
                timeline=_steps(timeline.document_timeline(doc.status, uploaded=doc.upload_date)),
            )

    log.info("tracking.not_found", reference=reference)
    raise NotFound("Transaction", "reference", reference)
