from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from tradefin.core.security.access import identities_of
from tradefin.core.security.auth import Actor
from tradefin.modules.compliance import service as compliance_service
from tradefin.modules.dashboard.schemas import CustomerDashboardOut, StaffDashboardOut
from tradefin.modules.documents import service as documents_service
from tradefin.modules.documents.models import TradeDocument
from tradefin.modules.documents.schemas import TradeDocumentOut
from tradefin.modules.guarantees import service as bg_service
from tradefin.modules.guarantees.models import BankGuarantee
from tradefin.modules.guarantees.schemas import GuaranteeOut
from tradefin.modules.letters_of_credit import service as lc_service
from tradefin.modules.letters_of_credit.models import LetterOfCredit
from tradefin.modules.letters_of_credit.schemas import LetterOfCreditOut
from tradefin.modules.risk import service as risk_service
from tradefin.services.instruments import visible_references
from tradefin.shared.enums import DocumentStatus, GuaranteeStatus, LCStatus

RECENT = 5


def _count(db: Session, stmt) -> int:
    return int(db.execute(stmt).scalar_one())


def staff_dashboard(db: Session, *, actor: Actor) -> StaffDashboardOut:
    lc_counts = lc_service.count_by_status(db)
    bg_counts = bg_service.count_by_status(db)
    doc_counts = documents_service.count_by_status(db)
    return StaffDashboardOut(
        total_letters_of_credit=sum(lc_counts.values()),
        total_guarantees=sum(bg_counts.values()),
        total_documents=sum(doc_counts.values()),
        pending_letters_of_credit=len(lc_service.list_pending_approval(db)),
        pending_guarantees=len(bg_service.list_pending_approval(db)),
        pending_documents=doc_counts[DocumentStatus.PENDING_REVIEW.value],
        letters_sent_to_risk=lc_counts[LCStatus.SENT_TO_RISK.value],
        guarantees_sent_to_risk=bg_counts[GuaranteeStatus.SENT_TO_RISK.value],
        lc_status_counts=lc_counts,
        guarantee_status_counts=bg_counts,
        document_status_counts=doc_counts,
        risk_level_counts=risk_service.count_by_level(db),
        compliance_status_counts=compliance_service.count_by_status(db),
        recent_letters_of_credit=[LetterOfCreditOut.model_validate(lc) for lc in lc_service.list_letters(db, limit=RECENT)],
        recent_guarantees=[GuaranteeOut.model_validate(bg) for bg in bg_service.list_visible(db, actor=actor, limit=RECENT)],
        recent_documents=[TradeDocumentOut.model_validate(doc) for doc in documents_service.list_accessible(db, actor=actor, limit=RECENT)],
    )


def customer_dashboard(db: Session, *, actor: Actor) -> CustomerDashboardOut:
    identities = identities_of(actor)
    refs = visible_references(db, actor)
    doc_filter = func.lower(TradeDocument.uploaded_by) == actor.username.strip().lower()
    if refs:
        doc_filter = or_(doc_filter, TradeDocument.trade_reference_number.in_(refs))

    return CustomerDashboardOut(
        my_letters_of_credit=len(lc_service.list_by_created_by(db, username=actor.username)),
        my_guarantees=len(bg_service.list_by_created_by(db, username=actor.username)),
        accessible_documents=_count(db, select(func.count(TradeDocument.id)).where(doc_filter)),
        beneficiary_letters_of_credit=_count(
            db,
            select(func.count(LetterOfCredit.id)).where(
                func.lower(func.trim(LetterOfCredit.beneficiary_name)).in_(identities)
            ),
        ),
        beneficiary_guarantees=_count(
            db,
            select(func.count(BankGuarantee.id)).where(
                func.lower(func.trim(BankGuarantee.beneficiary_name)).in_(identities)
            ),
        ),
        recent_letters_of_credit=[
            LetterOfCreditOut.model_validate(lc) for lc in lc_service.list_visible(db, actor=actor, limit=RECENT)
        ],
        recent_guarantees=[GuaranteeOut.model_validate(bg) for bg in bg_service.list_visible(db, actor=actor, limit=RECENT)],
    )
