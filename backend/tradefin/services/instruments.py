from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from tradefin.core.security.auth import Actor
from tradefin.modules.guarantees import service as bg_service
from tradefin.modules.guarantees.models import BankGuarantee
from tradefin.modules.letters_of_credit import service as lc_service
from tradefin.modules.letters_of_credit.models import LetterOfCredit
from tradefin.shared.enums import TransactionType

Instrument = LetterOfCredit | BankGuarantee


def find_instrument(db: Session, reference: str | None) -> Instrument | None:
    """Resolve a trade reference to its LC or BG row; LC is tried first."""
    if not reference:
        return None
    lc = lc_service.find_by_reference(db, reference=reference)
    if lc is not None:
        return lc
    return bg_service.find_by_reference(db, reference=reference)


def transaction_type_of(instrument: Instrument) -> TransactionType:
    return TransactionType.LC if isinstance(instrument, LetterOfCredit) else TransactionType.BG


def visible_references(db: Session, actor: Actor) -> list[str]:
    """Reference numbers of every instrument the (non-staff) actor can view."""
    refs = list(
        db.execute(select(LetterOfCredit.reference_number).where(lc_service.visible_filter(actor))).scalars().all()
    )
    refs.extend(
        db.execute(select(BankGuarantee.reference_number).where(bg_service.visible_filter(actor))).scalars().all()
    )
    return refs
