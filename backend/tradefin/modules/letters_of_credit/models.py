from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, Enum as SAEnum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradefin.core.db.base import AuditMetaMixin, Base, IdMixin
from tradefin.shared.enums import LCStatus


class LetterOfCredit(Base, IdMixin, AuditMetaMixin):
    __tablename__ = "letters_of_credit"

    reference_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    applicant_name: Mapped[str] = mapped_column(String(200))
    beneficiary_name: Mapped[str] = mapped_column(String(200), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    currency: Mapped[str] = mapped_column(String(3))

    issue_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[dt.date] = mapped_column(Date)

    status: Mapped[LCStatus] = mapped_column(
        SAEnum(LCStatus, name="lc_status", native_enum=False), default=LCStatus.DRAFT, index=True
    )

    # Also carries the " | Rejection Reason: ..." trail.
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    issuing_bank: Mapped[str | None] = mapped_column(String(200), nullable=True)
    advising_bank: Mapped[str | None] = mapped_column(String(200), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
