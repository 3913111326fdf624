from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, Enum as SAEnum, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradefin.core.db.base import AuditMetaMixin, Base, IdMixin
from tradefin.shared.enums import GuaranteeStatus


class BankGuarantee(Base, IdMixin, AuditMetaMixin):
    __tablename__ = "bank_guarantees"

    reference_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)

    applicant_name: Mapped[str] = mapped_column(String(200))
    beneficiary_name: Mapped[str] = mapped_column(String(200), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(15, 2))
    currency: Mapped[str] = mapped_column(String(3))

    # e.g. Performance, Financial, Bid, Advance Payment
    guarantee_type: Mapped[str] = mapped_column(String(50))
    issue_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    validity_period: Mapped[dt.date] = mapped_column(Date)

    status: Mapped[GuaranteeStatus] = mapped_column(
        SAEnum(GuaranteeStatus, name="guarantee_status", native_enum=False), default=GuaranteeStatus.DRAFT, index=True
    )

    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    issuing_bank: Mapped[str | None] = mapped_column(String(200), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
