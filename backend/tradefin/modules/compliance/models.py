from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradefin.core.db.base import AuditMetaMixin, Base, IdMixin
from tradefin.shared.enums import ComplianceStatus


class Compliance(Base, IdMixin, AuditMetaMixin):
    __tablename__ = "compliance_reports"

    transaction_reference: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    transaction_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    compliance_status: Mapped[ComplianceStatus] = mapped_column(
        SAEnum(ComplianceStatus, name="compliance_status", native_enum=False),
        default=ComplianceStatus.PENDING,
        index=True,
    )

    documents_validated: Mapped[bool] = mapped_column(Boolean, default=False)
    risk_check_passed: Mapped[bool] = mapped_column(Boolean, default=False)
    party_check_passed: Mapped[bool] = mapped_column(Boolean, default=False)
    country_check_passed: Mapped[bool] = mapped_column(Boolean, default=False)

    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    report_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    review_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
