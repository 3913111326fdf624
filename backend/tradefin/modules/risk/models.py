from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import JSON, Date, Enum as SAEnum, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradefin.core.db.base import AuditMetaMixin, Base, IdMixin
from tradefin.shared.enums import RiskLevel


class RiskAssessment(Base, IdMixin, AuditMetaMixin):
    __tablename__ = "risk_assessments"

    # Joined to LC/BG/documents by value; no FK so history survives instrument deletes.
    transaction_reference: Mapped[str] = mapped_column(String(50), index=True)
    transaction_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    risk_score: Mapped[Decimal] = mapped_column(Numeric(5, 2))
    risk_level: Mapped[RiskLevel] = mapped_column(SAEnum(RiskLevel, name="risk_level", native_enum=False), index=True)
    risk_factors: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    recommendations: Mapped[str | None] = mapped_column(Text, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    assessed_by: Mapped[str] = mapped_column(String(128))
    assessment_date: Mapped[dt.date] = mapped_column(Date, index=True)

    __table_args__ = (Index("ix_risk_assessments_reference_date", "transaction_reference", "assessment_date"),)
