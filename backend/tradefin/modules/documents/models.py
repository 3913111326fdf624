from __future__ import annotations

import datetime as dt

from sqlalchemy import BigInteger, Date, Enum as SAEnum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tradefin.core.db.base import AuditMetaMixin, Base, IdMixin
from tradefin.shared.enums import DocumentStatus


class TradeDocument(Base, IdMixin, AuditMetaMixin):
    __tablename__ = "trade_documents"

    reference_number: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    document_type: Mapped[str] = mapped_column(String(100), index=True)

    # LC/BG reference; set once at upload, never edited.
    trade_reference_number: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    file_name: Mapped[str] = mapped_column(String(255))
    file_path: Mapped[str] = mapped_column(String(1024))
    file_type: Mapped[str | None] = mapped_column(String(200), nullable=True)
    file_size: Mapped[int] = mapped_column(BigInteger)

    uploaded_by: Mapped[str] = mapped_column(String(128), index=True)
    upload_date: Mapped[dt.date] = mapped_column(Date)

    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus, name="document_status", native_enum=False), default=DocumentStatus.ACTIVE, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
