from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from tradefin.shared.enums import DocumentStatus


DOCUMENT_TYPES = [
    "Invoice",
    "Bill of Lading",
    "Packing List",
    "Certificate of Origin",
    "Insurance Certificate",
    "Purchase Order",
    "Shipping Documents",
    "Inspection Certificate",
    "Weight Certificate",
    "Other",
]


class DocumentDetailsUpdate(BaseModel):
    document_type: str = Field(min_length=1, max_length=100)
    description: str | None = None


class DocumentRejectIn(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)


class TradeDocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference_number: str
    document_type: str
    trade_reference_number: str | None
    file_name: str
    file_type: str | None
    file_size: int
    uploaded_by: str
    upload_date: dt.date
    status: DocumentStatus
    description: str | None
    created_at: dt.datetime
    updated_at: dt.datetime
