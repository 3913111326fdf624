"""Ordered-state rank tables and the progress timelines derived from them.

Status enums are declared in display order, not workflow order, so progress
is never derived from enum position. Side branches (rejected, cancelled)
share the rank of the step at which they left the happy path.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from tradefin.shared.enums import DocumentStatus, GuaranteeStatus, LCStatus

LC_RANK: dict[LCStatus, int] = {
    LCStatus.DRAFT: 0,
    LCStatus.AMENDED: 0,
    LCStatus.SUBMITTED: 1,
    LCStatus.UNDER_VERIFICATION: 2,
    LCStatus.SENT_TO_RISK: 2,
    LCStatus.REJECTED: 2,
    LCStatus.APPROVED: 3,
    LCStatus.OPEN: 4,
    LCStatus.CLOSED: 5,
}

BG_RANK: dict[GuaranteeStatus, int] = {
    GuaranteeStatus.DRAFT: 0,
    GuaranteeStatus.PENDING: 1,
    GuaranteeStatus.SUBMITTED: 1,
    GuaranteeStatus.CANCELLED: 1,
    GuaranteeStatus.UNDER_REVIEW: 2,
    GuaranteeStatus.SENT_TO_RISK: 2,
    GuaranteeStatus.ISSUED: 3,
    GuaranteeStatus.ACTIVE: 4,
    GuaranteeStatus.EXPIRED: 5,
    GuaranteeStatus.CLAIMED: 5,
}

DOCUMENT_RANK: dict[DocumentStatus, int] = {
    DocumentStatus.ACTIVE: 0,
    DocumentStatus.PENDING_REVIEW: 1,
    DocumentStatus.APPROVED: 2,
    DocumentStatus.REJECTED: 2,
    DocumentStatus.ARCHIVED: 3,
}

# (rank, title, description)
LC_STEPS = (
    (0, "Created", "Draft LC created"),
    (1, "Submitted", "Submitted for verification"),
    (2, "Under Verification", "Being reviewed by bank officer"),
    (3, "Approved", "LC approved and issued"),
    (4, "Active", "LC is active"),
    (5, "Closed", "LC closed"),
)

BG_STEPS = (
    (0, "Created", "Guarantee request created"),
    (1, "Submitted", "Submitted for review"),
    (2, "Under Review", "Being reviewed by bank"),
    (3, "Issued", "Guarantee issued"),
    (4, "Active", "Guarantee is active"),
    (5, "Completed", "Guarantee period ended"),
)

DOCUMENT_STEPS = (
    (0, "Uploaded", "Document uploaded"),
    (1, "Pending Review", "Awaiting review"),
    (2, "Reviewed", "Document reviewed"),
    (3, "Completed", "Process complete"),
)


@dataclass(frozen=True)
class TimelineStep:
    title: str
    description: str
    completed: bool
    current: bool
    date: dt.date | None = None


def build_timeline(
    steps: tuple[tuple[int, str, str], ...],
    rank: int,
    dates: dict[int, dt.date | None] | None = None,
) -> list[TimelineStep]:
    dates = dates or {}
    out: list[TimelineStep] = []
    for step_rank, title, description in steps:
        out.append(
            TimelineStep(
                title=title,
                description=description,
                completed=rank >= step_rank,
                current=rank == step_rank,
                date=dates.get(step_rank),
            )
        )
    return out


def lc_timeline(status: LCStatus, *, created: dt.date | None, issued: dt.date | None) -> list[TimelineStep]:
    return build_timeline(LC_STEPS, LC_RANK[status], {0: created, 3: issued})


def bg_timeline(status: GuaranteeStatus, *, created: dt.date | None, issued: dt.date | None) -> list[TimelineStep]:
    return build_timeline(BG_STEPS, BG_RANK[status], {0: created, 3: issued})


def document_timeline(status: DocumentStatus, *, uploaded: dt.date | None) -> list[TimelineStep]:
    return build_timeline(DOCUMENT_STEPS, DOCUMENT_RANK[status], {0: uploaded})
