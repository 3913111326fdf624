from __future__ import annotations

from tradefin.shared.enums import LCStatus
from tradefin.shared.exceptions import InvalidState


ENTITY = "LetterOfCredit"

_NOT_CLOSED = frozenset(s for s in LCStatus if s != LCStatus.CLOSED)

# operation -> statuses it may start from
ALLOWED_FROM: dict[str, frozenset[LCStatus]] = {
    "submit": _NOT_CLOSED,
    "start verification": frozenset({LCStatus.SUBMITTED}),
    "send to risk": frozenset({LCStatus.SUBMITTED, LCStatus.UNDER_VERIFICATION}),
    "approve": frozenset({LCStatus.SUBMITTED, LCStatus.UNDER_VERIFICATION}),
    "reject": _NOT_CLOSED,
    "amend": _NOT_CLOSED,
    "close": _NOT_CLOSED,
    "open": _NOT_CLOSED,
    "return from risk": frozenset({LCStatus.SENT_TO_RISK}),
}

RESULT: dict[str, LCStatus] = {
    "submit": LCStatus.SUBMITTED,
    "start verification": LCStatus.UNDER_VERIFICATION,
    "send to risk": LCStatus.SENT_TO_RISK,
    "approve": LCStatus.APPROVED,
    "reject": LCStatus.REJECTED,
    "amend": LCStatus.AMENDED,
    "close": LCStatus.CLOSED,
    "open": LCStatus.OPEN,
    "return from risk": LCStatus.UNDER_VERIFICATION,
}

PENDING_APPROVAL = (LCStatus.SUBMITTED, LCStatus.UNDER_VERIFICATION)


def is_allowed(operation: str, current: LCStatus) -> bool:
    return current in ALLOWED_FROM[operation]


def ensure_allowed(operation: str, current: LCStatus) -> LCStatus:
    """Return the target status for ``operation`` or raise ``InvalidState``."""
    if not is_allowed(operation, current):
        raise InvalidState(ENTITY, current, operation)
    return RESULT[operation]


def available_operations(current: LCStatus) -> list[str]:
    return [op for op, allowed in ALLOWED_FROM.items() if current in allowed and op != "return from risk"]
