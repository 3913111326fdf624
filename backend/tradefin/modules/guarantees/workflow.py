from __future__ import annotations

from tradefin.shared.enums import GuaranteeStatus
from tradefin.shared.exceptions import InvalidState


ENTITY = "BankGuarantee"

# No terminal lock: CANCELLED, CLAIMED and EXPIRED may still transition.
_ANY = frozenset(GuaranteeStatus)

ALLOWED_FROM: dict[str, frozenset[GuaranteeStatus]] = {
    "submit": _ANY,
    "send to risk": frozenset({GuaranteeStatus.SUBMITTED, GuaranteeStatus.UNDER_REVIEW, GuaranteeStatus.PENDING}),
    "return to officer": frozenset({GuaranteeStatus.SENT_TO_RISK}),
    "issue": _ANY,
    "activate": _ANY,
    "cancel": _ANY,
    "claim": _ANY,
    "expire": _ANY,
}

RESULT: dict[str, GuaranteeStatus] = {
    "submit": GuaranteeStatus.SUBMITTED,
    "send to risk": GuaranteeStatus.SENT_TO_RISK,
    "return to officer": GuaranteeStatus.UNDER_REVIEW,
    "issue": GuaranteeStatus.ISSUED,
    "activate": GuaranteeStatus.ACTIVE,
    "cancel": GuaranteeStatus.CANCELLED,
    "claim": GuaranteeStatus.CLAIMED,
    "expire": GuaranteeStatus.EXPIRED,
}

PENDING_APPROVAL = (GuaranteeStatus.SUBMITTED, GuaranteeStatus.UNDER_REVIEW, GuaranteeStatus.PENDING)


def is_allowed(operation: str, current: GuaranteeStatus) -> bool:
    return current in ALLOWED_FROM[operation]


def ensure_allowed(operation: str, current: GuaranteeStatus) -> GuaranteeStatus:
    if not is_allowed(operation, current):
        raise InvalidState(ENTITY, current, operation)
    return RESULT[operation]


def available_operations(current: GuaranteeStatus) -> list[str]:
    return [op for op, allowed in ALLOWED_FROM.items() if current in allowed]
