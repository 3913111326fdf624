"""Ownership and beneficiary-identity access decisions.

Every read and every state transition on an instrument or a trade document
goes through these predicates. They are pure: callers load the rows and the
principal, these functions only decide.

Role gates for officer-only operations (approve, reject, issue, cancel,
delete) are enforced at the route layer with ``require_roles``.
"""

from __future__ import annotations

from typing import Protocol

from tradefin.core.security.auth import Actor
from tradefin.shared.enums import Role
from tradefin.shared.exceptions import NotAuthorized
from tradefin.shared.utils import normalize_identity


class Instrument(Protocol):
    reference_number: str
    beneficiary_name: str | None
    created_by: str | None


class Document(Protocol):
    trade_reference_number: str | None
    uploaded_by: str | None


def identities_of(actor: Actor) -> list[str]:
    """Normalized username, full name and email, in that order, blanks dropped."""
    out: list[str] = []
    for raw in (actor.username, actor.full_name, actor.email):
        value = normalize_identity(raw)
        if value and value not in out:
            out.append(value)
    return out


def identity_matches(identities: list[str], candidate: str | None) -> bool:
    target = normalize_identity(candidate)
    if target is None:
        return False
    return any(identity == target for identity in identities)


def is_creator(actor: Actor | None, instrument: Instrument | None) -> bool:
    if actor is None or instrument is None:
        return False
    return instrument.created_by is not None and actor.username == instrument.created_by


def is_beneficiary(actor: Actor | None, instrument: Instrument | None) -> bool:
    if actor is None or instrument is None:
        return False
    return identity_matches(identities_of(actor), instrument.beneficiary_name)


def can_view(actor: Actor | None, instrument: Instrument | None) -> bool:
    if actor is None or instrument is None:
        return False
    if actor.role in (Role.OFFICER, Role.RISK):
        return True
    return is_creator(actor, instrument) or is_beneficiary(actor, instrument)


def can_mutate(actor: Actor | None, instrument: Instrument | None) -> bool:
    # Beneficiary status never grants edit/submit/delete.
    return is_creator(actor, instrument)


def can_upload_for(actor: Actor | None, instrument: Instrument | None) -> bool:
    if actor is None or instrument is None:
        return False
    if actor.role == Role.OFFICER:
        return True
    return is_creator(actor, instrument) or is_beneficiary(actor, instrument)


def can_upload_standalone(actor: Actor | None) -> bool:
    return actor is not None and actor.role in (Role.CUSTOMER, Role.OFFICER)


def is_uploader(actor: Actor | None, document: Document) -> bool:
    if actor is None or not document.uploaded_by:
        return False
    return normalize_identity(actor.username) == normalize_identity(document.uploaded_by)


def can_view_document(actor: Actor | None, document: Document | None, instrument: Instrument | None = None) -> bool:
    """``instrument`` is the row behind ``document.trade_reference_number``, if any."""
    if actor is None or document is None:
        return False
    if actor.role in (Role.OFFICER, Role.RISK):
        return True
    if is_uploader(actor, document):
        return True
    if document.trade_reference_number and instrument is not None:
        return can_view(actor, instrument)
    return False


def enforce(allowed: bool, actor: Actor | None, resource: str) -> None:
    if not allowed:
        raise NotAuthorized(actor.username if actor else None, resource)
