from __future__ import annotations

from types import SimpleNamespace

import pytest

from tradefin.core.security import access
from tradefin.core.security.auth import Actor
from tradefin.shared.enums import Role
from tradefin.shared.exceptions import NotAuthorized


def _lc(created_by: str | None = "acme", beneficiary: str | None = "Globex Exports"):
    return SimpleNamespace(reference_number="LC1", created_by=created_by, beneficiary_name=beneficiary)


def _doc(uploaded_by: str | None = "acme", trade_reference: str | None = None):
    return SimpleNamespace(uploaded_by=uploaded_by, trade_reference_number=trade_reference)


CREATOR = Actor(username="acme", role=Role.CUSTOMER, full_name="Acme Imports", email="ops@acme.test")
STRANGER = Actor(username="initech", role=Role.CUSTOMER)
OFFICER = Actor(username="officer1", role=Role.OFFICER)
RISK = Actor(username="risk1", role=Role.RISK)


def test_identity_matches_is_trimmed_and_case_insensitive():
    identities = access.identities_of(Actor(username="Globex", role=Role.CUSTOMER, full_name=" Globex Exports "))
    assert identities == ["globex", "globex exports"]
    assert access.identity_matches(identities, "  GLOBEX EXPORTS")
    assert not access.identity_matches(identities, "Globex Exports Ltd")
    assert not access.identity_matches(identities, None)
    assert not access.identity_matches(identities, "   ")


def test_creator_can_view_and_mutate():
    lc = _lc()
    assert access.can_view(CREATOR, lc)
    assert access.can_mutate(CREATOR, lc)


@pytest.mark.parametrize(
    "actor",
    [
        Actor(username="GLOBEX EXPORTS", role=Role.CUSTOMER),
        Actor(username="gx", role=Role.CUSTOMER, full_name="globex exports"),
        Actor(username="gx", role=Role.CUSTOMER, email=" Globex Exports "),
    ],
)
def test_beneficiary_views_but_never_mutates(actor: Actor):
    lc = _lc()
    assert access.can_view(actor, lc)
    assert not access.can_mutate(actor, lc)


def test_beneficiary_who_is_also_creator_can_mutate():
    actor = Actor(username="acme", role=Role.CUSTOMER, full_name="Globex Exports")
    assert access.can_mutate(actor, _lc())


def test_staff_view_everything_but_do_not_mutate_foreign_instruments():
    lc = _lc()
    for actor in (OFFICER, RISK):
        assert access.can_view(actor, lc)
        assert not access.can_mutate(actor, lc)


def test_no_principal_or_instrument_is_denied():
    assert not access.can_view(None, _lc())
    assert not access.can_view(CREATOR, None)
    assert not access.can_mutate(None, _lc())


def test_stranger_is_denied():
    assert not access.can_view(STRANGER, _lc())
    assert not access.can_mutate(STRANGER, _lc())


def test_creator_match_is_exact():
    actor = Actor(username="ACME", role=Role.CUSTOMER)
    assert not access.is_creator(actor, _lc())


def test_upload_for_trade_reference():
    lc = _lc()
    assert access.can_upload_for(CREATOR, lc)
    assert access.can_upload_for(Actor(username="gx", role=Role.CUSTOMER, full_name="Globex Exports"), lc)
    assert access.can_upload_for(OFFICER, lc)
    assert not access.can_upload_for(RISK, lc)
    assert not access.can_upload_for(STRANGER, lc)
    assert not access.can_upload_for(CREATOR, None)


def test_standalone_upload_roles():
    assert access.can_upload_standalone(CREATOR)
    assert access.can_upload_standalone(OFFICER)
    assert not access.can_upload_standalone(RISK)
    assert not access.can_upload_standalone(None)


def test_document_without_trade_reference_visible_to_uploader_and_staff_only():
    doc = _doc(uploaded_by="ACME")
    assert access.can_view_document(CREATOR, doc)
    assert access.can_view_document(OFFICER, doc)
    assert access.can_view_document(RISK, doc)
    assert not access.can_view_document(STRANGER, doc)


def test_document_with_trade_reference_follows_instrument_access():
    doc = _doc(uploaded_by="someone-else", trade_reference="LC1")
    beneficiary = Actor(username="gx", role=Role.CUSTOMER, email="globex exports")
    assert access.can_view_document(beneficiary, doc, _lc())
    assert not access.can_view_document(STRANGER, doc, _lc())
    assert not access.can_view_document(beneficiary, doc, None)


def test_enforce_raises_not_authorized():
    access.enforce(True, CREATOR, "anything")
    with pytest.raises(NotAuthorized) as exc:
        access.enforce(False, STRANGER, "view LetterOfCredit:1")
    assert exc.value.username == "initech"
    assert exc.value.resource == "view LetterOfCredit:1"
