from __future__ import annotations

import datetime as dt

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import Session

from tradefin.modules.guarantees.models import BankGuarantee


def _request_bg(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {
        "applicant_name": "Acme Imports",
        "beneficiary_name": "Globex Exports",
        "amount": "250000.00",
        "currency": "USD",
        "guarantee_type": "Performance",
        "validity_period": (dt.date.today() + dt.timedelta(days=120)).isoformat(),
        "purpose": "Supply contract 2026-17",
    }
    payload.update(overrides)
    r = client.post("/guarantees", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_request_creates_draft(client: TestClient, customer: dict):
    bg = _request_bg(client, customer)
    assert bg["status"] == "DRAFT"
    assert bg["reference_number"].startswith("BG")
    assert bg["created_by"] == "acme"


def test_issue_activate_then_cancel_appends_reason(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    bg_id = bg["id"]
    client.post(f"/guarantees/{bg_id}/submit", headers=customer)

    issued = client.post(f"/guarantees/{bg_id}/issue", headers=officer).json()
    assert issued["status"] == "ISSUED"
    assert issued["issue_date"] == dt.date.today().isoformat()
    assert client.post(f"/guarantees/{bg_id}/activate", headers=officer).json()["status"] == "ACTIVE"

    r = client.post(f"/guarantees/{bg_id}/cancel", json={"reason": "breach of contract"}, headers=officer)
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "CANCELLED"
    assert body["purpose"].endswith(" | Cancellation Reason: breach of contract")


def test_cancel_requires_reason(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    assert client.post(f"/guarantees/{bg['id']}/cancel", json={}, headers=officer).status_code == 422


def test_terminal_looking_states_still_transition(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    client.post(f"/guarantees/{bg['id']}/claim", headers=officer)
    assert client.post(f"/guarantees/{bg['id']}/activate", headers=officer).json()["status"] == "ACTIVE"
    client.post(f"/guarantees/{bg['id']}/cancel", json={"reason": "x"}, headers=officer)
    assert client.post(f"/guarantees/{bg['id']}/submit", headers=customer).json()["status"] == "SUBMITTED"


@pytest.mark.parametrize("blocked_after", ["issue", "activate", "claim", "expire"])
def test_send_to_risk_refused_outside_review_states(client: TestClient, customer: dict, officer: dict, blocked_after):
    bg = _request_bg(client, customer)
    client.post(f"/guarantees/{bg['id']}/{blocked_after}", headers=officer)
    before = client.get(f"/guarantees/{bg['id']}", headers=officer).json()["status"]

    r = client.post(f"/guarantees/{bg['id']}/send-to-risk", headers=officer)
    assert r.status_code == 409
    assert r.json()["entity"] == "BankGuarantee"
    assert client.get(f"/guarantees/{bg['id']}", headers=officer).json()["status"] == before


def test_draft_cannot_go_to_risk(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    assert client.post(f"/guarantees/{bg['id']}/send-to-risk", headers=officer).status_code == 409


def test_risk_round_trip_via_return_to_officer(client: TestClient, customer: dict, officer: dict, risk_analyst: dict):
    bg = _request_bg(client, customer)
    client.post(f"/guarantees/{bg['id']}/submit", headers=customer)
    assert client.post(f"/guarantees/{bg['id']}/send-to-risk", headers=officer).json()["status"] == "SENT_TO_RISK"

    assert client.post(f"/guarantees/{bg['id']}/return-to-officer", headers=officer).status_code == 403
    r = client.post(f"/guarantees/{bg['id']}/return-to-officer", headers=risk_analyst)
    assert r.json()["status"] == "UNDER_REVIEW"

    # Only valid from SENT_TO_RISK.
    assert client.post(f"/guarantees/{bg['id']}/return-to-officer", headers=risk_analyst).status_code == 409
    # UNDER_REVIEW may go back to risk.
    assert client.post(f"/guarantees/{bg['id']}/send-to-risk", headers=officer).status_code == 200


def test_update_keeps_status(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    client.post(f"/guarantees/{bg['id']}/issue", headers=officer)

    r = client.put(
        f"/guarantees/{bg['id']}",
        json={
            "applicant_name": "Acme Imports",
            "beneficiary_name": "Globex Exports",
            "amount": "300000.00",
            "currency": "eur",
            "guarantee_type": "Bid",
            "validity_period": (dt.date.today() + dt.timedelta(days=30)).isoformat(),
            "purpose": "Tender 88",
        },
        headers=customer,
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "ISSUED"
    assert r.json()["currency"] == "EUR"
    assert r.json()["guarantee_type"] == "Bid"


def test_beneficiary_sees_but_cannot_edit(client: TestClient, customer: dict, beneficiary: dict):
    bg = _request_bg(client, customer)
    detail = client.get(f"/guarantees/{bg['id']}", headers=beneficiary)
    assert detail.status_code == 200
    assert detail.json()["can_edit"] is False
    assert client.post(f"/guarantees/{bg['id']}/submit", headers=beneficiary).status_code == 403


def test_pending_includes_submitted(client: TestClient, customer: dict, officer: dict):
    a = _request_bg(client, customer)
    _request_bg(client, customer)
    client.post(f"/guarantees/{a['id']}/submit", headers=customer)
    pending = client.get("/guarantees/pending", headers=officer).json()
    assert [p["id"] for p in pending] == [a["id"]]


def test_cancel_audit_records_structured_reason(client: TestClient, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    client.post(f"/guarantees/{bg['id']}/cancel", json={"reason": "duplicate"}, headers=officer)
    audit = client.get(f"/guarantees/{bg['id']}/audit", headers=customer).json()
    assert audit[-1]["action"] == "bg.cancel"
    assert audit[-1]["after"]["reason"] == {"label": "Cancellation Reason", "text": "duplicate"}
    assert audit[-1]["actor_id"] == "officer1"


def test_stale_guarantee_update_is_a_conflict(client: TestClient, db: Session, customer: dict, officer: dict):
    bg = _request_bg(client, customer)
    row = db.get(BankGuarantee, bg["id"])
    table = BankGuarantee.__table__
    db.execute(update(table).where(table.c.id == bg["id"]).values(version=row.version + 1))

    r = client.post(f"/guarantees/{bg['id']}/issue", headers=officer)
    assert r.status_code == 409
    body = r.json()
    assert body["error"] == "concurrent_modification"
    assert "request_id" in body
