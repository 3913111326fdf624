from __future__ import annotations

import datetime as dt

from fastapi.testclient import TestClient


def _create_lc(client: TestClient, headers: dict, beneficiary_name: str = "Globex Exports") -> dict:
    r = client.post(
        "/lc",
        json={
            "applicant_name": "Acme Imports",
            "beneficiary_name": beneficiary_name,
            "amount": "75000.00",
            "currency": "USD",
            "expiry_date": (dt.date.today() + dt.timedelta(days=45)).isoformat(),
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_staff_dashboard_counts(client: TestClient, customer: dict, officer: dict, risk_analyst: dict):
    first = _create_lc(client, customer)
    second = _create_lc(client, customer)
    client.post(f"/lc/{first['id']}/submit", headers=customer)
    client.post(f"/lc/{second['id']}/submit", headers=customer)
    client.post(f"/lc/{second['id']}/send-to-risk", headers=officer)

    r = client.get("/dashboard", headers=risk_analyst)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total_letters_of_credit"] == 2
    assert body["pending_letters_of_credit"] == 1
    assert body["letters_sent_to_risk"] == 1
    assert body["lc_status_counts"]["SUBMITTED"] == 1
    assert body["lc_status_counts"]["CLOSED"] == 0
    assert body["total_guarantees"] == 0
    assert len(body["recent_letters_of_credit"]) == 2
    assert set(body["compliance_status_counts"]) >= {"COMPLIANT", "NON_COMPLIANT"}


def test_staff_dashboard_refuses_customers(client: TestClient, customer: dict):
    assert client.get("/dashboard", headers=customer).status_code == 403


def test_customer_dashboard_counts_own_and_beneficiary_items(
    client: TestClient, customer: dict, beneficiary: dict, stranger: dict
):
    _create_lc(client, customer)
    _create_lc(client, customer, beneficiary_name="  globex exports ")
    _create_lc(client, customer, beneficiary_name="Someone Else Ltd")

    mine = client.get("/dashboard/me", headers=customer).json()
    assert mine["my_letters_of_credit"] == 3
    assert mine["beneficiary_letters_of_credit"] == 0

    theirs = client.get("/dashboard/me", headers=beneficiary).json()
    assert theirs["my_letters_of_credit"] == 0
    assert theirs["beneficiary_letters_of_credit"] == 2
    assert len(theirs["recent_letters_of_credit"]) == 2

    nobody = client.get("/dashboard/me", headers=stranger).json()
    assert nobody["beneficiary_letters_of_credit"] == 0
    assert nobody["accessible_documents"] == 0
    assert nobody["recent_letters_of_credit"] == []
