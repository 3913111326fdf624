from __future__ import annotations

import datetime as dt
from decimal import Decimal
from types import SimpleNamespace

from fastapi.testclient import TestClient

from tradefin.modules.compliance import evaluator
from tradefin.modules.letters_of_credit.models import LetterOfCredit

TODAY = dt.date(2026, 3, 1)


def _create_lc(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {
        "applicant_name": "Acme Imports",
        "beneficiary_name": "Globex Exports",
        "amount": "150000.00",
        "currency": "USD",
        "expiry_date": (dt.date.today() + dt.timedelta(days=90)).isoformat(),
    }
    payload.update(overrides)
    r = client.post("/lc", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _attach(client: TestClient, headers: dict, reference: str, document_type: str) -> None:
    r = client.post(
        "/documents",
        data={"document_type": document_type, "trade_reference_number": reference},
        files={"file": ("doc.pdf", b"%PDF-1.4 body", "application/pdf")},
        headers=headers,
    )
    assert r.status_code == 201, r.text


def _generate(client: TestClient, officer: dict, reference: str) -> dict:
    r = client.post("/compliance/generate", json={"transaction_reference": reference}, headers=officer)
    assert r.status_code == 200, r.text
    return r.json()


def test_letter_without_documents_is_non_compliant(client: TestClient, customer: dict, officer: dict):
    lc = _create_lc(client, customer)
    report = _generate(client, officer, lc["reference_number"])

    assert report["compliance_status"] == "NON_COMPLIANT"
    assert report["transaction_type"] == "LC"
    assert report["documents_validated"] is False
    assert report["party_check_passed"] is True
    assert report["risk_check_passed"] is True
    assert report["country_check_passed"] is True
    assert "No trade documents found for this transaction." in report["remarks"]
    assert report["reviewed_by"] == "Automated Check"


def test_regeneration_updates_the_single_report(client: TestClient, customer: dict, officer: dict):
    lc = _create_lc(client, customer)
    ref = lc["reference_number"]
    first = _generate(client, officer, ref)
    second = _generate(client, officer, ref)

    assert second["id"] == first["id"]
    assert second["compliance_status"] == first["compliance_status"]
    listed = client.get("/compliance", headers=officer).json()["items"]
    assert [r["transaction_reference"] for r in listed] == [ref]


def test_complete_documents_make_letter_compliant(client: TestClient, customer: dict, officer: dict):
    lc = _create_lc(client, customer)
    ref = lc["reference_number"]
    _attach(client, customer, ref, "Invoice")
    _attach(client, customer, ref, "Bill of Lading")

    report = _generate(client, officer, ref)
    assert report["compliance_status"] == "COMPLIANT"
    assert report["remarks"] == (
        "Required documents present. No risk assessment found. Country check passed. All checks passed."
    )

    dash = client.get("/compliance/dashboard", headers=officer).json()
    assert dash["compliant"] == 1
    assert dash["non_compliant"] == 0


def test_missing_bill_of_lading_is_reported(client: TestClient, customer: dict, officer: dict):
    lc = _create_lc(client, customer)
    _attach(client, customer, lc["reference_number"], "Invoice")
    report = _generate(client, officer, lc["reference_number"])
    assert report["compliance_status"] == "NON_COMPLIANT"
    assert "Bill of Lading is missing." in report["remarks"]


def test_high_risk_score_fails_compliance(client: TestClient, customer: dict, officer: dict, risk_analyst: dict):
    lc = _create_lc(client, customer)
    ref = lc["reference_number"]
    _attach(client, customer, ref, "Invoice")
    _attach(client, customer, ref, "Bill of Lading")
    client.post(
        "/risk/analyze",
        json={"transaction_reference": ref, "risk_score": "80", "risk_factors": {"sanctionsRisk": 3}},
        headers=risk_analyst,
    )

    report = _generate(client, officer, ref)
    assert report["compliance_status"] == "NON_COMPLIANT"
    assert report["risk_check_passed"] is False
    assert "High risk score detected" in report["remarks"]


def test_unknown_reference_yields_not_found_report(client: TestClient, officer: dict):
    report = _generate(client, officer, "LC999")
    assert report["compliance_status"] == "NON_COMPLIANT"
    assert report["remarks"] == "Transaction not found."
    assert report["transaction_type"] is None
    assert report["reviewed_by"] is None
    assert not any(
        report[k] for k in ("documents_validated", "risk_check_passed", "party_check_passed", "country_check_passed")
    )


def test_officer_review_survives_regeneration(client: TestClient, customer: dict, officer: dict):
    lc = _create_lc(client, customer)
    ref = lc["reference_number"]
    report = _generate(client, officer, ref)

    submitted = client.post(f"/compliance/{report['id']}/submit", headers=officer).json()
    assert submitted["reviewed_by"] == "officer1"
    assert _generate(client, officer, ref)["reviewed_by"] == "officer1"


def test_update_rejects_reference_clash(client: TestClient, customer: dict, officer: dict):
    first = _generate(client, officer, _create_lc(client, customer)["reference_number"])
    second = _generate(client, officer, _create_lc(client, customer)["reference_number"])

    r = client.put(
        f"/compliance/{second['id']}",
        json={"transaction_reference": first["transaction_reference"], "compliance_status": "ESCALATED"},
        headers=officer,
    )
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"

    r = client.put(
        f"/compliance/{second['id']}",
        json={"transaction_reference": second["transaction_reference"], "compliance_status": "ESCALATED"},
        headers=officer,
    )
    assert r.json()["compliance_status"] == "ESCALATED"
    listed = client.get("/compliance", params={"status": "ESCALATED"}, headers=officer).json()["items"]
    assert [x["id"] for x in listed] == [second["id"]]

    assert client.delete(f"/compliance/{second['id']}", headers=officer).status_code == 204
    assert client.get(f"/compliance/reference/{second['transaction_reference']}", headers=officer).status_code == 404


def test_compliance_is_officer_only(client: TestClient, customer: dict, risk_analyst: dict):
    body = {"transaction_reference": "LC1"}
    assert client.post("/compliance/generate", json=body, headers=customer).status_code == 403
    assert client.post("/compliance/generate", json=body, headers=risk_analyst).status_code == 403


def _letter(**kwargs) -> LetterOfCredit:
    values = {
        "amount": Decimal("1000"),
        "beneficiary_name": "Globex",
        "expiry_date": TODAY + dt.timedelta(days=30),
    }
    values.update(kwargs)
    return LetterOfCredit(**values)


def test_evaluator_collects_every_instrument_failure():
    result = evaluator.evaluate(
        _letter(amount=Decimal("0"), beneficiary_name="  ", expiry_date=TODAY - dt.timedelta(days=1)),
        document_types=["Commercial Invoice", "BOL"],
        risk_score=None,
        risk_assessed=False,
        restricted_countries=["IRAN"],
        today=TODAY,
    )
    assert not result.compliant
    assert result.remarks[:3] == ["LC has expired.", "Invalid LC amount.", "Beneficiary name is missing."]
    assert result.documents_validated
    assert not result.remarks_text().endswith("All checks passed.")


def test_risk_check_thresholds():
    remarks: list[str] = []
    assert evaluator.check_risk(Decimal("50"), remarks, assessed=True)
    assert remarks == []
    assert evaluator.check_risk(Decimal("70"), remarks, assessed=True)
    assert remarks == ["Moderate risk detected (70)."]
    assert not evaluator.check_risk(Decimal("70.01"), remarks, assessed=True)


def test_country_check_matches_restricted_substrings():
    remarks: list[str] = []
    assert not evaluator.check_country("Islamic Republic of Iran", ["IRAN"], remarks)
    assert remarks == ["Beneficiary country is in restricted list."]
    assert evaluator.check_country(evaluator.resolve_country(SimpleNamespace()), ["IRAN"], [])


def test_remarks_text_when_nothing_was_noted():
    result = evaluator.ComplianceResult(True, True, True, True)
    assert result.remarks_text() == evaluator.ALL_PASSED
