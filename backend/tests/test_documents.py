from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tradefin.core.security.auth import Actor
from tradefin.modules.documents import service as documents_service
from tradefin.shared.enums import Role


def _create_lc(client: TestClient, headers: dict) -> dict:
    r = client.post(
        "/lc",
        json={
            "applicant_name": "Acme Imports",
            "beneficiary_name": "Globex Exports",
            "amount": "50000.00",
            "currency": "USD",
            "expiry_date": (dt.date.today() + dt.timedelta(days=60)).isoformat(),
        },
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def _upload(client: TestClient, headers: dict, *, document_type: str = "Invoice", trade_reference: str | None = None, content: bytes = b"%PDF-1.4 test"):
    data = {"document_type": document_type}
    if trade_reference:
        data["trade_reference_number"] = trade_reference
    return client.post(
        "/documents",
        data=data,
        files={"file": ("invoice.pdf", content, "application/pdf")},
        headers=headers,
    )


def test_upload_stores_file_and_creates_active_document(client: TestClient, customer: dict, local_storage: str):
    lc = _create_lc(client, customer)
    r = _upload(client, customer, trade_reference=lc["reference_number"])
    assert r.status_code == 201, r.text
    doc = r.json()
    assert doc["status"] == "ACTIVE"
    assert doc["reference_number"].startswith("DOC")
    assert doc["uploaded_by"] == "acme"
    assert doc["file_size"] == len(b"%PDF-1.4 test")

    stored = list(Path(local_storage).iterdir())
    assert len(stored) == 1
    assert stored[0].suffix == ".pdf"
    assert not any(p.name.endswith(".part") for p in stored)

    download = client.get(f"/documents/{doc['id']}/download", headers=customer)
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 test"


def test_beneficiary_may_upload_for_instrument_but_stranger_may_not(
    client: TestClient, customer: dict, beneficiary: dict, stranger: dict
):
    lc = _create_lc(client, customer)
    assert _upload(client, beneficiary, trade_reference=lc["reference_number"]).status_code == 201
    assert _upload(client, stranger, trade_reference=lc["reference_number"]).status_code == 403


def test_upload_against_unknown_reference_is_denied(client: TestClient, customer: dict):
    assert _upload(client, customer, trade_reference="LC000MISSING").status_code == 403


def test_empty_file_is_rejected(client: TestClient, customer: dict):
    r = _upload(client, customer, content=b"")
    assert r.status_code == 400
    assert r.json()["error"] == "validation_error"


def test_standalone_document_visible_to_uploader_and_staff_only(
    client: TestClient, customer: dict, stranger: dict, risk_analyst: dict
):
    doc = _upload(client, customer).json()
    assert client.get(f"/documents/{doc['id']}", headers=customer).status_code == 200
    assert client.get(f"/documents/{doc['id']}", headers=risk_analyst).status_code == 200
    assert client.get(f"/documents/{doc['id']}", headers=stranger).status_code == 403


def test_linked_document_visible_to_instrument_beneficiary(client: TestClient, customer: dict, beneficiary: dict, stranger: dict):
    lc = _create_lc(client, customer)
    doc = _upload(client, customer, trade_reference=lc["reference_number"]).json()

    assert client.get(f"/documents/{doc['id']}", headers=beneficiary).status_code == 200
    listed = client.get("/documents", headers=beneficiary).json()["items"]
    assert [d["id"] for d in listed] == [doc["id"]]
    assert client.get("/documents", headers=stranger).json()["items"] == []

    by_trade = client.get(f"/documents/by-trade/{lc['reference_number']}", headers=beneficiary)
    assert by_trade.status_code == 200
    assert len(by_trade.json()) == 1
    assert client.get(f"/documents/by-trade/{lc['reference_number']}", headers=stranger).status_code == 403


def test_review_lifecycle_is_unconditional(client: TestClient, customer: dict, officer: dict):
    doc = _upload(client, customer, content=b"abc").json()
    doc_id = doc["id"]

    assert client.post(f"/documents/{doc_id}/submit", headers=customer).json()["status"] == "PENDING_REVIEW"
    assert [d["id"] for d in client.get("/documents/pending", headers=officer).json()] == [doc_id]

    rejected = client.post(f"/documents/{doc_id}/reject", json={"reason": "blurry scan"}, headers=officer).json()
    assert rejected["status"] == "REJECTED"
    assert rejected["description"].endswith(" | Rejection: blurry scan")

    assert client.post(f"/documents/{doc_id}/approve", headers=officer).json()["status"] == "APPROVED"
    assert client.post(f"/documents/{doc_id}/archive", headers=officer).json()["status"] == "ARCHIVED"
    assert client.post(f"/documents/{doc_id}/submit", headers=customer).json()["status"] == "PENDING_REVIEW"


def test_customer_cannot_approve(client: TestClient, customer: dict):
    doc = _upload(client, customer).json()
    assert client.post(f"/documents/{doc['id']}/approve", headers=customer).status_code == 403


def test_update_details(client: TestClient, customer: dict):
    doc = _upload(client, customer).json()
    r = client.put(
        f"/documents/{doc['id']}",
        json={"document_type": "Bill of Lading", "description": "Original BL"},
        headers=customer,
    )
    assert r.status_code == 200
    assert r.json()["document_type"] == "Bill of Lading"
    assert r.json()["trade_reference_number"] is None


def test_delete_removes_file_and_record(client: TestClient, customer: dict, officer: dict, local_storage: str):
    doc = _upload(client, customer).json()
    assert len(list(Path(local_storage).iterdir())) == 1

    assert client.delete(f"/documents/{doc['id']}", headers=officer).status_code == 204
    assert list(Path(local_storage).iterdir()) == []
    assert client.get(f"/documents/{doc['id']}", headers=officer).status_code == 404


def test_delete_tolerates_missing_file(client: TestClient, customer: dict, officer: dict, local_storage: str):
    doc = _upload(client, customer).json()
    for p in Path(local_storage).iterdir():
        p.unlink()
    assert client.delete(f"/documents/{doc['id']}", headers=officer).status_code == 204


def test_document_types_catalog(client: TestClient):
    types = client.get("/documents/types").json()
    assert "Invoice" in types
    assert "Bill of Lading" in types


def test_failed_commit_removes_the_stored_file(db: Session, local_storage: str, monkeypatch):
    def _fail() -> None:
        raise RuntimeError("database went away")

    monkeypatch.setattr(db, "commit", _fail)
    actor = Actor(username="acme", role=Role.CUSTOMER)

    with pytest.raises(RuntimeError):
        documents_service.upload_document(
            db,
            actor=actor,
            data=b"%PDF-1.4 orphan",
            file_name="orphan.pdf",
            content_type="application/pdf",
            document_type="Invoice",
        )

    assert list(Path(local_storage).iterdir()) == []
    assert documents_service.list_accessible(db, actor=actor) == []
