# tests/test_payments.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from core.errors import ConflictError, ValidationError
from services.invoices import create_invoice, get_invoice
from services.payments import (
    bulk_reconcile,
    create_payment,
    get_reconciliation_summary,
    list_unreconciled_payments,
    reconcile_payment,
    refund_payment,
)


@pytest.fixture
def invoice(org, lease):
    return create_invoice(org["id"], {
        "tenant_id": lease["tenant_id"],
        "unit_id": lease["unit_id"],
        "lease_id": lease["id"],
        "due_date": datetime(2026, 2, 5),
        "period_start": datetime(2026, 2, 1),
        "period_end": datetime(2026, 2, 28),
        "items": [{"description": "Rent", "amount": 10000, "type": "rent"}],
        "status": "sent",
    })


def _pay(org, tenant, amount, **extra):
    data = {"tenant_id": tenant["id"], "amount": amount, "payment_method": "cash"}
    data.update(extra)
    return create_payment(org["id"], data, processed_by="cashier-1")


def test_partial_payments_settle_invoice_when_covered(org, tenant, invoice):
    _pay(org, tenant, 4000, invoice_id=invoice["id"])
    assert get_invoice(org["id"], invoice["id"])["status"] == "sent"

    _pay(org, tenant, 6000, invoice_id=invoice["id"])
    settled = get_invoice(org["id"], invoice["id"])
    assert settled["status"] == "paid"
    assert settled["paid_at"] is not None


def test_pending_payment_does_not_settle(org, tenant, invoice):
    _pay(org, tenant, 10000, invoice_id=invoice["id"], status="pending")
    assert get_invoice(org["id"], invoice["id"])["status"] == "sent"


def test_refund_reopens_invoice(org, tenant, invoice):
    payment = _pay(org, tenant, 10000, invoice_id=invoice["id"])
    refunded = refund_payment(org["id"], payment["id"], reason="Duplicate", refunded_by="acct-1")
    assert refunded["status"] == "refunded"
    assert get_invoice(org["id"], invoice["id"])["status"] == "sent"

    with pytest.raises(ValidationError):
        refund_payment(org["id"], payment["id"])


def test_payment_validation(org, tenant, invoice):
    with pytest.raises(ValidationError):
        _pay(org, tenant, 0)

    _pay(org, tenant, 100, reference_number="TB-001")
    with pytest.raises(ConflictError):
        _pay(org, tenant, 100, reference_number="TB-001")


def test_reconcile_single_payment(org, tenant):
    payment = _pay(org, tenant, 2500, payment_method="bank_transfer")
    assert payment["reconciliation_status"] == "pending"

    result = reconcile_payment(org["id"], payment["id"], "acct-1", notes="Matched", bank_statement_reference="STMT-9")
    assert result["reconciliation_status"] == "reconciled"
    assert result["reconciled_by"] == "acct-1"
    assert result["provider_response"]["bank_statement_reference"] == "STMT-9"

    assert list_unreconciled_payments(org["id"]) == []


def test_only_completed_payments_reconcile(org, tenant):
    pending = _pay(org, tenant, 100, status="pending")
    with pytest.raises(ValidationError):
        reconcile_payment(org["id"], pending["id"], "acct-1")


def test_bulk_reconcile_reports_per_payment(org, tenant):
    good = _pay(org, tenant, 100)
    pending = _pay(org, tenant, 200, status="pending")

    result = bulk_reconcile(org["id"], [good["id"], pending["id"], "missing"], "acct-1", notes="Jan batch")

    assert result["summary"] == {"total": 3, "succeeded": 1, "failed": 2}
    failures = {r["payment_id"]: r["error"] for r in result["results"] if not r["success"]}
    assert failures[pending["id"]] == "Only completed payments can be reconciled"
    assert failures["missing"] == "Payment not found"

    with pytest.raises(ValidationError):
        bulk_reconcile(org["id"], [], "acct-1")


def test_reconciliation_summary(org, tenant):
    first = _pay(org, tenant, 100)
    _pay(org, tenant, 250.5)
    reconcile_payment(org["id"], first["id"], "acct-1")
    reconcile_payment(org["id"], _pay(org, tenant, 40)["id"], "acct-1", reconciliation_status="disputed")

    summary = get_reconciliation_summary(org["id"])
    assert summary["pending"] == {"count": 1, "amount": 250.5}
    assert summary["reconciled"] == {"count": 1, "amount": 100}
    assert summary["disputed"] == {"count": 1, "amount": 40}


def test_reconciliation_api(client: TestClient, org, tenant, headers_for):
    payment = _pay(org, tenant, 700)
    headers = headers_for("accountant", organization_id=org["id"], user_id="acct-7")

    response = client.get("/api/payments/reconciliation", headers=headers)
    assert [p["id"] for p in response.json()["data"]] == [payment["id"]]

    response = client.post(
        "/api/payments/reconciliation/bulk",
        headers=headers,
        json={"payment_ids": [payment["id"]], "bank_statement_reference": "CBE-42"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["summary"]["succeeded"] == 1

    response = client.get("/api/payments/reconciliation/summary", headers=headers)
    assert response.json()["data"]["reconciled"]["count"] == 1


def test_security_role_cannot_record_payments(client: TestClient, org, tenant, headers_for):
    headers = headers_for("security", organization_id=org["id"])
    response = client.post(
        "/api/payments",
        headers=headers,
        json={"tenant_id": tenant["id"], "amount": 10, "payment_method": "cash"},
    )
    assert response.status_code == 403


def test_patch_pending_payment_rejects_null_amount(client: TestClient, org, tenant, invoice, org_admin_headers):
    payment = _pay(org, tenant, 10000, invoice_id=invoice["id"], status="pending")

    response = client.patch(f"/api/payments/{payment['id']}", headers=org_admin_headers, json={"amount": None, "status": None})
    assert response.status_code == 400
    assert response.json()["detail"] == "Fields cannot be null: amount, status"

    response = client.patch(f"/api/payments/{payment['id']}", headers=org_admin_headers, json={"status": "completed"})
    assert response.status_code == 200
    assert get_invoice(org["id"], invoice["id"])["status"] == "paid"
