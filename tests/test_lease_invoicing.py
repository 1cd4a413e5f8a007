# tests/test_lease_invoicing.py

from datetime import datetime

import pytest
from bson import ObjectId

from services.invoices import create_invoice, list_invoices
from services.lease_invoicing import apply_late_fees, calculate_late_fee, generate_lease_invoices
from services.leases import create_lease, get_lease


@pytest.fixture
def billed_lease(org, unit, tenant):
    return create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2026, 1, 31),
        "end_date": datetime(2026, 6, 30),
        "rent_amount": 10000,
        "deposit_amount": 20000,
        "due_day": 5,
        "vat_rate": 0.15,
        "additional_charges": [
            {"name": "Service fee", "amount": 500, "frequency": "monthly"},
            {"name": "Key deposit", "amount": 300, "frequency": "one-time"},
            {"name": "Insurance", "amount": 900, "frequency": "annually"},
        ],
        "penalty_config": {"late_fee_rate_per_day": 0.01, "late_fee_grace_days": 2, "late_fee_cap_days": 10},
    }, now=datetime(2026, 1, 31))


def test_first_invoice_includes_one_time_items(org, billed_lease):
    summary = generate_lease_invoices(as_of=datetime(2026, 1, 31, 2, 30))
    assert summary["created"] == 1
    assert summary["errors"] == []

    invoice = list_invoices(org["id"], lease_id=billed_lease["id"])[0]
    types = sorted(i["type"] for i in invoice["items"])
    assert types == ["charge", "charge", "deposit", "rent"]
    assert invoice["subtotal"] == 30800
    # VAT on rent and charges, never on the deposit
    assert invoice["tax"] == 1620
    assert invoice["status"] == "sent"
    assert invoice["period_start"] == datetime(2026, 1, 31)
    assert invoice["due_date"] == datetime(2026, 2, 5)

    lease = get_lease(org["id"], billed_lease["id"])
    assert lease["next_invoice_date"] == datetime(2026, 2, 28)


def test_invoicing_is_idempotent_and_advances(org, billed_lease):
    generate_lease_invoices(as_of=datetime(2026, 1, 31))
    again = generate_lease_invoices(as_of=datetime(2026, 1, 31))
    assert again["processed"] == 0

    second = generate_lease_invoices(as_of=datetime(2026, 2, 28))
    assert second["created"] == 1
    invoices = list_invoices(org["id"], lease_id=billed_lease["id"])
    assert len(invoices) == 2

    later = [i for i in invoices if i["period_start"] == datetime(2026, 2, 28)][0]
    assert sorted(i["type"] for i in later["items"]) == ["charge", "rent"]
    assert later["total"] == 12075


def test_manual_invoice_for_period_is_not_duplicated(org, billed_lease):
    create_invoice(org["id"], {
        "tenant_id": billed_lease["tenant_id"],
        "unit_id": billed_lease["unit_id"],
        "lease_id": billed_lease["id"],
        "due_date": datetime(2026, 2, 5),
        "period_start": datetime(2026, 1, 31),
        "period_end": datetime(2026, 2, 27),
        "items": [{"description": "Manual", "amount": 1, "type": "rent"}],
    })
    summary = generate_lease_invoices(as_of=datetime(2026, 1, 31))
    assert summary == {"processed": 1, "created": 0, "skipped": 1, "errors": []}
    assert get_lease(org["id"], billed_lease["id"])["next_invoice_date"] == datetime(2026, 2, 28)


def test_no_invoice_past_lease_end(org, unit, tenant):
    lease = create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2026, 1, 1),
        "end_date": datetime(2026, 1, 20),
        "rent_amount": 5000,
    }, now=datetime(2026, 1, 1))
    generate_lease_invoices(as_of=datetime(2026, 1, 1))
    summary = generate_lease_invoices(as_of=datetime(2026, 2, 2))

    assert summary["created"] == 0
    assert summary["skipped"] == 1
    invoices = list_invoices(org["id"], lease_id=lease["id"])
    assert len(invoices) == 1
    assert invoices[0]["period_end"] == datetime(2026, 1, 20)


@pytest.mark.parametrize("as_of, expected", [
    (datetime(2026, 2, 6), 0.0),      # inside grace
    (datetime(2026, 2, 10), 30.0),    # 5 late - 2 grace = 3 days
    (datetime(2026, 4, 1), 100.0),    # capped at 10 days
])
def test_calculate_late_fee(as_of, expected):
    config = {"late_fee_rate_per_day": 0.01, "late_fee_grace_days": 2, "late_fee_cap_days": 10}
    assert calculate_late_fee(1000, datetime(2026, 2, 5), as_of, config) == expected


def test_no_penalty_config_means_no_fee():
    assert calculate_late_fee(1000, datetime(2026, 2, 5), datetime(2026, 3, 5), None) == 0.0
    assert calculate_late_fee(1000, datetime(2026, 2, 5), datetime(2026, 3, 5), {"late_fee_rate_per_day": 0}) == 0.0


def test_apply_late_fees_replaces_penalty_line(org, billed_lease):
    generate_lease_invoices(as_of=datetime(2026, 1, 31))

    first = apply_late_fees(as_of=datetime(2026, 2, 10))
    assert first["marked_overdue"] == 1
    assert first["applied"] == 1

    second = apply_late_fees(as_of=datetime(2026, 2, 12))
    assert second["applied"] == 1
    assert second["marked_overdue"] == 0

    invoice = list_invoices(org["id"], lease_id=billed_lease["id"])[0]
    penalties = [i for i in invoice["items"] if i["type"] == "penalty"]
    assert len(penalties) == 1
    # 30800 base * 1% * (7 late - 2 grace)
    assert penalties[0]["amount"] == 1540
    assert invoice["status"] == "overdue"
    assert invoice["total"] == 30800 + 1540 + 1620


def test_apply_late_fees_reports_bad_penalty_config(org, billed_lease, mongo):
    generate_lease_invoices(as_of=datetime(2026, 1, 31))
    mongo.leases.update_one(
        {"_id": ObjectId(billed_lease["id"])},
        {"$set": {"penalty_config.late_fee_rate_per_day": "one percent"}},
    )

    summary = apply_late_fees(as_of=datetime(2026, 2, 10))

    assert summary["applied"] == 0
    assert summary["marked_overdue"] == 1
    assert len(summary["errors"]) == 1
    assert list_invoices(org["id"], lease_id=billed_lease["id"])[0]["status"] == "overdue"
