# tests/test_jobs.py

from datetime import datetime
from unittest.mock import patch

import pytest

from core.job_formatter import format_job_summary
from jobs import billing_job
from services.leases import create_lease, get_lease


def test_format_job_summary_lists_errors():
    report = format_job_summary(
        summary={
            "lease_expiry": {"expired": 2, "subscriptions_expired": 1},
            "lease_invoicing": {"processed": 3, "created": 2, "skipped": 0, "errors": ["lease x: boom"]},
            "late_fees": {"checked": 4, "applied": 1, "marked_overdue": 1, "errors": []},
        },
        start_time=datetime(2026, 2, 1, 2),
        end_time=datetime(2026, 2, 1, 2, 1),
        duration=60,
    )
    assert "Leases expired: 2" in report
    assert "Created: 2" in report
    assert "lease x: boom" in report


def test_run_expires_invoices_and_reports(org, unit, tenant):
    lease = create_lease(org["id"], {
        "tenant_id": tenant["id"],
        "unit_id": unit["id"],
        "start_date": datetime(2026, 1, 1),
        "end_date": datetime(2026, 12, 31),
        "rent_amount": 8000,
    }, now=datetime(2026, 1, 1))

    with patch("jobs.billing_job.notify") as notify:
        summary = billing_job.run(as_of=datetime(2026, 1, 1, 3))

    assert summary["lease_expiry"]["expired"] == 0
    assert summary["lease_invoicing"]["created"] == 1
    assert summary["late_fees"]["applied"] == 0
    assert get_lease(org["id"], lease["id"])["next_invoice_date"] == datetime(2026, 2, 1)

    subject, body = notify.call_args[0]
    assert "Completed" in subject
    assert "Created: 1" in body


def test_run_notifies_and_reraises_on_failure():
    with patch("jobs.billing_job.notify") as notify, \
         patch("jobs.billing_job.generate_lease_invoices", side_effect=RuntimeError("db down")):
        with pytest.raises(RuntimeError):
            billing_job.run(as_of=datetime(2026, 1, 1))

    subject, body = notify.call_args[0]
    assert "Failed" in subject
    assert "db down" in body
