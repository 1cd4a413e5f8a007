# jobs/billing_job.py

"""
Nightly billing jobs.

The scheduler runs each step on its own trigger; `run()` executes all of
them in order and mails the combined report (used by external cron).
"""

from datetime import datetime
import traceback

from core.job_formatter import format_job_summary
from core.logging_config import logger
from core.notifications import notify
from core.utils import utcnow
from services.lease_invoicing import generate_lease_invoices, apply_late_fees
from services.leases import expire_leases
from services.subscriptions import expire_subscriptions


def run_lease_expiry(as_of: datetime = None) -> dict:
    as_of = as_of or utcnow()
    result = {
        "expired": expire_leases(as_of),
        "subscriptions_expired": expire_subscriptions(as_of),
    }
    logger.info(f"[JOB] Lease expiry: {result}")
    return result


def run_lease_invoicing(as_of: datetime = None) -> dict:
    return generate_lease_invoices(as_of or utcnow())


def run_late_fees(as_of: datetime = None) -> dict:
    return apply_late_fees(as_of or utcnow())


def run(as_of: datetime = None) -> dict:
    """Expire, invoice, then penalize. Always sends a report, success or failure."""
    start_time = utcnow()
    as_of = as_of or start_time

    try:
        summary = {
            "lease_expiry": run_lease_expiry(as_of),
            "lease_invoicing": run_lease_invoicing(as_of),
            "late_fees": run_late_fees(as_of),
        }
    except Exception as e:
        logger.error(f"[JOB] Billing run failed: {e}")
        notify(
            "[BMS] Billing Run Failed ❌",
            f"Error: {e}\n\nTraceback:\n{traceback.format_exc()}",
        )
        raise

    end_time = utcnow()
    report = format_job_summary(
        summary=summary,
        start_time=start_time,
        end_time=end_time,
        duration=(end_time - start_time).total_seconds(),
        title="Nightly Billing",
    )
    notify("[BMS] Nightly Billing Completed ✅", report)
    return summary


if __name__ == "__main__":
    run()
