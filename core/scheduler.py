# core/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
import traceback

from core.logging_config import logger
from core.notifications import notify
from jobs.billing_job import run_lease_expiry, run_lease_invoicing, run_late_fees


_scheduler = None


def _guarded(name, func):
    """Wrap a job so a failure is reported instead of killing the scheduler thread."""
    def job():
        logger.info(f"[SCHEDULER] Starting {name}...")
        try:
            result = func()
            logger.info(f"[SCHEDULER] {name} finished: {result}")
        except Exception as e:
            logger.error(f"[SCHEDULER] ❌ {name} failed: {e}")
            notify(
                f"[BMS] {name} Failed ❌",
                f"Error: {e}\n\nTraceback:\n{traceback.format_exc()}",
            )
    return job


# (job id, label, function, hour, minute) in UTC
JOBS = [
    ("lease_expiry_job", "Lease expiry", run_lease_expiry, 2, 0),
    ("lease_invoicing_job", "Lease invoicing", run_lease_invoicing, 2, 30),
    ("late_fee_job", "Late fees", run_late_fees, 3, 0),
]


def start_scheduler():
    """
    Initialize the APScheduler background process.
    Expiry runs first so freshly expired leases are not invoiced.
    """
    global _scheduler
    if _scheduler is not None:
        return _scheduler

    scheduler = BackgroundScheduler(timezone="UTC")
    for job_id, label, func, hour, minute in JOBS:
        scheduler.add_job(
            _guarded(label, func),
            trigger=CronTrigger(hour=hour, minute=minute),
            id=job_id,
            replace_existing=True,
        )

    scheduler.start()
    _scheduler = scheduler
    logger.info("⏰ Scheduler started: expiry 02:00, invoicing 02:30, late fees 03:00 UTC.")
    return scheduler


def shutdown_scheduler():
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
