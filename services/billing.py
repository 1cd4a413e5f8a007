# services/billing.py

"""
Billing-cycle date arithmetic shared by leases, invoicing and subscriptions.

Month arithmetic uses dateutil's relativedelta, which clamps to the last day
of the target month (Jan 31 + 1 month → Feb 28/29).
"""

import calendar
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from models.enums import BillingCycle


CYCLE_MONTHS = {
    BillingCycle.monthly.value: 1,
    BillingCycle.quarterly.value: 3,
    BillingCycle.annually.value: 12,
}


def cycle_months(cycle: str) -> int:
    try:
        return CYCLE_MONTHS[str(cycle)]
    except KeyError:
        raise ValueError(f"Unknown billing cycle: {cycle}")


def add_billing_cycle(start: datetime, cycle: str, count: int = 1) -> datetime:
    return start + relativedelta(months=cycle_months(cycle) * count)


def billing_period_end(period_start: datetime, cycle: str, lease_end: Optional[datetime] = None) -> datetime:
    """Last day covered by a period that starts on period_start."""
    end = add_billing_cycle(period_start, cycle) - timedelta(days=1)
    if lease_end is not None and end > lease_end:
        return lease_end
    return end


def clamp_day(year: int, month: int, day: int) -> int:
    return min(day, calendar.monthrange(year, month)[1])


def compute_due_date(period_start: datetime, due_day: int) -> datetime:
    """
    Due date for a period: due_day of the period's month (clamped to month length),
    rolled one month forward when that falls before the period starts.
    """
    due = period_start.replace(
        day=clamp_day(period_start.year, period_start.month, due_day),
        hour=0, minute=0, second=0, microsecond=0,
    )
    start_day = period_start.replace(hour=0, minute=0, second=0, microsecond=0)
    if due < start_day:
        nxt = start_day + relativedelta(months=1)
        due = nxt.replace(day=clamp_day(nxt.year, nxt.month, due_day))
    return due


def monthly_equivalent(amount: float, cycle: str) -> float:
    """Normalize a per-cycle amount to a monthly figure (quarterly/3, annually/12)."""
    return float(amount or 0) / cycle_months(cycle)


def days_late(due_date: datetime, as_of: datetime) -> int:
    """Whole days elapsed since due_date; zero or negative when not yet late."""
    return (as_of - due_date) // timedelta(days=1)
