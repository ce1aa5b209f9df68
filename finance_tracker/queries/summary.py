"""
Month Summary

Deterministic aggregates over the materialized bills, paychecks and todos
of one month view:

- total bills (skipped bills excluded)
- unpaid bills (paid and skipped excluded)
- paychecks received in the month and the resulting balance
- the same figures for the calendar week containing the 1st of the month
- todo completion
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.config import get_settings
from finance_tracker.engine.recurrence import month_bounds
from finance_tracker.models.bill import BillInstance
from finance_tracker.models.ledger import MonthSummary, Paycheck, Todo


def week_bounds(day: date, week_start_day: int) -> tuple[date, date]:
    """
    Return the first and last day of the calendar week containing `day`.

    week_start_day uses date.weekday() numbering (0=Monday ... 6=Sunday).
    """
    start = day - timedelta(days=(day.weekday() - week_start_day) % 7)
    return start, start + timedelta(days=6)


def bills_total(bills: Iterable[BillInstance]) -> Decimal:
    """Sum of all bills that were not skipped."""
    return sum((b.amount for b in bills if not b.skipped), Decimal("0"))


def unpaid_total(bills: Iterable[BillInstance]) -> Decimal:
    """Sum of bills still to pay."""
    return sum(
        (b.amount for b in bills if not b.paid and not b.skipped),
        Decimal("0"),
    )


def paychecks_total(paychecks: Iterable[Paycheck]) -> Decimal:
    return sum((p.amount for p in paychecks), Decimal("0"))


def summarize_month(
    month: date,
    bills: Iterable[BillInstance],
    paychecks: Iterable[Paycheck] = (),
    todos: Iterable[Todo] = (),
    week_start_day: Optional[int] = None,
) -> MonthSummary:
    """
    Compute the summary for the month containing `month`.

    Bills, paychecks and todos outside the month are ignored, so callers
    may pass unfiltered collections.
    """
    if week_start_day is None:
        week_start_day = get_settings().app.week_start_day

    month_start, month_end = month_bounds(month)
    week_start, week_end = week_bounds(month_start, week_start_day)

    def in_month(day: date) -> bool:
        return month_start <= day <= month_end

    def in_week(day: date) -> bool:
        return week_start <= day <= week_end

    monthly_bills = [b for b in bills if in_month(b.due_date)]
    monthly_paychecks = [p for p in paychecks if in_month(p.date)]
    monthly_todos = [t for t in todos if in_month(t.due_date)]

    total_bills = bills_total(monthly_bills)
    total_paychecks = paychecks_total(monthly_paychecks)

    weekly_bills = bills_total(b for b in monthly_bills if in_week(b.due_date))
    weekly_paychecks = paychecks_total(p for p in monthly_paychecks if in_week(p.date))

    return MonthSummary(
        month_start=month_start,
        month_end=month_end,
        week_start=week_start,
        week_end=week_end,
        total_bills=total_bills,
        unpaid_bills=unpaid_total(monthly_bills),
        total_paychecks=total_paychecks,
        balance=total_paychecks - total_bills,
        weekly_bills=weekly_bills,
        weekly_paychecks=weekly_paychecks,
        weekly_balance=weekly_paychecks - weekly_bills,
        completed_todos=sum(1 for t in monthly_todos if t.completed),
        total_todos=len(monthly_todos),
    )
