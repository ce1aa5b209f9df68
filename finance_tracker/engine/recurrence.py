"""
Recurrence Expander

Given a recurring bill template and a month, produce the due dates that
fall inside that month.

Expansion always restarts from the template's anchor (its first due date),
so the result never depends on what was expanded before. Each step is taken
from the previous due date with relativedelta, which clamps to the last day
of a shorter month. The clamped day then carries forward:
Jan 31 -> Feb 29 -> Mar 29.
"""

from datetime import date, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta

from finance_tracker.models.bill import BillTemplate, Recurrence


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month containing `day`."""
    first = day.replace(day=1)
    last = first + relativedelta(months=1) - timedelta(days=1)
    return first, last


def occurrence_after(day: date, recurrence: Recurrence) -> date:
    """The due date one recurrence step after `day`."""
    if recurrence == Recurrence.WEEKLY:
        return day + timedelta(weeks=1)
    if recurrence == Recurrence.MONTHLY:
        return day + relativedelta(months=1)
    if recurrence == Recurrence.YEARLY:
        return day + relativedelta(months=12)
    raise ValueError(f"Template with recurrence '{recurrence.value}' cannot be expanded")


def expand(
    template: BillTemplate,
    month_start: date,
    month_end: date,
) -> Iterator[date]:
    """
    Yield the template's due dates within [month_start, month_end].

    Stops at the first date on or after the template's deleted_from_date.
    Dates are whole days, so a due date equal to month_end is included.
    """
    if not template.is_recurring:
        raise ValueError(f"Template {template.id} is not recurring")

    current = template.due_date
    while current <= month_end:
        if template.is_cut_off(current):
            return
        if current >= month_start:
            yield current
        current = occurrence_after(current, template.recurrence)
