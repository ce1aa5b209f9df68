"""
Instance Materializer

Turns bill templates plus per-occurrence overrides into the list of bill
instances shown for one month.

materialize() is a pure function of (templates, overrides, month): it reads
both collections and returns a new list, never mutating either. Calling it
twice with the same inputs gives the same instances, except that occurrences
without an edit override get a fresh id each time.
"""

from datetime import date
from typing import Iterable

from finance_tracker.engine.overrides import OverrideStore
from finance_tracker.engine.recurrence import expand, month_bounds
from finance_tracker.models.bill import BillInstance, BillTemplate, OccurrenceKey


def materialize(
    templates: Iterable[BillTemplate],
    overrides: OverrideStore,
    month: date,
) -> list[BillInstance]:
    """
    Build the bill instances for the month containing `month`.

    Non-recurring bills come first (in template order), followed by each
    recurring template's occurrences in chronological order.
    """
    month_start, month_end = month_bounds(month)
    templates = list(templates)

    one_off = [
        BillInstance.from_template(template)
        for template in templates
        if not template.is_recurring
        and _one_off_visible(template, overrides, month_start, month_end)
    ]

    recurring: list[BillInstance] = []
    for template in templates:
        if template.is_recurring:
            recurring.extend(
                materialize_template(template, overrides, month_start, month_end)
            )

    return one_off + recurring


def materialize_template(
    template: BillTemplate,
    overrides: OverrideStore,
    month_start: date,
    month_end: date,
) -> list[BillInstance]:
    """Occurrences of one recurring template between month_start and month_end."""
    instances = []
    for due_date in expand(template, month_start, month_end):
        key = OccurrenceKey(template_id=template.id, occurrence_date=due_date)
        if overrides.is_deleted(key):
            continue
        edited = overrides.get_edit(key)
        if edited is not None:
            instances.append(edited)
        else:
            instances.append(BillInstance.synthesize(template, due_date))
    return instances


def _one_off_visible(
    template: BillTemplate,
    overrides: OverrideStore,
    month_start: date,
    month_end: date,
) -> bool:
    if not month_start <= template.due_date <= month_end:
        return False
    if template.is_cut_off(template.due_date):
        return False
    key = OccurrenceKey(template_id=template.id, occurrence_date=template.due_date)
    return not overrides.is_deleted(key)
