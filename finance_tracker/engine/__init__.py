"""
Recurring bill engine.

Expander, override store, materializer and template registry.
"""

from finance_tracker.engine.materializer import materialize, materialize_template
from finance_tracker.engine.overrides import OverrideStore
from finance_tracker.engine.recurrence import expand, month_bounds, occurrence_after
from finance_tracker.engine.registry import BillRegistry

__all__ = [
    "BillRegistry",
    "OverrideStore",
    "expand",
    "materialize",
    "materialize_template",
    "month_bounds",
    "occurrence_after",
]
