"""
Override Store

Holds the user's per-occurrence exceptions to a recurring series:
- edits: OccurrenceKey -> the full instance snapshot to show instead
- deletions: OccurrenceKey set, occurrences that must not be shown

The store is a plain key-value container. It knows nothing about
templates or months; the materializer decides what an override means.
"""

from datetime import date
from typing import Optional

from finance_tracker.models.bill import BillInstance, OccurrenceKey


class OverrideStore:
    """Per-occurrence edits and deletions, keyed by (template id, occurrence date)."""

    def __init__(self):
        self._edits: dict[OccurrenceKey, BillInstance] = {}
        self._deletions: set[OccurrenceKey] = set()

    # ----------------------------------------------------------------- edits

    def set_edit(self, key: OccurrenceKey, instance: BillInstance) -> None:
        self._edits[key] = instance

    def get_edit(self, key: OccurrenceKey) -> Optional[BillInstance]:
        return self._edits.get(key)

    def clear_edits_for_template(self, template_id: str, from_date: date) -> int:
        """Remove the template's edits dated on or after `from_date`."""
        stale = _keys_from(self._edits, template_id, from_date)
        for key in stale:
            del self._edits[key]
        return len(stale)

    # ------------------------------------------------------------- deletions

    def set_deletion(self, key: OccurrenceKey) -> None:
        self._deletions.add(key)

    def is_deleted(self, key: OccurrenceKey) -> bool:
        return key in self._deletions

    def clear_deletions_for_template(self, template_id: str, from_date: date) -> int:
        """Remove the template's deletions dated on or after `from_date`."""
        stale = _keys_from(self._deletions, template_id, from_date)
        self._deletions.difference_update(stale)
        return len(stale)

    # ---------------------------------------------------------------- common

    def clear_for_template(self, template_id: str, from_date: date) -> int:
        """Drop every override of the template on or after `from_date`."""
        return (
            self.clear_edits_for_template(template_id, from_date)
            + self.clear_deletions_for_template(template_id, from_date)
        )

    @property
    def edit_count(self) -> int:
        return len(self._edits)

    @property
    def deletion_count(self) -> int:
        return len(self._deletions)


def _keys_from(keys, template_id: str, from_date: date) -> list[OccurrenceKey]:
    return [
        key for key in keys
        if key.template_id == template_id and key.occurrence_date >= from_date
    ]
