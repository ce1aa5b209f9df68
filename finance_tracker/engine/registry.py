"""
Bill Template Registry

The set of user-authored bill definitions, in the order they were added.

Templates are never physically removed: deleting a series only sets its
deleted_from_date cutoff, so months before the cutoff keep their history.
Updates replace the stored template with an updated copy.
"""

from datetime import date
from typing import Iterator, Optional

from finance_tracker.models.bill import BillTemplate


class BillRegistry:
    """Ordered collection of bill templates, addressable by id."""

    def __init__(self, templates: Optional[list[BillTemplate]] = None):
        self._templates: dict[str, BillTemplate] = {}
        for template in templates or []:
            self.add(template)

    def add(self, template: BillTemplate) -> BillTemplate:
        if template.id in self._templates:
            raise ValueError(f"Template {template.id} already registered")
        self._templates[template.id] = template
        return template

    def get(self, template_id: str) -> Optional[BillTemplate]:
        return self._templates.get(template_id)

    def update(self, template_id: str, updates: dict) -> Optional[BillTemplate]:
        """
        Apply field updates to a template.

        Returns the updated template, or None if the id is unknown.
        The id itself can never be changed.
        """
        current = self._templates.get(template_id)
        if current is None:
            return None

        updates = {k: v for k, v in updates.items() if k != "id"}
        updated = BillTemplate.model_validate({**current.model_dump(), **updates})
        self._templates[template_id] = updated
        return updated

    def cut_off(self, template_id: str, from_date: date) -> Optional[BillTemplate]:
        """Stop the template from generating occurrences on or after `from_date`."""
        return self.update(template_id, {"deleted_from_date": from_date})

    @property
    def templates(self) -> tuple[BillTemplate, ...]:
        """Snapshot of all templates in insertion order."""
        return tuple(self._templates.values())

    def __iter__(self) -> Iterator[BillTemplate]:
        return iter(self.templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates
