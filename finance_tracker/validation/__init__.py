"""Input validation package."""

from finance_tracker.validation.validator import BillFormValidator

__all__ = ["BillFormValidator"]
