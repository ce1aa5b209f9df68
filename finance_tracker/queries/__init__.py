"""Month summary queries package."""

from finance_tracker.queries.summary import summarize_month, week_bounds

__all__ = ["summarize_month", "week_bounds"]
