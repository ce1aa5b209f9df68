"""
Todo, paycheck and summary models.

Todos and paychecks are plain dated records with no recurrence semantics.
MonthSummary is the read-only aggregate shown next to the bill list.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.models.bill import new_bill_id


class Todo(BaseModel):
    """A one-off task due on a given day."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_bill_id)
    task: str = Field(..., min_length=1, max_length=500)
    completed: bool = False
    due_date: date


class Paycheck(BaseModel):
    """Income received on a given day."""

    id: str = Field(default_factory=new_bill_id)
    amount: Decimal = Field(..., ge=0)
    date: date


class MonthSummary(BaseModel):
    """
    Aggregate figures for one month view.

    The weekly figures cover the calendar week that contains the first
    day of the month, restricted to days inside the month.
    """

    month_start: date
    month_end: date
    week_start: date
    week_end: date

    total_bills: Decimal = Decimal("0")
    unpaid_bills: Decimal = Decimal("0")
    total_paychecks: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")

    weekly_bills: Decimal = Decimal("0")
    weekly_paychecks: Decimal = Decimal("0")
    weekly_balance: Decimal = Decimal("0")

    completed_todos: int = Field(default=0, ge=0)
    total_todos: int = Field(default=0, ge=0)

    @property
    def financial_health(self) -> str:
        return "Review spending" if self.balance < 0 else "On track"
