"""
Core Data Models for the Finance Tracker

These models define the schemas for bills as they move through the system:
1. BillTemplate - what the user authored (possibly recurring)
2. BillInstance - one concrete, dated occurrence shown in a month view
3. OccurrenceKey - identity of one occurrence of a recurring series

DESIGN DECISION: We use Pydantic v2 models everywhere.
Templates are owned by the registry and replaced (never mutated in place)
on update, so a materialized month is always a consistent snapshot.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Recurrence(str, Enum):
    """How often a bill repeats."""
    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class UpdateScope(str, Enum):
    """
    Which occurrences an edit or deletion applies to.

    THIS_OCCURRENCE only touches the selected instance.
    ALL_FUTURE touches the template (and thus every occurrence it still generates).
    """
    THIS_OCCURRENCE = "this_occurrence"
    ALL_FUTURE = "all_future"


def new_bill_id() -> str:
    """Generate a fresh bill/instance identifier."""
    return str(uuid4())


# =============================================================================
# OCCURRENCE KEY
# =============================================================================

class OccurrenceKey(BaseModel):
    """
    Identifies one occurrence of a recurring series.

    Frozen so it can key the override maps. The template id is compared
    exactly, never by prefix.
    """
    model_config = ConfigDict(frozen=True)

    template_id: str
    occurrence_date: date

    def __str__(self) -> str:
        return f"{self.template_id}-{self.occurrence_date.isoformat()}"


# =============================================================================
# BILL MODELS
# =============================================================================

class BillTemplate(BaseModel):
    """
    A user-authored bill definition.

    For recurring templates, due_date is the anchor (first occurrence).
    paid/skipped only matter for non-recurring templates, whose single
    instance IS the template.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_bill_id,
        description="Unique template ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Bill name"
    )
    amount: Decimal = Field(
        ...,
        description="Amount in a single currency unit"
    )
    due_date: date = Field(
        ...,
        description="Due date of the first occurrence"
    )
    recurrence: Recurrence = Recurrence.NONE
    paid: bool = False
    skipped: bool = False
    deleted_from_date: Optional[date] = Field(
        default=None,
        description="No occurrence on or after this date is generated"
    )

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != Recurrence.NONE

    def is_cut_off(self, day: date) -> bool:
        """Check whether the template no longer generates an occurrence on `day`."""
        return self.deleted_from_date is not None and day >= self.deleted_from_date


class BillInstance(BaseModel):
    """
    One concrete, dated bill shown in the month view.

    original_id is a back-reference to the owning template for recurring
    occurrences; it is None when the instance is a non-recurring template.
    occurrence_date is the series date the instance was generated for and
    stays fixed even if the user moves this occurrence's due_date.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_bill_id)
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal
    due_date: date
    recurrence: Recurrence = Recurrence.NONE
    paid: bool = False
    skipped: bool = False
    original_id: Optional[str] = None
    occurrence_date: Optional[date] = None
    deleted_from_date: Optional[date] = None

    @property
    def template_id(self) -> str:
        """ID of the template that owns this instance."""
        return self.original_id or self.id

    @property
    def occurrence_key(self) -> OccurrenceKey:
        return OccurrenceKey(
            template_id=self.template_id,
            occurrence_date=self.occurrence_date or self.due_date,
        )

    @classmethod
    def from_template(cls, template: BillTemplate) -> "BillInstance":
        """The single instance of a non-recurring template."""
        return cls(
            id=template.id,
            name=template.name,
            amount=template.amount,
            due_date=template.due_date,
            recurrence=template.recurrence,
            paid=template.paid,
            skipped=template.skipped,
            deleted_from_date=template.deleted_from_date,
        )

    @classmethod
    def synthesize(cls, template: BillTemplate, due_date: date) -> "BillInstance":
        """A fresh, unpaid occurrence of a recurring template."""
        return cls(
            name=template.name,
            amount=template.amount,
            due_date=due_date,
            recurrence=template.recurrence,
            paid=False,
            skipped=False,
            original_id=template.id,
            occurrence_date=due_date,
            deleted_from_date=template.deleted_from_date,
        )


class BillChanges(BaseModel):
    """
    A partial update to a bill.

    Only fields that were explicitly set are applied
    (see `model_dump(exclude_unset=True)`).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[Decimal] = None
    due_date: Optional[date] = None
    recurrence: Optional[Recurrence] = None
    paid: Optional[bool] = None
    skipped: Optional[bool] = None

    def as_updates(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

    def template_updates(self) -> dict:
        """Updates that make sense on a template (series-level fields only)."""
        updates = self.as_updates()
        updates.pop("paid", None)
        updates.pop("skipped", None)
        return updates


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, parseable values)
    Stage 2: Semantic validation (logic checks)
    """

    schema_valid: bool
    semantic_valid: bool
    is_valid: bool

    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# FORM INPUT
# =============================================================================

class BillForm(BaseModel):
    """
    Raw bill input as typed by the user.

    CRITICAL: This is UNVERIFIED data. It must pass BillFormValidator
    before a BillTemplate is created from it.
    """

    name: Optional[str] = None
    amount: Optional[Union[Decimal, int, float, str]] = None
    due_date: Optional[Union[date, str]] = None
    recurrence: Union[Recurrence, str] = Recurrence.NONE
