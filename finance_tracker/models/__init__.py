"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.bill import (
    BillChanges,
    BillForm,
    BillInstance,
    BillTemplate,
    OccurrenceKey,
    Recurrence,
    UpdateScope,
    ValidationIssue,
    ValidationResult,
    new_bill_id,
)
from finance_tracker.models.ledger import (
    MonthSummary,
    Paycheck,
    Todo,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Bill models
    "BillChanges",
    "BillForm",
    "BillInstance",
    "BillTemplate",
    "OccurrenceKey",
    "Recurrence",
    "UpdateScope",
    "ValidationIssue",
    "ValidationResult",
    "new_bill_id",
    # Ledger models
    "MonthSummary",
    "Paycheck",
    "Todo",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
