"""
Audit Models for the Finance Tracker

Every user action on the dashboard is recorded as an audit event.
This provides:
1. Traceability of edits to recurring series
2. Debugging information when a month looks wrong
3. A visible history for the user

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Bills
    BILL_ADDED = "bill_added"
    BILL_UPDATED = "bill_updated"
    OCCURRENCE_EDITED = "occurrence_edited"
    OCCURRENCE_DELETED = "occurrence_deleted"
    SERIES_CUT_OFF = "series_cut_off"
    BILL_SKIPPED = "bill_skipped"
    BILL_NOT_FOUND = "bill_not_found"
    INPUT_REJECTED = "input_rejected"

    # Todos and paychecks
    TODO_ADDED = "todo_added"
    TODO_UPDATED = "todo_updated"
    TODO_DELETED = "todo_deleted"
    PAYCHECK_ADDED = "paycheck_added"
    PAYCHECK_DELETED = "paycheck_deleted"

    # Navigation
    MONTH_CHANGED = "month_changed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every user action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'todo', 'paycheck')"
    )
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one dashboard action)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    is_user_action: bool = True

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.bill_added(bill_id, name, amount, correlation_id)
        event = AuditEventBuilder.series_cut_off(template_id, cutoff, 3, correlation_id)
    """

    @staticmethod
    def bill_added(
        bill_id: str,
        name: str,
        amount: str,
        recurrence: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_ADDED,
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=correlation_id,
            description=f"Bill added: {name} - {amount} ({recurrence})",
            details={
                "name": name,
                "amount": amount,
                "recurrence": recurrence,
            },
        )

    @staticmethod
    def bill_updated(
        template_id: str,
        changes: dict,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATED,
            entity_type="bill",
            entity_id=template_id,
            correlation_id=correlation_id,
            description=f"Bill series updated: {', '.join(sorted(changes)) or 'no fields'}",
            details={"changes": _stringify(changes)},
        )

    @staticmethod
    def occurrence_edited(
        occurrence_key: str,
        changes: dict,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCE_EDITED,
            entity_type="occurrence",
            entity_id=occurrence_key,
            correlation_id=correlation_id,
            description=f"Single occurrence edited: {occurrence_key}",
            details={"changes": _stringify(changes)},
        )

    @staticmethod
    def occurrence_deleted(
        occurrence_key: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OCCURRENCE_DELETED,
            entity_type="occurrence",
            entity_id=occurrence_key,
            correlation_id=correlation_id,
            description=f"Single occurrence deleted: {occurrence_key}",
        )

    @staticmethod
    def series_cut_off(
        template_id: str,
        cutoff: date,
        cleared_overrides: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SERIES_CUT_OFF,
            entity_type="bill",
            entity_id=template_id,
            correlation_id=correlation_id,
            description=f"Bill deleted from {cutoff.isoformat()} onwards",
            details={
                "deleted_from_date": cutoff.isoformat(),
                "cleared_overrides": cleared_overrides,
            },
        )

    @staticmethod
    def bill_skipped(
        occurrence_key: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_SKIPPED,
            entity_type="occurrence",
            entity_id=occurrence_key,
            correlation_id=correlation_id,
            description=f"Bill skipped: {occurrence_key}",
        )

    @staticmethod
    def bill_not_found(
        instance_id: str,
        operation: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            entity_id=instance_id,
            correlation_id=correlation_id,
            description=f"{operation} ignored: no bill with id {instance_id}",
            details={"operation": operation},
        )

    @staticmethod
    def input_rejected(
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"{operation} ignored: input failed validation with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
        )

    @staticmethod
    def record_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        """Generic event for todo/paycheck list mutations."""
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
        )

    @staticmethod
    def month_changed(
        month_start: date,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MONTH_CHANGED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Viewing {month_start.strftime('%B %Y')}",
            details={"month_start": month_start.isoformat()},
        )


def _stringify(values: dict) -> dict:
    """Make change sets JSON-friendly for the structured log."""
    return {
        key: value.value if isinstance(value, Enum) else str(value)
        for key, value in values.items()
    }
