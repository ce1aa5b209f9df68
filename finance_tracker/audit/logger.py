"""
Audit Logger

DESIGN DECISION: Every user action on the dashboard is logged.
This provides:
1. Traceability of which edits shaped a month view
2. Debugging capability
3. A history the user can look at

The audit logger:
- Is synchronous (the dashboard has no suspension points)
- Keeps a bounded, append-only in-memory history
- Supports correlation IDs to trace related events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.config import get_settings
from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for the dashboard's history view)
    """

    def __init__(self, history_limit: Optional[int] = None):
        """
        Initialize audit logger.

        Args:
            history_limit: Maximum number of events kept in memory.
                    Defaults to the configured audit_history_limit.
        """
        if history_limit is None:
            history_limit = get_settings().app.audit_history_limit
        self._history: deque[AuditEvent] = deque(maxlen=history_limit)
        self._logger = structlog.get_logger("finance_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and append it to the history."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)

    @property
    def history(self) -> list[AuditEvent]:
        """All retained events, oldest first."""
        return list(self._history)

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """The most recent events, newest first."""
        return list(reversed(self._history))[:limit]

    def events_for_correlation(self, correlation_id: UUID) -> list[AuditEvent]:
        """All retained events of one dashboard action, in order."""
        return [e for e in self._history if e.correlation_id == correlation_id]

    def log_input_rejected(
        self,
        operation: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation that was ignored because its input was invalid."""
        self.log(AuditEventBuilder.input_rejected(
            operation=operation,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_bill_not_found(
        self,
        instance_id: str,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation that was ignored because its target is unknown."""
        self.log(AuditEventBuilder.bill_not_found(
            instance_id=instance_id,
            operation=operation,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., deleting a series).
    Pass it through all subsequent operations.
    """
    return uuid4()
