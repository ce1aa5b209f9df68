"""
Main Orchestrator for the Finance Tracker

This module ties together the engine, validation, summaries and the audit
trail, and exposes the operations the dashboard UI calls:
1. Month navigation (previous / next / go to)
2. Bill mutations (add, update, delete, skip, mark paid)
3. Todo and paycheck list mutations
4. The month summary

DESIGN DECISION: The dashboard owns its state explicitly.
The registry and override store are plain objects held by one
FinanceDashboard; the displayed bill list is recomputed from
(templates, overrides, month) after every mutation and navigation,
never patched by hand.

Operations are total: unknown ids and invalid input are no-ops that
return False/None and are recorded in the audit trail.
"""

from datetime import date
from typing import Optional, Union
from uuid import UUID

from dateutil.relativedelta import relativedelta

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import get_settings
from finance_tracker.engine import BillRegistry, OverrideStore, materialize, month_bounds
from finance_tracker.models.audit import AuditEventBuilder, AuditEventType
from finance_tracker.models.bill import (
    BillChanges,
    BillInstance,
    BillTemplate,
    OccurrenceKey,
    Recurrence,
    UpdateScope,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.models.ledger import MonthSummary, Paycheck, Todo
from finance_tracker.queries import summarize_month
from finance_tracker.validation import BillFormValidator
from finance_tracker.validation.validator import parse_date


class FinanceDashboard:
    """
    State and operations behind the month view.

    Flow for every bill mutation:
    1. Resolve the instance id to its owning template
    2. Validate the input
    3. Write to the registry or the override store
    4. Re-materialize the viewed month
    5. Audit
    """

    def __init__(
        self,
        registry: Optional[BillRegistry] = None,
        overrides: Optional[OverrideStore] = None,
        month: Optional[date] = None,
        validator: Optional[BillFormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        week_start_day: Optional[int] = None,
    ):
        settings = get_settings().app

        self._registry = registry if registry is not None else BillRegistry()
        self._overrides = overrides if overrides is not None else OverrideStore()
        self._validator = validator or BillFormValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._week_start_day = (
            settings.week_start_day if week_start_day is None else week_start_day
        )
        self._debug = settings.debug_mode

        self._todos: list[Todo] = []
        self._paychecks: list[Paycheck] = []
        self._month = (month or date.today()).replace(day=1)
        self._bills: list[BillInstance] = []
        self.refresh()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def registry(self) -> BillRegistry:
        return self._registry

    @property
    def overrides(self) -> OverrideStore:
        return self._overrides

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def current_month(self) -> date:
        """First day of the viewed month."""
        return self._month

    @property
    def month_bounds(self) -> tuple[date, date]:
        return month_bounds(self._month)

    @property
    def bills(self) -> tuple[BillInstance, ...]:
        """The materialized bills of the viewed month."""
        return tuple(self._bills)

    @property
    def todos(self) -> tuple[Todo, ...]:
        """Todos due in the viewed month."""
        start, end = self.month_bounds
        return tuple(t for t in self._todos if start <= t.due_date <= end)

    @property
    def paychecks(self) -> tuple[Paycheck, ...]:
        """Paychecks received in the viewed month."""
        start, end = self.month_bounds
        return tuple(p for p in self._paychecks if start <= p.date <= end)

    def refresh(self) -> None:
        """Recompute the viewed month's bills from templates and overrides."""
        self._bills = materialize(self._registry, self._overrides, self._month)

    def summary(self) -> MonthSummary:
        return summarize_month(
            self._month,
            self._bills,
            self._paychecks,
            self._todos,
            week_start_day=self._week_start_day,
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def previous_month(self) -> date:
        return self.go_to_month(self._month - relativedelta(months=1))

    def next_month(self) -> date:
        return self.go_to_month(self._month + relativedelta(months=1))

    def go_to_month(self, day: date) -> date:
        """View the month containing `day`; returns its first day."""
        self._month = day.replace(day=1)
        self.refresh()
        if self._debug:
            self._audit_logger.log(AuditEventBuilder.month_changed(self._month))
        return self._month

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    def add_bill(
        self,
        name: Optional[str],
        amount,
        due_date,
        recurrence: Union[Recurrence, str] = Recurrence.NONE,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[BillTemplate]:
        """
        Create a bill template.

        Returns the new template, or None if the input was invalid
        (nothing is created in that case).
        """
        correlation_id = correlation_id or create_correlation_id()

        form = {"name": name, "amount": amount, "due_date": due_date, "recurrence": recurrence}
        result, template = self._validator.build_template(form)
        if template is None:
            self._reject("add_bill", result, correlation_id)
            return None

        self._registry.add(template)
        self.refresh()

        self._audit_logger.log(AuditEventBuilder.bill_added(
            bill_id=template.id,
            name=template.name,
            amount=str(template.amount),
            recurrence=template.recurrence.value,
            correlation_id=correlation_id,
        ))
        return template

    def update_bill(
        self,
        instance_id: str,
        changes: Union[BillChanges, dict],
        scope: UpdateScope = UpdateScope.THIS_OCCURRENCE,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Edit a bill.

        THIS_OCCURRENCE stores an edit override for the selected occurrence.
        ALL_FUTURE applies the changes to the template itself.
        A non-recurring bill is its own series and is always edited in place.
        """
        correlation_id = correlation_id or create_correlation_id()
        key = self._update(instance_id, changes, scope, "update_bill", correlation_id)
        return key is not None

    def set_paid(
        self,
        instance_id: str,
        paid: bool = True,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Mark one occurrence paid or unpaid."""
        return self.update_bill(
            instance_id,
            BillChanges(paid=paid),
            UpdateScope.THIS_OCCURRENCE,
            correlation_id=correlation_id,
        )

    def skip_bill(
        self,
        instance_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Skip one occurrence.

        The skip is stored like any single-occurrence edit, so it is still
        there after navigating away and back.
        """
        correlation_id = correlation_id or create_correlation_id()
        key = self._update(
            instance_id,
            BillChanges(skipped=True),
            UpdateScope.THIS_OCCURRENCE,
            "skip_bill",
            correlation_id,
            audited=False,
        )
        if key is None:
            return False

        self._audit_logger.log(AuditEventBuilder.bill_skipped(
            occurrence_key=str(key),
            correlation_id=correlation_id,
        ))
        return True

    def delete_bill(
        self,
        instance_id: str,
        scope: UpdateScope = UpdateScope.THIS_OCCURRENCE,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a bill.

        THIS_OCCURRENCE hides the selected occurrence only.
        ALL_FUTURE cuts the series off from the first day of the viewed
        month (not the occurrence's own date) and drops the overrides
        that fall on or after that cutoff.
        """
        correlation_id = correlation_id or create_correlation_id()

        resolved = self._resolve(instance_id)
        if resolved is None:
            self._audit_logger.log_bill_not_found(instance_id, "delete_bill", correlation_id)
            return False
        template, instance = resolved

        if scope == UpdateScope.ALL_FUTURE:
            cutoff = self._month
            self._registry.cut_off(template.id, cutoff)
            cleared = self._overrides.clear_for_template(template.id, cutoff)
            event = AuditEventBuilder.series_cut_off(
                template_id=template.id,
                cutoff=cutoff,
                cleared_overrides=cleared,
                correlation_id=correlation_id,
            )
        else:
            key = instance.occurrence_key
            self._overrides.set_deletion(key)
            self._bills = [b for b in self._bills if b.id != instance.id]
            event = AuditEventBuilder.occurrence_deleted(
                occurrence_key=str(key),
                correlation_id=correlation_id,
            )

        self.refresh()
        self._audit_logger.log(event)
        return True

    def find_bill(self, instance_id: str) -> Optional[BillInstance]:
        """The displayed instance with this id, if any."""
        return next((b for b in self._bills if b.id == instance_id), None)

    def _resolve(self, instance_id: str) -> Optional[tuple[BillTemplate, BillInstance]]:
        """
        Find the owning template and the occurrence an id refers to.

        Displayed instances are looked up first. A bare template id refers
        to the template's first occurrence, unless that occurrence is deleted
        or cut off.
        """
        instance = self.find_bill(instance_id)
        if instance is not None:
            template = self._registry.get(instance.template_id)
            if template is None:
                return None
            return template, instance

        template = self._registry.get(instance_id)
        if template is None:
            return None

        # A deleted or cut-off first occurrence is not a target.
        key = OccurrenceKey(template_id=template.id, occurrence_date=template.due_date)
        if template.is_cut_off(template.due_date) or self._overrides.is_deleted(key):
            return None
        if not template.is_recurring:
            return template, BillInstance.from_template(template)

        edited = self._overrides.get_edit(key)
        return template, edited or BillInstance.synthesize(template, template.due_date)

    def _update(
        self,
        instance_id: str,
        changes: Union[BillChanges, dict],
        scope: UpdateScope,
        operation: str,
        correlation_id: UUID,
        audited: bool = True,
    ) -> Optional[OccurrenceKey]:
        """Shared path of update_bill/set_paid/skip_bill; returns the touched key."""
        resolved = self._resolve(instance_id)
        if resolved is None:
            self._audit_logger.log_bill_not_found(instance_id, operation, correlation_id)
            return None
        template, instance = resolved

        result, parsed = self._validator.validate_changes(changes)
        if parsed is None:
            self._reject(operation, result, correlation_id)
            return None

        if not template.is_recurring:
            updates = parsed.as_updates()
            self._registry.update(template.id, updates)
            key = OccurrenceKey(
                template_id=template.id,
                occurrence_date=updates.get("due_date", template.due_date),
            )
            event = AuditEventBuilder.bill_updated(template.id, updates, correlation_id)
        elif scope == UpdateScope.ALL_FUTURE:
            updates = parsed.template_updates()
            # The occurrence's own date is not a new anchor for the series.
            if updates.get("due_date") == instance.due_date:
                del updates["due_date"]
            self._registry.update(template.id, updates)
            key = instance.occurrence_key
            event = AuditEventBuilder.bill_updated(template.id, updates, correlation_id)
        else:
            key = instance.occurrence_key
            updates = parsed.as_updates()
            updates.pop("recurrence", None)
            edited = instance.model_copy(update=updates)

            first, last = month_bounds(key.occurrence_date)
            if not first <= edited.due_date <= last:
                self._reject(operation, _moved_out_of_month(edited.due_date), correlation_id)
                return None

            self._overrides.set_edit(key, edited)
            event = AuditEventBuilder.occurrence_edited(str(key), updates, correlation_id)

        self.refresh()
        if audited:
            self._audit_logger.log(event)
        return key

    # ------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------

    def add_todo(self, task: Optional[str], due_date) -> Optional[Todo]:
        result, todo = self._validator.build_todo(task, due_date)
        if todo is None:
            self._reject("add_todo", result, None)
            return None

        self._todos.append(todo)
        self._audit_logger.log(AuditEventBuilder.record_changed(
            AuditEventType.TODO_ADDED, "todo", todo.id, f"Todo added: {todo.task}",
        ))
        return todo

    def update_todo(
        self,
        todo_id: str,
        task: Optional[str] = None,
        completed: Optional[bool] = None,
        due_date=None,
    ) -> bool:
        """Change a todo's task, completion or due date. Unknown ids are ignored."""
        index = _index_of(self._todos, todo_id)
        if index is None:
            return False

        updates: dict = {}
        if task is not None and task.strip():
            updates["task"] = task.strip()
        if completed is not None:
            updates["completed"] = completed
        if due_date is not None:
            parsed = parse_date(due_date)
            if isinstance(parsed, date):
                updates["due_date"] = parsed

        self._todos[index] = self._todos[index].model_copy(update=updates)
        self._audit_logger.log(AuditEventBuilder.record_changed(
            AuditEventType.TODO_UPDATED, "todo", todo_id,
            f"Todo updated: {', '.join(sorted(updates)) or 'no fields'}",
        ))
        return True

    def delete_todo(self, todo_id: str) -> bool:
        index = _index_of(self._todos, todo_id)
        if index is None:
            return False

        todo = self._todos.pop(index)
        self._audit_logger.log(AuditEventBuilder.record_changed(
            AuditEventType.TODO_DELETED, "todo", todo.id, f"Todo deleted: {todo.task}",
        ))
        return True

    # ------------------------------------------------------------------
    # Paychecks
    # ------------------------------------------------------------------

    def add_paycheck(self, amount, pay_date) -> Optional[Paycheck]:
        result, paycheck = self._validator.build_paycheck(amount, pay_date)
        if paycheck is None:
            self._reject("add_paycheck", result, None)
            return None

        self._paychecks.append(paycheck)
        self._audit_logger.log(AuditEventBuilder.record_changed(
            AuditEventType.PAYCHECK_ADDED, "paycheck", paycheck.id,
            f"Paycheck added: {paycheck.amount} on {paycheck.date.isoformat()}",
        ))
        return paycheck

    def delete_paycheck(self, paycheck_id: str) -> bool:
        index = _index_of(self._paychecks, paycheck_id)
        if index is None:
            return False

        paycheck = self._paychecks.pop(index)
        self._audit_logger.log(AuditEventBuilder.record_changed(
            AuditEventType.PAYCHECK_DELETED, "paycheck", paycheck.id,
            f"Paycheck deleted: {paycheck.amount} on {paycheck.date.isoformat()}",
        ))
        return True

    # ------------------------------------------------------------------

    def _reject(
        self,
        operation: str,
        result: ValidationResult,
        correlation_id: Optional[UUID],
    ) -> None:
        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in result.issues
            if i.severity == "error"
        ]
        self._audit_logger.log_input_rejected(operation, issues, correlation_id)


def _index_of(records: list, record_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if record.id == record_id:
            return index
    return None


def _moved_out_of_month(due_date: date) -> ValidationResult:
    return ValidationResult(
        schema_valid=True,
        semantic_valid=False,
        is_valid=False,
        issues=[ValidationIssue(
            field="due_date",
            issue_type="out_of_range",
            message=f"A single occurrence cannot move to another month ({due_date.isoformat()})",
            severity="error",
            suggested_fix="Edit all future bills to change the series date",
        )],
    )


def create_dashboard(month: Optional[date] = None) -> FinanceDashboard:
    """
    Factory function to create a dashboard with local-only audit logging.

    Args:
        month: Any day of the month to show first. Defaults to today.
    """
    return FinanceDashboard(month=month, audit_logger=AuditLogger())
