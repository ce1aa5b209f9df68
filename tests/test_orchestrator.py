"""
Flow tests for the FinanceDashboard.

These walk through the month view the way the UI drives it:
add bills, navigate, edit/skip/delete one occurrence or the whole series.
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from finance_tracker.audit import AuditLogger
from finance_tracker.models.audit import AuditEventType
from finance_tracker.models.bill import BillChanges, Recurrence, UpdateScope
from finance_tracker.orchestrator import FinanceDashboard, create_dashboard


@pytest.fixture
def dashboard() -> FinanceDashboard:
    return FinanceDashboard(
        month=date(2024, 1, 1),
        audit_logger=AuditLogger(history_limit=100),
        week_start_day=6,
    )


@pytest.fixture
def rent(dashboard):
    """A monthly 100 bill anchored on 2024-01-15."""
    return dashboard.add_bill("Rent", "100", date(2024, 1, 15), Recurrence.MONTHLY)


def only_bill(dashboard: FinanceDashboard):
    bills = dashboard.bills
    assert len(bills) == 1
    return bills[0]


def last_event_type(dashboard: FinanceDashboard) -> AuditEventType:
    return dashboard.audit_logger.recent_events(limit=1)[0].event_type


class TestRecurringScenarios:
    """The edit/delete walkthrough for a monthly bill."""

    def test_monthly_bill_in_next_month(self, dashboard, rent):
        """Test a monthly template shows up the following month."""
        dashboard.next_month()

        bill = only_bill(dashboard)
        assert bill.due_date == date(2024, 2, 15)
        assert bill.amount == Decimal("100")
        assert bill.original_id == rent.id

    def test_edit_this_occurrence(self, dashboard, rent):
        """Test a single-occurrence edit leaves other months alone."""
        dashboard.go_to_month(date(2024, 2, 1))
        bill = only_bill(dashboard)

        assert dashboard.update_bill(bill.id, {"amount": "150"}, UpdateScope.THIS_OCCURRENCE)
        assert only_bill(dashboard).amount == Decimal("150")

        dashboard.next_month()
        march = only_bill(dashboard)
        assert march.due_date == date(2024, 3, 15)
        assert march.amount == Decimal("100")
        assert dashboard.registry.get(rent.id).amount == Decimal("100")

    def test_delete_all_future_from_viewed_month(self, dashboard, rent):
        """Test delete-all cuts off at the viewed month and keeps earlier edits."""
        dashboard.go_to_month(date(2024, 2, 1))
        dashboard.update_bill(only_bill(dashboard).id, {"amount": "150"})

        dashboard.next_month()
        assert dashboard.delete_bill(only_bill(dashboard).id, UpdateScope.ALL_FUTURE)

        assert dashboard.registry.get(rent.id).deleted_from_date == date(2024, 3, 1)
        assert dashboard.bills == ()

        dashboard.previous_month()
        february = only_bill(dashboard)
        assert february.due_date == date(2024, 2, 15)
        assert february.amount == Decimal("150")

        dashboard.go_to_month(date(2024, 6, 1))
        assert dashboard.bills == ()

    def test_delete_this_occurrence(self, dashboard, rent):
        """Test deleting one occurrence hides only that date."""
        dashboard.go_to_month(date(2024, 2, 1))
        assert dashboard.delete_bill(only_bill(dashboard).id, UpdateScope.THIS_OCCURRENCE)
        assert dashboard.bills == ()

        dashboard.next_month()
        assert only_bill(dashboard).due_date == date(2024, 3, 15)

        dashboard.previous_month()
        assert dashboard.bills == ()

    def test_all_future_update_keeps_earlier_edit(self, dashboard, rent):
        """Test that a series change does not overwrite a single-occurrence edit."""
        dashboard.go_to_month(date(2024, 2, 1))
        dashboard.update_bill(only_bill(dashboard).id, {"amount": "150"})

        dashboard.next_month()
        assert dashboard.update_bill(
            only_bill(dashboard).id,
            BillChanges(amount=Decimal("200"), name="New rent"),
            UpdateScope.ALL_FUTURE,
        )
        assert only_bill(dashboard).amount == Decimal("200")
        assert only_bill(dashboard).name == "New rent"

        dashboard.previous_month()
        assert only_bill(dashboard).amount == Decimal("150")
        assert last_event_type(dashboard) == AuditEventType.BILL_UPDATED

    def test_all_future_edit_from_later_month_keeps_earlier_months(self, dashboard, rent):
        """Test that saving an occurrence's own date does not move the series."""
        dashboard.go_to_month(date(2024, 3, 1))
        march = only_bill(dashboard)

        assert dashboard.update_bill(
            march.id,
            BillChanges(name="Rent", amount=Decimal("120"), due_date=march.due_date),
            UpdateScope.ALL_FUTURE,
        )
        assert dashboard.registry.get(rent.id).due_date == date(2024, 1, 15)

        dashboard.go_to_month(date(2024, 1, 1))
        january = only_bill(dashboard)
        assert january.due_date == date(2024, 1, 15)
        assert january.amount == Decimal("120")

    def test_all_future_edit_with_new_date_moves_series(self, dashboard, rent):
        """Test that a different date re-anchors the series."""
        dashboard.go_to_month(date(2024, 3, 1))
        dashboard.update_bill(
            only_bill(dashboard).id,
            {"due_date": "2024-03-20"},
            UpdateScope.ALL_FUTURE,
        )

        assert only_bill(dashboard).due_date == date(2024, 3, 20)
        dashboard.go_to_month(date(2024, 1, 1))
        assert dashboard.bills == ()

    def test_all_future_update_ignores_paid(self, dashboard, rent):
        """Test that paid is never applied to a whole series."""
        dashboard.update_bill(
            only_bill(dashboard).id,
            BillChanges(paid=True, amount=Decimal("110")),
            UpdateScope.ALL_FUTURE,
        )

        template = dashboard.registry.get(rent.id)
        assert template.paid is False
        assert template.amount == Decimal("110")
        assert only_bill(dashboard).paid is False

    def test_delete_all_by_template_id(self, dashboard, rent):
        """Test a bare template id resolves to the series and clears overrides."""
        dashboard.go_to_month(date(2024, 2, 1))
        dashboard.set_paid(only_bill(dashboard).id)
        dashboard.next_month()
        dashboard.delete_bill(only_bill(dashboard).id, UpdateScope.THIS_OCCURRENCE)
        assert dashboard.overrides.edit_count == 1
        assert dashboard.overrides.deletion_count == 1

        dashboard.previous_month()
        assert dashboard.delete_bill(rent.id, UpdateScope.ALL_FUTURE)

        assert dashboard.overrides.edit_count == 0
        assert dashboard.overrides.deletion_count == 0
        assert dashboard.bills == ()
        event = dashboard.audit_logger.recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.SERIES_CUT_OFF
        assert event.details["cleared_overrides"] == 2

        dashboard.previous_month()
        assert only_bill(dashboard).due_date == date(2024, 1, 15)

    def test_update_by_template_id_edits_first_occurrence(self, dashboard, rent):
        """Test a bare template id refers to the anchor occurrence."""
        assert dashboard.update_bill(rent.id, {"amount": "80"})

        assert only_bill(dashboard).amount == Decimal("80")
        dashboard.next_month()
        assert only_bill(dashboard).amount == Decimal("100")


class TestSingleOccurrenceEdits:
    """Tests for skip, paid and due-date moves."""

    def test_skip_persists_across_navigation(self, dashboard, rent):
        """Test that a skipped occurrence is still skipped after navigating."""
        dashboard.go_to_month(date(2024, 2, 1))
        assert dashboard.skip_bill(only_bill(dashboard).id)
        assert last_event_type(dashboard) == AuditEventType.BILL_SKIPPED

        dashboard.next_month()
        assert only_bill(dashboard).skipped is False
        dashboard.previous_month()
        assert only_bill(dashboard).skipped is True
        assert dashboard.summary().total_bills == Decimal("0")

    def test_set_paid(self, dashboard, rent):
        """Test marking one occurrence paid."""
        dashboard.go_to_month(date(2024, 2, 1))
        assert dashboard.set_paid(only_bill(dashboard).id)

        assert only_bill(dashboard).paid is True
        assert dashboard.summary().unpaid_bills == Decimal("0")

        dashboard.next_month()
        assert only_bill(dashboard).paid is False

    def test_set_paid_then_unpaid(self, dashboard, rent):
        """Test un-marking a paid occurrence."""
        dashboard.set_paid(only_bill(dashboard).id)
        dashboard.set_paid(only_bill(dashboard).id, paid=False)

        assert only_bill(dashboard).paid is False
        assert dashboard.overrides.edit_count == 1

    def test_move_within_month(self, dashboard, rent):
        """Test moving an occurrence inside its month keeps one override."""
        dashboard.go_to_month(date(2024, 2, 1))
        dashboard.update_bill(only_bill(dashboard).id, {"due_date": "2024-02-20"})

        moved = only_bill(dashboard)
        assert moved.due_date == date(2024, 2, 20)
        assert moved.occurrence_date == date(2024, 2, 15)

        dashboard.update_bill(moved.id, {"amount": "150"})
        assert dashboard.overrides.edit_count == 1
        assert only_bill(dashboard).amount == Decimal("150")
        assert only_bill(dashboard).due_date == date(2024, 2, 20)

    def test_move_out_of_month_rejected(self, dashboard, rent):
        """Test that one occurrence cannot be moved into another month."""
        dashboard.go_to_month(date(2024, 2, 1))

        assert not dashboard.update_bill(only_bill(dashboard).id, {"due_date": "2024-03-02"})
        assert dashboard.overrides.edit_count == 0
        assert only_bill(dashboard).due_date == date(2024, 2, 15)
        assert last_event_type(dashboard) == AuditEventType.INPUT_REJECTED

    def test_single_edit_cannot_change_recurrence(self, dashboard, rent):
        """Test that recurrence is a series-level field."""
        dashboard.update_bill(only_bill(dashboard).id, {"recurrence": "weekly"})

        assert dashboard.registry.get(rent.id).recurrence == Recurrence.MONTHLY
        assert only_bill(dashboard).recurrence == Recurrence.MONTHLY


class TestOneOffBills:
    """Tests for non-recurring bills."""

    def test_one_off_shows_only_in_its_month(self, dashboard):
        """Test a one-off bill appears once, under its own id."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")

        assert only_bill(dashboard).id == template.id
        dashboard.next_month()
        assert dashboard.bills == ()

    def test_one_off_update_in_place(self, dashboard):
        """Test that any edit of a one-off bill updates the template."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")

        assert dashboard.update_bill(template.id, {"amount": "75"}, UpdateScope.THIS_OCCURRENCE)
        assert dashboard.registry.get(template.id).amount == Decimal("75")
        assert dashboard.overrides.edit_count == 0
        assert only_bill(dashboard).amount == Decimal("75")

    def test_one_off_set_paid(self, dashboard):
        """Test paying a one-off bill."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")
        dashboard.set_paid(template.id)

        assert dashboard.registry.get(template.id).paid is True
        assert only_bill(dashboard).paid is True

    def test_one_off_delete(self, dashboard):
        """Test deleting a one-off bill hides it but keeps the template."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")

        assert dashboard.delete_bill(template.id)
        assert dashboard.bills == ()
        assert template.id in dashboard.registry

    def test_one_off_delete_all(self, dashboard):
        """Test delete-all on a one-off bill cuts it off too."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")

        assert dashboard.delete_bill(template.id, UpdateScope.ALL_FUTURE)
        assert dashboard.bills == ()
        assert dashboard.registry.get(template.id).deleted_from_date == date(2024, 1, 1)


class TestRejectedInput:
    """Tests for invalid input and unknown ids."""

    def test_invalid_add_creates_nothing(self, dashboard):
        """Test that an invalid bill is not created."""
        assert dashboard.add_bill("", "abc", None) is None

        assert len(dashboard.registry) == 0
        event = dashboard.audit_logger.recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.INPUT_REJECTED
        assert len(event.details["issues"]) == 3

    def test_negative_amount_rejected(self, dashboard):
        """Test that negative bills are not created."""
        assert dashboard.add_bill("Refund", "-10", "2024-01-05") is None
        assert dashboard.bills == ()

    def test_invalid_update_is_noop(self, dashboard, rent):
        """Test that an invalid edit changes nothing."""
        assert not dashboard.update_bill(only_bill(dashboard).id, {"amount": "abc"})

        assert dashboard.overrides.edit_count == 0
        assert only_bill(dashboard).amount == Decimal("100")

    def test_unknown_ids(self, dashboard, rent):
        """Test that unknown ids are logged and ignored."""
        assert not dashboard.update_bill("missing", {"amount": "1"})
        assert not dashboard.skip_bill("missing")
        assert not dashboard.delete_bill("missing", UpdateScope.ALL_FUTURE)

        not_found = [
            e for e in dashboard.audit_logger.history
            if e.event_type == AuditEventType.BILL_NOT_FOUND
        ]
        assert [e.details["operation"] for e in not_found] == [
            "update_bill",
            "skip_bill",
            "delete_bill",
        ]
        assert dashboard.registry.get(rent.id).deleted_from_date is None

    def test_template_id_of_deleted_first_occurrence(self, dashboard, rent):
        """Test that a template id whose first occurrence is deleted is not a target."""
        dashboard.delete_bill(only_bill(dashboard).id, UpdateScope.THIS_OCCURRENCE)

        assert not dashboard.update_bill(rent.id, {"amount": "80"})
        assert not dashboard.skip_bill(rent.id)
        assert not dashboard.set_paid(rent.id)
        assert dashboard.overrides.edit_count == 0
        assert last_event_type(dashboard) == AuditEventType.BILL_NOT_FOUND

    def test_template_id_of_cut_off_series(self, dashboard, rent):
        """Test that a template id of a fully deleted series is not a target."""
        dashboard.delete_bill(only_bill(dashboard).id, UpdateScope.ALL_FUTURE)

        assert not dashboard.set_paid(rent.id)
        assert dashboard.overrides.edit_count == 0
        assert last_event_type(dashboard) == AuditEventType.BILL_NOT_FOUND

    def test_template_id_of_hidden_one_off(self, dashboard):
        """Test that a deleted one-off bill cannot be edited by its id."""
        template = dashboard.add_bill("Doctor", "50", "2024-01-20")
        dashboard.delete_bill(template.id)

        assert not dashboard.update_bill(template.id, {"amount": "75"})
        assert dashboard.registry.get(template.id).amount == Decimal("50")


class TestNavigation:
    """Tests for month navigation."""

    def test_previous_month_crosses_year(self, dashboard):
        """Test going back from January."""
        assert dashboard.previous_month() == date(2023, 12, 1)
        assert dashboard.month_bounds == (date(2023, 12, 1), date(2023, 12, 31))

    def test_next_month(self, dashboard):
        """Test going forward."""
        assert dashboard.next_month() == date(2024, 2, 1)
        assert dashboard.month_bounds[1] == date(2024, 2, 29)

    def test_go_to_month_normalizes_day(self, dashboard):
        """Test that any day selects its month."""
        assert dashboard.go_to_month(date(2024, 5, 17)) == date(2024, 5, 1)
        assert dashboard.current_month == date(2024, 5, 1)

    def test_month_argument_normalized(self):
        """Test that the starting month is the 1st of the month."""
        dashboard = FinanceDashboard(
            month=date(2024, 3, 20),
            audit_logger=AuditLogger(history_limit=10),
        )
        assert dashboard.current_month == date(2024, 3, 1)

    def test_create_dashboard(self):
        """Test the factory function."""
        dashboard = create_dashboard(month=date(2024, 7, 4))
        assert dashboard.current_month == date(2024, 7, 1)
        assert dashboard.bills == ()


class TestTodosAndPaychecks:
    """Tests for the todo list and paychecks."""

    def test_todo_lifecycle(self, dashboard):
        """Test adding, completing and deleting a todo."""
        todo = dashboard.add_todo("Call landlord", "2024-01-10")
        assert dashboard.todos == (todo,)

        assert dashboard.update_todo(todo.id, completed=True)
        assert dashboard.summary().completed_todos == 1

        assert dashboard.delete_todo(todo.id)
        assert dashboard.todos == ()
        assert last_event_type(dashboard) == AuditEventType.TODO_DELETED

    def test_todos_filtered_by_month(self, dashboard):
        """Test that only the viewed month's todos are shown."""
        dashboard.add_todo("Later", "2024-02-10")
        assert dashboard.todos == ()
        dashboard.next_month()
        assert len(dashboard.todos) == 1

    def test_invalid_todo(self, dashboard):
        """Test that a todo without a task is rejected."""
        assert dashboard.add_todo("  ", "2024-01-10") is None
        assert last_event_type(dashboard) == AuditEventType.INPUT_REJECTED

    def test_unknown_todo(self, dashboard):
        """Test that unknown todo ids are ignored."""
        assert not dashboard.update_todo("missing", completed=True)
        assert not dashboard.delete_todo("missing")

    def test_paychecks_in_summary(self, dashboard, rent):
        """Test that paychecks feed the balance."""
        paycheck = dashboard.add_paycheck("1500", date(2024, 1, 5))
        summary = dashboard.summary()

        assert dashboard.paychecks == (paycheck,)
        assert summary.total_paychecks == Decimal("1500")
        assert summary.total_bills == Decimal("100")
        assert summary.balance == Decimal("1400")

        assert dashboard.delete_paycheck(paycheck.id)
        assert dashboard.summary().balance == Decimal("-100")

    def test_invalid_paycheck(self, dashboard):
        """Test that a negative paycheck is rejected."""
        assert dashboard.add_paycheck("-1", date(2024, 1, 5)) is None
        assert dashboard.paychecks == ()


class TestAuditTrail:
    """Tests for the dashboard's audit events."""

    def test_correlation_id_is_kept(self, dashboard):
        """Test that a caller-supplied correlation id tags the event."""
        correlation_id = uuid4()
        dashboard.add_bill("Rent", "100", date(2024, 1, 15), "monthly", correlation_id=correlation_id)

        events = dashboard.audit_logger.events_for_correlation(correlation_id)
        assert [e.event_type for e in events] == [AuditEventType.BILL_ADDED]

    def test_occurrence_edit_event(self, dashboard, rent):
        """Test the occurrence key in an edit event."""
        dashboard.update_bill(only_bill(dashboard).id, {"amount": "120"})

        event = dashboard.audit_logger.recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.OCCURRENCE_EDITED
        assert event.entity_id == f"{rent.id}-2024-01-15"
        assert event.details["changes"] == {"amount": "120"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
