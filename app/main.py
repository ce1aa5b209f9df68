"""
Streamlit Frontend for the Finance Tracker

This is the month-view dashboard: bills, todos, paychecks and a summary.

DESIGN PRINCIPLES:
1. The UI only renders and forwards user actions
2. Every bill edit or deletion asks "this bill" or "all future bills"
3. All state lives in one FinanceDashboard per browser session
"""

from datetime import date
from decimal import Decimal

import streamlit as st

from finance_tracker.models.bill import BillInstance, Recurrence, UpdateScope
from finance_tracker.orchestrator import FinanceDashboard, create_dashboard


# Page configuration
st.set_page_config(
    page_title="Personal Finance Dashboard",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .skipped {
        text-decoration: line-through;
        color: #888;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

SCOPE_LABELS = {
    UpdateScope.THIS_OCCURRENCE: "This bill only",
    UpdateScope.ALL_FUTURE: "All future bills",
}


def get_dashboard() -> FinanceDashboard:
    """Get or create this session's dashboard."""
    if "dashboard" not in st.session_state:
        st.session_state.dashboard = create_dashboard()
    return st.session_state.dashboard


def main():
    """Main application entry point."""
    dashboard = get_dashboard()

    st.sidebar.title("💰 Finance Dashboard")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Month View", "📜 History", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Recurring bills:**
        - Edit or delete *this bill only* to change one month
        - Choose *all future bills* to change the series
        - Skipped bills don't count towards your totals
        """
    )

    if page == "📅 Month View":
        render_month_page(dashboard)
    elif page == "📜 History":
        render_history_page(dashboard)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_month_page(dashboard: FinanceDashboard):
    """Render the month view with bills, todos, summary and paychecks."""
    st.title("Personal Finance Dashboard")

    col_prev, col_title, col_next = st.columns([1, 4, 1])
    with col_prev:
        if st.button("◀", key="prev_month"):
            dashboard.previous_month()
            st.rerun()
    with col_title:
        st.markdown(f"## {dashboard.current_month.strftime('%B %Y')}")
    with col_next:
        if st.button("▶", key="next_month"):
            dashboard.next_month()
            st.rerun()

    left, right = st.columns(2)
    with left:
        render_bills_section(dashboard)
        render_summary_section(dashboard)
    with right:
        render_todos_section(dashboard)
        render_paychecks_section(dashboard)


def render_bills_section(dashboard: FinanceDashboard):
    st.subheader("🧾 Bills")

    if not dashboard.bills:
        st.info("No bills due this month.")

    for bill in dashboard.bills:
        render_bill_row(dashboard, bill)

    with st.form("add_bill", clear_on_submit=True):
        st.markdown("**Add a bill**")
        name = st.text_input("Bill name")
        amount = st.text_input("Amount", placeholder="e.g. 120.50")
        due_date = st.date_input("Due date", value=dashboard.current_month)
        recurrence = st.selectbox(
            "Recurrence",
            options=list(Recurrence),
            format_func=lambda r: r.value.title(),
        )
        if st.form_submit_button("➕ Add Bill"):
            template = dashboard.add_bill(name, amount, due_date, recurrence)
            if template is None:
                st.error("Please enter a name, a valid amount and a due date.")
            else:
                st.rerun()


def render_bill_row(dashboard: FinanceDashboard, bill: BillInstance):
    style = "skipped" if bill.skipped else ""
    cols = st.columns([3, 2, 2, 2, 1, 1])

    cols[0].markdown(f"<span class='{style}'>{bill.name}</span>", unsafe_allow_html=True)
    cols[1].markdown(f"<span class='{style}'>{bill.amount:,.2f}</span>", unsafe_allow_html=True)
    cols[2].write(bill.due_date.strftime("%b %d"))
    cols[3].write(bill.recurrence.value)

    paid = cols[4].checkbox(
        "Paid",
        value=bill.paid,
        key=f"paid_{bill.id}",
        disabled=bill.skipped,
        label_visibility="collapsed",
    )
    if paid != bill.paid:
        dashboard.set_paid(bill.id, paid)
        st.rerun()

    if cols[5].button("⏭", key=f"skip_{bill.id}", help="Skip this bill"):
        dashboard.skip_bill(bill.id)
        st.rerun()

    with st.expander(f"Edit or delete {bill.name} ({bill.due_date.isoformat()})"):
        scope = st.radio(
            "Apply to",
            options=list(UpdateScope),
            format_func=lambda s: SCOPE_LABELS[s],
            key=f"scope_{bill.id}",
            horizontal=True,
        )
        new_name = st.text_input("Name", value=bill.name, key=f"name_{bill.id}")
        new_amount = st.number_input(
            "Amount",
            value=float(bill.amount),
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"amount_{bill.id}",
        )
        new_due = st.date_input("Due date", value=bill.due_date, key=f"due_{bill.id}")

        save_col, delete_col = st.columns(2)
        if save_col.button("💾 Save", key=f"save_{bill.id}"):
            changes = changed_fields(bill, new_name, Decimal(str(new_amount)), new_due)
            if not changes:
                st.info("Nothing to save.")
            elif not dashboard.update_bill(bill.id, changes, scope):
                st.error("The change could not be applied. Check the History page for details.")
            else:
                st.rerun()
        if delete_col.button("🗑 Delete", key=f"delete_{bill.id}"):
            dashboard.delete_bill(bill.id, scope)
            st.rerun()


def changed_fields(bill: BillInstance, name: str, amount: Decimal, due_date: date) -> dict:
    """Only the fields the user actually edited; the form prefills the rest."""
    changes = {}
    if name.strip() != bill.name:
        changes["name"] = name
    if amount != bill.amount:
        changes["amount"] = amount
    if due_date != bill.due_date:
        changes["due_date"] = due_date
    return changes


def render_summary_section(dashboard: FinanceDashboard):
    summary = dashboard.summary()

    st.subheader("📊 Summary")

    st.markdown(
        f"**Weekly ({summary.week_start.strftime('%b %d')} - "
        f"{summary.week_end.strftime('%b %d')})**"
    )
    st.write(f"Bills Due: {summary.weekly_bills:,.2f}")
    st.write(f"Paychecks: {summary.weekly_paychecks:,.2f}")
    st.write(f"Balance: {summary.weekly_balance:,.2f}")

    st.markdown(
        f"**Monthly ({summary.month_start.strftime('%b %d')} - "
        f"{summary.month_end.strftime('%b %d')})**"
    )
    col1, col2 = st.columns(2)
    col1.metric("Total Bills", f"{summary.total_bills:,.2f}")
    col2.metric("Unpaid Bills", f"{summary.unpaid_bills:,.2f}")
    col1.metric("Total Paychecks", f"{summary.total_paychecks:,.2f}")
    col2.metric("Current Balance", f"{summary.balance:,.2f}")

    st.write(f"Completed Todos: {summary.completed_todos} / {summary.total_todos}")
    if summary.balance < 0:
        st.warning(f"Financial Health: {summary.financial_health}")
    else:
        st.success(f"Financial Health: {summary.financial_health}")


def render_todos_section(dashboard: FinanceDashboard):
    st.subheader("✅ Todo List")

    for todo in dashboard.todos:
        cols = st.columns([1, 5, 2, 1])
        done = cols[0].checkbox(
            "Done",
            value=todo.completed,
            key=f"todo_done_{todo.id}",
            label_visibility="collapsed",
        )
        if done != todo.completed:
            dashboard.update_todo(todo.id, completed=done)
            st.rerun()
        cols[1].write(f"~~{todo.task}~~" if todo.completed else todo.task)
        cols[2].write(todo.due_date.strftime("%b %d"))
        if cols[3].button("🗑", key=f"todo_delete_{todo.id}"):
            dashboard.delete_todo(todo.id)
            st.rerun()

    with st.form("add_todo", clear_on_submit=True):
        task = st.text_input("New todo")
        due_date = st.date_input("Due", value=dashboard.current_month)
        if st.form_submit_button("➕ Add Todo"):
            if dashboard.add_todo(task, due_date) is None:
                st.error("Please enter a task and a due date.")
            else:
                st.rerun()


def render_paychecks_section(dashboard: FinanceDashboard):
    st.subheader("💵 Paychecks")

    for paycheck in dashboard.paychecks:
        cols = st.columns([3, 3, 1])
        cols[0].write(paycheck.date.strftime("%b %d, %Y"))
        cols[1].write(f"{paycheck.amount:,.2f}")
        if cols[2].button("🗑", key=f"paycheck_delete_{paycheck.id}"):
            dashboard.delete_paycheck(paycheck.id)
            st.rerun()

    with st.form("add_paycheck", clear_on_submit=True):
        amount = st.text_input("Paycheck amount")
        pay_date = st.date_input("Date", value=date.today())
        if st.form_submit_button("➕ Add Paycheck"):
            if dashboard.add_paycheck(amount, pay_date) is None:
                st.error("Please enter a valid amount and a date.")
            else:
                st.rerun()


def render_history_page(dashboard: FinanceDashboard):
    """Render the audit history."""
    st.title("📜 History")
    st.markdown("Everything you changed in this session, newest first.")

    events = dashboard.audit_logger.recent_events(limit=100)
    if not events:
        st.info("Nothing has happened yet.")
        return

    for event in events:
        icon = "⚠️" if event.severity.value == "warning" else "•"
        st.markdown(
            f"{icon} `{event.timestamp.strftime('%H:%M:%S')}` "
            f"**{event.event_type.value}** - {event.description}"
        )
        if event.details:
            with st.expander("Details"):
                st.json(event.details)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    from finance_tracker.config import get_settings, validate_all_settings

    status = validate_all_settings()
    if status.get("app", False):
        st.success("✅ Configuration loaded")
    else:
        st.error(f"❌ Configuration error: {status.get('app_error', 'unknown')}")
        return

    settings = get_settings().app
    weekdays = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    st.markdown(f"**Environment:** {settings.app_environment}")
    st.markdown(f"**Week starts on:** {weekdays[settings.week_start_day]}")
    st.markdown(f"**Large-amount warning above:** {settings.max_bill_amount:,.2f}")
    st.markdown(f"**History kept:** {settings.audit_history_limit} events")

    st.markdown("---")
    st.markdown(
        "To change these, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
