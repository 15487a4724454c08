"""
Streamlit Frontend for Personal Organizer

One page per collection plus a settings page. Every page re-renders the
whole collection on each run; the managers are the only way data changes.

DESIGN PRINCIPLES:
1. Simple, clear forms
2. Explicit confirmation before every delete
3. Clear error messages, with the failing field named
4. Nothing changes on screen unless it was saved
"""

import asyncio
from datetime import date

import streamlit as st

from organizer.errors import OrganizerError
from organizer.orchestrator import OrganizerApp, create_app_components


# Page configuration
st.set_page_config(
    page_title="Personal Organizer",
    page_icon="🗂️",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .warning-box {
        padding: 12px 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
        white-space: pre-line;
    }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_app() -> OrganizerApp:
    """Get or create the organizer (cached across reruns)."""
    app = create_app_components()
    run_async(app.load())
    return app


def perform(coro, success: str) -> bool:
    """Run a manager operation and report the outcome."""
    try:
        run_async(coro)
    except OrganizerError as e:
        st.error(f"❌ {e}")
        return False
    st.session_state.flash = success
    return True


def confirm_delete(key: str, label: str) -> bool:
    """Two-step delete button. Returns True once the user confirms."""
    pending = st.session_state.get("pending_delete")
    if pending != key:
        if st.button("🗑️ Delete", key=f"del-{key}"):
            st.session_state.pending_delete = key
            st.rerun()
        return False

    st.warning(f"Delete {label}? This cannot be undone.")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Yes, delete", key=f"yes-{key}", type="primary"):
            st.session_state.pending_delete = None
            return True
    with col2:
        if st.button("Cancel", key=f"no-{key}"):
            st.session_state.pending_delete = None
            st.rerun()
    return False


def main():
    """Main application entry point."""
    app = get_app()

    st.sidebar.title("🗂️ Personal Organizer")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["✅ Tasks", "📝 Notes", "💵 Transactions", "🤝 Traders", "⚙️ Settings"],
        index=0,
    )

    render_reminder_banner(app)

    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)

    if page == "✅ Tasks":
        render_tasks_page(app)
    elif page == "📝 Notes":
        render_notes_page(app)
    elif page == "💵 Transactions":
        render_transactions_page(app)
    elif page == "🤝 Traders":
        render_traders_page(app)
    elif page == "⚙️ Settings":
        render_settings_page(app)


def render_reminder_banner(app: OrganizerApp):
    summary = app.reminders.latest
    if summary.has_reminders:
        st.sidebar.markdown(f"""
        <div class="warning-box">
            <strong>⚠️ Reminder:</strong> {summary.count} incomplete task(s)
        </div>
        """, unsafe_allow_html=True)


def render_tasks_page(app: OrganizerApp):
    st.title("✅ Tasks")

    with st.form("task_form", clear_on_submit=True):
        text = st.text_input("New task", max_chars=200)
        if st.form_submit_button("➕ Add Task", type="primary"):
            if perform(app.tasks.add({"text": text}), "Task added."):
                st.rerun()

    tasks = app.tasks.list()
    if not tasks:
        st.info("No tasks yet.")
        return

    for task in tasks:
        key = str(task.id)
        col1, col2, col3 = st.columns([6, 2, 2])
        with col1:
            done = st.checkbox(task.text, value=task.completed, key=f"done-{key}")
            if done != task.completed:
                if perform(app.tasks.toggle(task.id), "Task updated."):
                    st.rerun()
        with col2:
            with st.popover("✏️ Edit"):
                new_text = st.text_input("Task text", value=task.text,
                                         max_chars=200, key=f"edit-{key}")
                if st.button("Save", key=f"save-{key}"):
                    if perform(app.tasks.update(task.id, {"text": new_text}), "Task edited."):
                        st.rerun()
        with col3:
            if confirm_delete(key, "this task"):
                if perform(app.tasks.remove(task.id), "Task deleted."):
                    st.rerun()


def render_notes_page(app: OrganizerApp):
    st.title("📝 Notes")

    with st.form("note_form", clear_on_submit=True):
        text = st.text_area("New note", max_chars=1000)
        if st.form_submit_button("➕ Add Note", type="primary"):
            if perform(app.notes.add({"text": text}), "Note added."):
                st.rerun()

    notes = app.notes.list()
    if not notes:
        st.info("No notes yet.")
        return

    for note in notes:
        key = str(note.id)
        with st.container(border=True):
            st.markdown(note.text)
            st.caption(note.created_at.strftime("%d %B %Y %H:%M"))
            col1, col2 = st.columns(2)
            with col1:
                with st.popover("✏️ Edit"):
                    new_text = st.text_area("Note text", value=note.text,
                                            max_chars=1000, key=f"edit-{key}")
                    if st.button("Save", key=f"save-{key}"):
                        if perform(app.notes.update(note.id, {"text": new_text}), "Note edited."):
                            st.rerun()
            with col2:
                if confirm_delete(key, "this note"):
                    if perform(app.notes.remove(note.id), "Note deleted."):
                        st.rerun()


def transaction_fields(prefix: str, defaults=None) -> dict:
    """Render the transaction inputs and return the candidate fields."""
    col1, col2 = st.columns(2)
    with col1:
        when = st.date_input(
            "Date *",
            value=defaults.date if defaults else date.today(),
            key=f"{prefix}-date",
        )
        operation = st.text_input(
            "Operation *",
            value=defaults.operation if defaults else "",
            max_chars=100,
            key=f"{prefix}-operation",
        )
        pay = st.text_input(
            "Pay",
            value=f"{defaults.pay:g}" if defaults and defaults.pay else "",
            key=f"{prefix}-pay",
        )
        receive = st.text_input(
            "Receive",
            value=f"{defaults.receive:g}" if defaults and defaults.receive else "",
            key=f"{prefix}-receive",
        )
    with col2:
        call = st.text_input("Call", value=defaults.call if defaults else "",
                             max_chars=100, key=f"{prefix}-call")
        contact = st.text_input("Contact", value=defaults.contact if defaults else "",
                                max_chars=100, key=f"{prefix}-contact")
        other = st.text_input("Other", value=defaults.other if defaults else "",
                              max_chars=100, key=f"{prefix}-other")

    return {
        "date": when,
        "operation": operation,
        "pay": pay,
        "receive": receive,
        "call": call,
        "contact": contact,
        "other": other,
    }


def render_transactions_page(app: OrganizerApp):
    st.title("💵 Transactions")

    with st.form("transaction_form", clear_on_submit=True):
        candidate = transaction_fields("new")
        if st.form_submit_button("➕ Add Transaction", type="primary"):
            if perform(app.transactions.add(candidate), "Transaction added."):
                st.rerun()

    transactions = app.transactions.list()
    if not transactions:
        st.info("No transactions yet.")
        return

    st.dataframe(
        [
            {
                "Date": t.date.isoformat(),
                "Operation": t.operation,
                "Pay": t.pay or None,
                "Receive": t.receive or None,
                "Call": t.call or "-",
                "Contact": t.contact or "-",
                "Other": t.other or "-",
            }
            for t in transactions
        ],
        use_container_width=True,
    )

    totals = app.transactions.totals()
    col1, col2, col3 = st.columns(3)
    col1.metric("Total paid", f"{totals.pay:,.2f}")
    col2.metric("Total received", f"{totals.receive:,.2f}")
    col3.metric("Net", f"{totals.net:,.2f}")

    st.markdown("---")
    options = {f"{t.date.isoformat()} · {t.operation}": t for t in transactions}
    selected = options[st.selectbox("Edit or delete", list(options))]
    key = str(selected.id)

    with st.expander("✏️ Edit selected"):
        edited = transaction_fields(f"edit-{key}", defaults=selected)
        if st.button("Save", key=f"save-{key}"):
            if perform(app.transactions.update(selected.id, edited), "Transaction edited."):
                st.rerun()

    if confirm_delete(key, "this transaction"):
        if perform(app.transactions.remove(selected.id), "Transaction deleted."):
            st.rerun()


def render_traders_page(app: OrganizerApp):
    st.title("🤝 Traders")

    with st.form("trader_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Trader name *", max_chars=50)
        with col2:
            amount = st.text_input("Amount *")
        if st.form_submit_button("➕ Add Trader", type="primary"):
            if perform(app.traders.add({"name": name, "amount": amount}), "Trader added."):
                st.rerun()

    traders = app.traders.list()
    if not traders:
        st.info("No traders yet.")
        return

    st.markdown(
        f'Total balance: <span class="big-number">{app.traders.total_amount():,.2f}</span>',
        unsafe_allow_html=True,
    )

    for trader in traders:
        key = str(trader.id)
        with st.container(border=True):
            col1, col2, col3 = st.columns([4, 3, 3])
            col1.markdown(f"**{trader.name}**")
            col2.markdown(f"{trader.amount:,.2f}")
            col3.caption(trader.created_at.strftime("%d %B %Y"))

            col1, col2 = st.columns(2)
            with col1:
                with st.popover("✏️ Edit"):
                    new_name = st.text_input("Trader name", value=trader.name,
                                             max_chars=50, key=f"name-{key}")
                    new_amount = st.text_input("Amount", value=f"{trader.amount:g}",
                                               key=f"amount-{key}")
                    if st.button("Save", key=f"save-{key}"):
                        candidate = {"name": new_name, "amount": new_amount}
                        if perform(app.traders.update(trader.id, candidate), "Trader edited."):
                            st.rerun()
            with col2:
                if confirm_delete(key, f"trader {trader.name}"):
                    if perform(app.traders.remove(trader.id), "Trader deleted."):
                        st.rerun()


def render_settings_page(app: OrganizerApp):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from organizer.config import validate_all_settings

    status = validate_all_settings()

    sections = [
        ("Storage", "storage"),
        ("Reminders", "reminders"),
        ("Audit", "audit"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("### Records")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Tasks", app.tasks.count())
    col2.metric("Notes", app.notes.count())
    col3.metric("Transactions", app.transactions.count())
    col4.metric("Traders", app.traders.count())

    st.markdown("### Reminder")
    if st.button("🔔 Send reminder now"):
        sent = run_async(app.send_reminder())
        if sent:
            st.success("Reminder sent.")
        elif app.reminders.latest.has_reminders:
            st.error("❌ The reminder could not be delivered. See the log for details.")
        else:
            st.info("No incomplete tasks.")

    st.markdown("### Reset")
    managers = {
        "Tasks": app.tasks,
        "Notes": app.notes,
        "Transactions": app.transactions,
        "Traders": app.traders,
    }
    choice = st.selectbox("Collection", list(managers))
    if confirm_delete(f"reset-{choice}", f"every record in {choice}"):
        if perform(managers[choice].clear(), f"{choice} cleared."):
            st.rerun()

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
