"""
Streamlit Frontend for Expense Tracker

The screen a user keeps open during the month: what came in, what went
out, and what is left.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Amounts can be typed the way people write them ("12,50 €")
3. Clear error messages in simple language
4. Visual feedback for all operations
5. Destructive actions need an explicit confirmation

The UI talks to the LedgerFlow directly; it shares the JSON ledger
with the HTTP API.
"""

import asyncio
from datetime import datetime

import streamlit as st

from expense_tracker.audit import create_correlation_id
from expense_tracker.orchestrator import (
    AmountValidationError,
    EntryNotFoundError,
    LedgerFlow,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💶",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
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


def get_ledger() -> LedgerFlow:
    """
    Get or create this session's ledger flow.

    The flow's lock binds to one event loop, so flows are never shared
    between sessions. Sessions writing the same ledger file: last write wins.
    """
    if "ledger" not in st.session_state:
        try:
            st.session_state.ledger = create_app_components(use_storage=True)
        except Exception as e:
            st.error(f"Failed to initialize storage, using a temporary ledger: {e}")
            st.session_state.ledger = create_app_components(use_storage=False)
    return st.session_state.ledger


def format_amount(value: float) -> str:
    return f"€{value:,.2f}"


def main():
    """Main application entry point."""
    ledger = get_ledger()

    st.sidebar.title("💶 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Overview", "➕ Add Expense", "💼 Salary", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Amounts can be typed like:**
        - 12,50 €
        - 15 eur
        - 20euros
        """
    )

    if page == "📊 Overview":
        render_overview_page(ledger)
    elif page == "➕ Add Expense":
        render_add_page(ledger)
    elif page == "💼 Salary":
        render_salary_page(ledger)
    elif page == "⚙️ Settings":
        render_settings_page(ledger)


def render_totals(totals):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("**Salary**")
        st.markdown(f'<div class="big-number">{format_amount(totals.salary)}</div>', unsafe_allow_html=True)
    with col2:
        st.markdown("**Spent**")
        st.markdown(f'<div class="big-number">{format_amount(totals.total_expenses)}</div>', unsafe_allow_html=True)
    with col3:
        st.markdown("**Remaining**")
        color = "#dc3545" if totals.remaining < 0 else "#28a745"
        st.markdown(
            f'<div class="big-number" style="color:{color}">{format_amount(totals.remaining)}</div>',
            unsafe_allow_html=True,
        )


def render_overview_page(ledger: LedgerFlow):
    """Render the ledger overview with per-entry delete buttons."""
    st.title("📊 Overview")

    try:
        state, totals = run_async(ledger.get_overview())
    except Exception as e:
        st.error(f"Could not read your ledger: {e}")
        st.stop()

    render_totals(totals)
    st.markdown("---")

    if not state.entries:
        st.info("No expenses yet. Use the 'Add Expense' page to record your first one.")
        return

    for entry in state.entries:
        col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
        with col1:
            st.markdown(f"**{entry.label or 'Unlabelled'}**")
        with col2:
            st.markdown(format_amount(entry.amount))
        with col3:
            created = datetime.fromtimestamp(entry.created_at / 1000)
            st.markdown(created.strftime("%d %B %Y %H:%M"))
        with col4:
            if st.button("🗑️", key=f"delete-{entry.id}", help="Delete this expense"):
                try:
                    run_async(ledger.remove_expense(entry.id, create_correlation_id()))
                except EntryNotFoundError:
                    st.warning("That expense was already removed.")
                except Exception as e:
                    st.error(f"Failed to remove: {str(e)}")
                else:
                    st.rerun()


def render_add_page(ledger: LedgerFlow):
    """Render the add-expense form."""
    st.title("➕ Add Expense")

    with st.form("add-expense", clear_on_submit=True):
        raw_value = st.text_input(
            "Amount *",
            placeholder="e.g. 12,50 €",
            help="Commas and currency words are fine",
        )
        label = st.text_input(
            "Label (optional)",
            placeholder="e.g. Groceries",
        )
        submitted = st.form_submit_button("✅ Save Expense", type="primary")

    if submitted:
        try:
            entry, totals = run_async(
                ledger.add_expense(
                    raw_value=raw_value,
                    label=label,
                    correlation_id=create_correlation_id(),
                )
            )
        except AmountValidationError:
            st.markdown("""
            <div class="error-box">
                <h4>❌ Invalid Amount</h4>
                <p>Please enter a number such as 12.50 or 12,50 €.</p>
            </div>
            """, unsafe_allow_html=True)
            return
        except Exception as e:
            st.error(f"Failed to save: {str(e)}")
            return

        st.markdown(f"""
        <div class="success-box">
            <h3>✅ Expense Saved</h3>
            <p><strong>Amount:</strong> {format_amount(entry.amount)}</p>
            <p><strong>Label:</strong> {entry.label or 'Unlabelled'}</p>
            <p><strong>Remaining:</strong> {format_amount(totals.remaining)}</p>
        </div>
        """, unsafe_allow_html=True)


def render_salary_page(ledger: LedgerFlow):
    """Render the salary form."""
    st.title("💼 Salary")

    with st.form("salary"):
        amount = st.text_input(
            "Monthly salary *",
            placeholder="e.g. 2.500,00 €",
        )
        submitted = st.form_submit_button("💾 Save Salary", type="primary")

    if submitted:
        try:
            totals = run_async(ledger.set_salary(amount, create_correlation_id()))
        except AmountValidationError:
            st.error("Please enter a valid salary amount.")
            return
        except Exception as e:
            st.error(f"Failed to update salary: {str(e)}")
            return

        st.success(f"Salary set to {format_amount(totals.salary)}")
        render_totals(totals)


def render_settings_page(ledger: LedgerFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from expense_tracker.config import validate_all_settings

    status = validate_all_settings()

    groups = [
        ("Storage", "storage"),
        ("HTTP Server", "server"),
        ("Application", "app"),
    ]

    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Reset Ledger")
    st.markdown("Removes every expense and sets the salary back to 0.")

    confirmed = st.checkbox("I understand this cannot be undone")
    if st.button("🧹 Clear Everything", disabled=not confirmed):
        try:
            run_async(ledger.reset(create_correlation_id()))
            st.success("All entries cleared.")
        except Exception as e:
            st.error(f"Failed to clear entries: {str(e)}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
