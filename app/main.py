"""
Streamlit Frontend for FocusFi

A thin shell over the orchestrator flows: sign in, sync, look at the
month, add or remove transactions, and manage linked accounts.

DESIGN PRINCIPLES:
1. Every number on screen comes from local storage
2. Syncing is always an explicit button press
3. Errors are shown in plain language, never as tracebacks
4. Destructive actions ask for confirmation
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from focusfi.audit import configure_logging
from focusfi.config import get_settings, validate_all_settings
from focusfi.dates import QuickDateRange, month_range, resolve_quick_range
from focusfi.models.local import TransactionType
from focusfi.orchestrator import LedgerFlow, SyncFlow, create_app_components
from focusfi.queries import DashboardQueries, DashboardSummary
from focusfi.services.auth import AuthError, SupabaseAuthService
from focusfi.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="FocusFi",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)

configure_logging(debug=get_settings().app.debug_mode)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.2em;
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


def get_components():
    """Get or create application components (one set per browser session)."""
    if "components" not in st.session_state:
        try:
            st.session_state.components = create_app_components(use_storage=True)
        except ValidationError as e:
            st.error(f"FocusFi is not configured: {e}")
            st.info("Create a `.env` file; see `.env.example` for the required variables.")
            st.stop()
    return st.session_state.components


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def main():
    """Main application entry point."""
    sync_flow, ledger_flow, dashboard, auth = get_components()

    if isinstance(auth, SupabaseAuthService) and not auth.is_authenticated:
        render_sign_in_page(auth)
        return

    st.sidebar.title("💵 FocusFi")
    if isinstance(auth, SupabaseAuthService):
        st.sidebar.caption(f"Signed in as {auth.current_user_email or 'unknown'}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "➕ Add Transaction", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🔄 Sync with backend", type="primary"):
        render_sync(sync_flow)

    if page == "📊 Dashboard":
        render_dashboard_page(dashboard, ledger_flow)
    elif page == "➕ Add Transaction":
        render_add_transaction_page(ledger_flow)
    elif page == "⚙️ Settings":
        render_settings_page(ledger_flow, auth)


def render_sign_in_page(auth: SupabaseAuthService):
    """Email / password sign-in."""
    st.title("💵 FocusFi")
    st.markdown("Sign in to sync your transactions and accounts.")

    with st.form("sign_in"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if submitted:
        if not email or not password:
            st.error("Enter your email and password.")
            return
        with st.spinner("Signing in..."):
            try:
                run_async(auth.sign_in(email, password))
            except AuthError as e:
                st.error(str(e))
                return
        st.rerun()


def render_sync(sync_flow: SyncFlow):
    with st.sidebar:
        with st.spinner("Syncing..."):
            result = run_async(sync_flow.refresh())
        if result.success:
            st.success(
                f"Synced {result.transaction_count} transactions "
                f"and {result.account_count} accounts"
            )
        else:
            st.error(result.error_message)


def render_dashboard_page(dashboard: DashboardQueries, ledger_flow: LedgerFlow):
    """Totals, forecasts, transaction lists and accounts for a date range."""
    st.title("📊 Dashboard")

    if "date_range" not in st.session_state:
        st.session_state.date_range = month_range(date.today())

    col1, col2 = st.columns([1, 2])
    with col1:
        quick = st.selectbox(
            "Quick range",
            options=[None] + list(QuickDateRange),
            format_func=lambda x: "Custom" if x is None else x.value,
        )
        if quick is not None:
            st.session_state.date_range = resolve_quick_range(quick)
    with col2:
        picked = st.date_input("Date range", value=st.session_state.date_range)
        if isinstance(picked, (list, tuple)) and len(picked) == 2 and quick is None:
            st.session_state.date_range = (picked[0], picked[1])

    start, end = st.session_state.date_range

    sort_col1, sort_col2 = st.columns(2)
    with sort_col1:
        income_by_date = st.toggle("Sort income by date", value=False)
    with sort_col2:
        expenses_by_date = st.toggle("Sort expenses by date", value=False)

    try:
        summary = run_async(
            dashboard.summary(
                start=start,
                end=end,
                income_by_date=income_by_date,
                expenses_by_date=expenses_by_date,
            )
        )
    except StorageError as e:
        st.error(f"Could not read local data: {e}")
        return

    render_totals(summary)
    st.markdown("---")
    render_transaction_lists(summary, ledger_flow)
    st.markdown("---")
    render_accounts(summary, ledger_flow)


def render_totals(summary: DashboardSummary):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("**Income**")
        st.markdown(f'<div class="big-number">{format_money(summary.total_income)}</div>', unsafe_allow_html=True)
        st.progress(summary.income_progress, text=f"of {format_money(summary.forecasted_income)}")
    with col2:
        st.markdown("**Expenses**")
        st.markdown(f'<div class="big-number">{format_money(summary.total_expenses)}</div>', unsafe_allow_html=True)
        st.progress(summary.expense_progress, text=f"of {format_money(summary.forecasted_expenses)}")
    with col3:
        st.markdown("**Net**")
        st.markdown(f'<div class="big-number">{format_money(summary.net)}</div>', unsafe_allow_html=True)


def render_transaction_lists(summary: DashboardSummary, ledger_flow: LedgerFlow):
    for label, transactions in (("Income", summary.income), ("Expenses", summary.expenses)):
        with st.expander(f"{label} ({len(transactions)})"):
            if not transactions:
                st.caption("Nothing in this range.")
            for transaction in transactions:
                col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
                col1.markdown(f"**{transaction.title}**  \n{transaction.details}")
                col2.write(transaction.date.strftime("%b %d, %Y"))
                col3.write(format_money(transaction.amount))
                if col4.button("🗑️", key=f"delete-{transaction.id}", help="Delete"):
                    run_async(ledger_flow.delete_transaction(transaction.id))
                    st.rerun()


def render_accounts(summary: DashboardSummary, ledger_flow: LedgerFlow):
    st.subheader(f"Accounts · {format_money(summary.total_funds)}")
    if not summary.account_groups:
        st.caption("No linked accounts yet. Sync to load them.")
        return

    for group in summary.account_groups:
        with st.expander(f"{group.bank_name} · {format_money(group.total)}"):
            for account in group.accounts:
                col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
                star = "⭐ " if account.is_favorite else ""
                col1.markdown(f"{star}**{account.account_name}**")
                col2.write(
                    f"{format_money(account.current_balance)} "
                    f"(available {format_money(account.available_balance)})"
                )
                favorite = col3.checkbox(
                    "Favorite",
                    value=account.is_favorite,
                    key=f"fav-{account.id}",
                )
                include = col4.checkbox(
                    "In total",
                    value=account.include_in_total,
                    key=f"incl-{account.id}",
                )
                if favorite != account.is_favorite:
                    run_async(ledger_flow.set_favorite(account.id, favorite))
                    st.rerun()
                if include != account.include_in_total:
                    run_async(ledger_flow.set_include_in_total(account.id, include))
                    st.rerun()


def render_add_transaction_page(ledger_flow: LedgerFlow):
    """Manual entry of an income or expense."""
    st.title("➕ Add Transaction")

    with st.form("add_transaction", clear_on_submit=True):
        transaction_type = st.radio(
            "Type",
            options=list(TransactionType),
            format_func=lambda t: t.value.title(),
            horizontal=True,
        )
        title = st.text_input("Title")
        amount = st.text_input("Amount", placeholder="0.00")
        transaction_date = st.date_input("Date", value=date.today())
        details = st.text_area("Details")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            transaction = run_async(
                ledger_flow.add_transaction(
                    title=title,
                    amount=amount,
                    transaction_type=transaction_type,
                    transaction_date=transaction_date,
                    details=details,
                )
            )
        except ValueError as e:
            st.error(str(e))
            return
        except StorageError as e:
            st.error(f"Could not save: {e}")
            return
        st.success(f"Saved {transaction.title} · {format_money(transaction.amount)}")


def render_settings_page(ledger_flow: LedgerFlow, auth):
    """Configuration status, sign-out and data reset."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    groups = [
        ("Backend API", "api"),
        ("Supabase (Sign-in)", "supabase"),
        ("Local Storage", "storage"),
        ("App Defaults", "app"),
    ]
    for name, key in groups:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Account")
    if isinstance(auth, SupabaseAuthService) and st.button("Sign Out"):
        try:
            run_async(auth.sign_out())
        except AuthError as e:
            st.warning(f"Signed out locally; the server said: {e}")
        st.rerun()

    st.markdown("---")
    st.markdown("### Data")
    confirm = st.checkbox("I understand this deletes every local transaction and account")
    if st.button("Clear All Data", disabled=not confirm):
        transaction_count, account_count = run_async(ledger_flow.clear_all_data())
        st.success(f"Deleted {transaction_count} transactions and {account_count} accounts")


if __name__ == "__main__":
    main()
