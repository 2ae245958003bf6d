"""
Dashboard Page - Bank balances and recent ledger activity.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role, get_current_user
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import (
    format_currency, format_date, active_badge, TRANSACTION_TYPE_LABELS
)
from utils.session import get_service
from core.services.bank_service import BankService

require_role(ADMIN_ROLES)
render_sidebar()

sd = get_current_user()
svc = get_service(BankService)

st.title("Dashboard Overview")
st.caption(f"Welcome, **{sd.get('username', 'User')}**")

if st.button("Refresh", key="dash_refresh"):
    svc.load_dashboard(force=True)

data = svc.load_dashboard()
st.markdown("---")

if data is None:
    st.info("Bank data is not available right now.")
    st.stop()

active_accounts = [a for a in data.accounts if a.is_active]
m1, m2, m3 = st.columns(3)
m1.metric("Total Balance", format_currency(data.total_balance))
m2.metric("Active Accounts", len(active_accounts))
m3.metric("Recent Transactions", len(data.recent_transactions))

st.subheader("Accounts")
if data.accounts:
    st.dataframe(pd.DataFrame([
        {
            "Bank": a.bank_name,
            "Branch": a.branch_name or "-",
            "Account Name": a.account_name,
            "Account Number": a.account_number,
            "Type": a.account_type.value.title(),
            "Balance": format_currency(a.current_balance),
            "Status": active_badge(a.is_active),
        }
        for a in data.accounts
    ]), use_container_width=True, hide_index=True)
else:
    st.info("No bank accounts yet.")

st.subheader("Recent Transactions")
if data.recent_transactions:
    st.dataframe(pd.DataFrame([
        {
            "Date": format_date(t.transaction_date),
            "Account": f"{t.bank_name or ''} - {t.account_name or ''}",
            "Type": TRANSACTION_TYPE_LABELS.get(t.transaction_type, t.transaction_type.value),
            "Amount": format_currency(t.amount),
            "Balance After": format_currency(t.balance_after),
            "Description": t.description or "",
        }
        for t in data.recent_transactions
    ]), use_container_width=True, hide_index=True)
else:
    st.info("No transactions recorded.")
