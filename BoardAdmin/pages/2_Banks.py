"""
Bank Accounts Page - Create and edit accounts, record transactions.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import format_currency, format_date, active_badge, TRANSACTION_TYPE_LABELS
from utils.session import get_service, get_state, drop_state
from utils.ui import show_field_error, show_form_error, apply_draft, csv_download
from core.models.entities import BankAccountType, BankTransactionType
from core.services.bank_service import BankService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(BankService)
data = svc.load_dashboard()
accounts = data.accounts if data else []

st.title("Bank Accounts")
st.markdown("---")

tab_accounts, tab_edit, tab_txn = st.tabs(["Accounts", "Add / Edit Account", "New Transaction"])


def _close_account_form():
    drop_state("bank_account_form")


def _close_txn_form():
    drop_state("bank_txn_form")


# ===========================
# TAB 1 - Accounts
# ===========================
with tab_accounts:
    st.metric("Total Balance", format_currency(data.total_balance if data else 0))
    if accounts:
        df = pd.DataFrame([
            {
                "Bank": a.bank_name,
                "Branch": a.branch_name or "-",
                "Account Name": a.account_name,
                "Account Number": a.account_number,
                "Type": a.account_type.value.title(),
                "Opening Date": format_date(a.opening_date),
                "Opening Balance": format_currency(a.opening_balance),
                "Current Balance": format_currency(a.current_balance),
                "Status": active_badge(a.is_active),
            }
            for a in accounts
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        csv_download(df, "bank_accounts.csv", key="bank_csv")
    else:
        st.info("No bank accounts yet.")

# ===========================
# TAB 2 - Add / Edit Account
# ===========================
with tab_edit:
    labels = {a.id: f"{a.bank_name} - {a.account_number}" for a in accounts}
    choice = st.selectbox(
        "Account", ["__new__"] + list(labels),
        format_func=lambda v: "➕ New account" if v == "__new__" else labels[v],
        key="bank_account_choice",
    )
    selected = next((a for a in accounts if a.id == choice), None)
    form = get_state("bank_account_form", lambda: svc.account_form(accounts, selected))
    if (form.account.id if form.account else None) != (selected.id if selected else None):
        form = svc.account_form(accounts, selected)
        st.session_state["bank_account_form"] = form

    show_form_error(form)
    with st.form("bank_account_form_widget"):
        c1, c2 = st.columns(2)
        with c1:
            bank_name = st.text_input("Bank Name *", value=form.draft['bank_name'])
            show_field_error(form, 'bank_name')
            account_name = st.text_input("Account Name *", value=form.draft['account_name'])
            show_field_error(form, 'account_name')
            account_type = st.selectbox(
                "Account Type", list(BankAccountType),
                index=list(BankAccountType).index(form.draft['account_type']),
                format_func=lambda t: t.value.title(),
            )
            opening_date = st.date_input(
                "Opening Date *", value=form.draft['opening_date'],
                disabled=form.is_field_disabled('opening_date'),
            )
            show_field_error(form, 'opening_date')
        with c2:
            branch_name = st.text_input("Branch Name", value=form.draft['branch_name'])
            account_number = st.text_input("Account Number *", value=form.draft['account_number'])
            show_field_error(form, 'account_number')
            opening_balance = st.text_input(
                "Opening Balance (৳)", value=str(form.draft['opening_balance']),
                disabled=form.is_field_disabled('opening_balance'),
            )
            show_field_error(form, 'opening_balance')

        submitted = st.form_submit_button(
            "Update Account" if form.is_edit else "Create Account", use_container_width=True
        )

    if submitted:
        apply_draft(form, {
            'bank_name': bank_name,
            'branch_name': branch_name,
            'account_name': account_name,
            'account_number': account_number,
            'account_type': account_type,
            'opening_date': opening_date,
            'opening_balance': opening_balance,
        })
        form.submit(on_close=_close_account_form)
        st.rerun()

# ===========================
# TAB 3 - New Transaction
# ===========================
with tab_txn:
    txn_form = get_state("bank_txn_form", lambda: svc.transaction_form(accounts))
    if not txn_form.active_accounts:
        st.info("Create an active bank account first.")
    else:
        txn_type = st.radio(
            "Transaction Type", list(BankTransactionType),
            index=list(BankTransactionType).index(txn_form.transaction_type),
            format_func=lambda t: TRANSACTION_TYPE_LABELS[t], horizontal=True,
            key="bank_txn_type",
        )
        if txn_type != txn_form.transaction_type:
            txn_form.on_change('transaction_type', txn_type)

        account_ids = [None] + [a.id for a in txn_form.active_accounts]
        account_labels = {a.id: f"{a.bank_name} - {a.account_number} ({format_currency(a.current_balance)})"
                          for a in txn_form.active_accounts}

        show_form_error(txn_form)
        with st.form("bank_txn_form_widget"):
            amount = st.text_input("Amount (৳) *", value=str(txn_form.draft['amount'] or ''))
            show_field_error(txn_form, 'amount')
            txn_date = st.date_input("Transaction Date *", value=txn_form.draft['transaction_date'])
            show_field_error(txn_form, 'transaction_date')

            from_account = st.selectbox(
                "From Account", account_ids,
                index=account_ids.index(txn_form.draft['from_account_id'])
                if txn_form.draft['from_account_id'] in account_ids else 0,
                format_func=lambda v: "Select account" if v is None else account_labels[v],
                disabled=txn_form.is_field_disabled('from_account_id'),
            )
            show_field_error(txn_form, 'from_account_id')
            to_account = st.selectbox(
                "To Account", account_ids,
                index=account_ids.index(txn_form.draft['to_account_id'])
                if txn_form.draft['to_account_id'] in account_ids else 0,
                format_func=lambda v: "Select account" if v is None else account_labels[v],
                disabled=txn_form.is_field_disabled('to_account_id'),
            )
            show_field_error(txn_form, 'to_account_id')

            check_number = st.text_input("Cheque Number", value=txn_form.draft['check_number'])
            description = st.text_area("Description", value=txn_form.draft['description'])
            txn_submitted = st.form_submit_button("Record Transaction", use_container_width=True)

        if txn_submitted:
            apply_draft(txn_form, {
                'amount': amount,
                'transaction_date': txn_date,
                'from_account_id': from_account,
                'to_account_id': to_account,
                'check_number': check_number,
                'description': description,
            })
            txn_form.submit(on_close=_close_txn_form)
            st.rerun()
