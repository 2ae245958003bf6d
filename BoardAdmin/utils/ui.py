"""
Widgets shared by the list and form pages
"""

import time

import pandas as pd
import streamlit as st

from core.controllers.query_controller import Debouncer, ListController
from utils.constants import SEARCH_DEBOUNCE_SECONDS
from utils.session import get_state


def show_field_error(form, field: str):
    message = form.error_for(field)
    if message:
        st.markdown(f":red[{message}]")


def show_form_error(form):
    if form.form_error:
        st.error(form.form_error)


def apply_draft(form, values: dict):
    """Copy submitted widget values into the form; disabled fields are ignored by the form"""
    for field, value in values.items():
        if form.draft.get(field) != value:
            form.on_change(field, value)


def debounced_search(label: str, key: str, placeholder: str = "") -> str:
    """Search box whose value settles only after the quiet period"""
    debouncer: Debouncer = get_state(f"{key}_debouncer", lambda: Debouncer(SEARCH_DEBOUNCE_SECONDS))
    typed = st.text_input(label, key=key, placeholder=placeholder)
    debouncer.push(typed.strip())
    if debouncer.poll():
        return debouncer.value
    if not debouncer.is_settled:
        time.sleep(debouncer.remaining())
        st.rerun()
    return debouncer.value


def pagination_controls(controller: ListController, key: str):
    total_pages = controller.total_pages
    page = controller.query.page
    col_prev, col_info, col_next = st.columns([1, 3, 1])
    with col_prev:
        if st.button("◀ Previous", key=f"{key}_prev", disabled=page <= 1 or controller.is_loading):
            controller.set_page(page - 1)
            st.rerun()
    with col_info:
        st.caption(f"Page {page} of {total_pages} ({controller.total_items} records)")
    with col_next:
        if st.button("Next ▶", key=f"{key}_next", disabled=page >= total_pages or controller.is_loading):
            controller.set_page(page + 1)
            st.rerun()


def csv_download(df: pd.DataFrame, file_name: str, key: str):
    if df.empty:
        return
    csv = df.to_csv(index=False).encode("utf-8")
    st.download_button("Download CSV", csv, file_name=file_name, mime="text/csv", key=key)
