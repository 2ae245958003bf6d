"""
Kitabs Page - Textbook catalogue.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import format_date
from utils.session import get_service, get_state, drop_state
from utils.ui import (
    show_field_error, show_form_error, apply_draft, debounced_search, pagination_controls, csv_download
)
from core.services.kitab_service import KitabService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(KitabService)
controller = get_state("kitab_list", svc.list_controller)

st.title("Kitabs")
st.markdown("---")

col_list, col_form = st.columns([3, 2])

with col_list:
    term = debounced_search("Search by code or name", key="kitab_search")
    controller.update(search_term=term)
    controller.refresh()

    kitabs = controller.items
    if kitabs:
        df = pd.DataFrame([
            {
                "Code": k.kitab_code,
                "Name (Bengali)": k.name_bn,
                "Name (Arabic)": k.name_ar or "",
                "Full Marks": k.full_marks,
                "Created": format_date(k.created_at),
            }
            for k in kitabs
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        csv_download(df, "kitabs.csv", key="kitab_csv")
    elif controller.last_error is None:
        st.info("No kitabs found.")
    pagination_controls(controller, key="kitab_pages")

with col_form:
    by_id = {k.id: k for k in kitabs}
    choice = st.selectbox(
        "Kitab", ["__new__"] + list(by_id),
        format_func=lambda v: "➕ New kitab" if v == "__new__" else f"{by_id[v].kitab_code} - {by_id[v].name_bn}",
        key="kitab_choice",
    )
    selected = by_id.get(choice)
    form = get_state("kitab_form", lambda: svc.form(selected))
    if (form.kitab.id if form.kitab else None) != (selected.id if selected else None):
        form = svc.form(selected)
        st.session_state["kitab_form"] = form

    show_form_error(form)
    with st.form("kitab_form_widget"):
        if form.is_edit:
            st.text_input("Code", value=form.kitab.kitab_code or "", disabled=True)
        name_bn = st.text_input("Name (Bengali) *", value=form.draft['name_bn'])
        show_field_error(form, 'name_bn')
        name_ar = st.text_input("Name (Arabic)", value=form.draft['name_ar'])
        full_marks = st.text_input(
            "Full Marks *", value="" if form.draft['full_marks'] is None else str(form.draft['full_marks'])
        )
        show_field_error(form, 'full_marks')
        submitted = st.form_submit_button("Update Kitab" if form.is_edit else "Create Kitab",
                                          use_container_width=True)

    if submitted:
        apply_draft(form, {'name_bn': name_bn, 'name_ar': name_ar, 'full_marks': full_marks})
        form.submit(on_close=lambda: drop_state("kitab_form"))
        st.rerun()

    if selected is not None:
        with st.expander("Delete this kitab"):
            st.warning("Kitabs assigned to a marhala cannot be deleted.")
            if st.button("Delete", key="kitab_delete", type="primary"):
                svc.delete_kitab(selected, on_close=lambda: drop_state("kitab_form", "kitab_choice"))
                st.rerun()
