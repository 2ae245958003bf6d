"""
Markaz Page - Exam centers and their host madrasas.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import active_badge, to_bengali_number
from utils.session import get_service, get_state, drop_state
from utils.ui import (
    show_field_error, show_form_error, apply_draft, debounced_search, pagination_controls, csv_download
)
from core.services.markaz_service import MarkazService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(MarkazService)
controller = get_state("markaz_list", svc.list_controller)
zones = svc.zones()
zone_names = {z.id: z.name_bn for z in zones}

st.title("Markaz (Exam Centers)")
st.markdown("---")

tab_list, tab_form = st.tabs(["Markazes", "Add / Edit Markaz"])

# ===========================
# TAB 1 - Markazes
# ===========================
with tab_list:
    term = debounced_search("Search by name", key="markaz_search")
    controller.update(search_term=term)
    controller.refresh()

    markazes = controller.items
    if markazes:
        df = pd.DataFrame([
            {
                "Code": to_bengali_number(m.markaz_code),
                "Name": m.name_bn,
                "Host Madrasa": m.host_madrasa_name or "",
                "Zone": m.zone_name or zone_names.get(m.zone_id, ""),
                "Capacity": m.examinee_capacity,
                "Status": active_badge(m.is_active),
            }
            for m in markazes
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        csv_download(df, "markazes.csv", key="markaz_csv")
    elif controller.last_error is None:
        st.info("No markazes found.")
    pagination_controls(controller, key="markaz_pages")

# ===========================
# TAB 2 - Add / Edit Markaz
# ===========================
with tab_form:
    by_id = {m.id: m for m in markazes}
    choice = st.selectbox(
        "Markaz", ["__new__"] + list(by_id),
        format_func=lambda v: "➕ New markaz" if v == "__new__" else by_id[v].name_bn,
        key="markaz_choice",
    )
    selected = by_id.get(choice)
    form = get_state("markaz_form", lambda: svc.form(selected))
    if (form.markaz.id if form.markaz else None) != (selected.id if selected else None):
        form = svc.form(selected)
        st.session_state["markaz_form"] = form

    if selected is not None:
        if st.button("Deactivate" if selected.is_active else "Activate", key="markaz_toggle"):
            svc.toggle_active(selected)
            st.rerun()

    st.markdown("#### Host Madrasa")
    host_term = st.text_input("Search madrasa by name or code (min 2 characters)", key="markaz_host_search")
    hosts = svc.search_hosts(host_term, current_host_id=form.draft['host_madrasa_id'])
    if host_term and not hosts:
        st.caption("No available madrasa matches.")
    for madrasa in hosts:
        if st.button(f"{madrasa.madrasa_code} - {madrasa.name_bn}", key=f"host_{madrasa.id}"):
            form.select_host(madrasa)
            st.rerun()
    if form.draft['host_madrasa_name']:
        st.success(f"Selected host: {form.draft['host_madrasa_name']}")
    show_field_error(form, 'host_madrasa_id')

    show_form_error(form)
    with st.form("markaz_form_widget"):
        st.text_input("Markaz Code", value="" if form.draft['markaz_code'] is None else str(form.draft['markaz_code']),
                      disabled=True)
        name_bn = st.text_input("Markaz Name *", value=form.draft['name_bn'])
        show_field_error(form, 'name_bn')
        zone_ids = [None] + list(zone_names)
        zone_id = st.selectbox(
            "Zone *", zone_ids,
            index=zone_ids.index(form.draft['zone_id']) if form.draft['zone_id'] in zone_ids else 0,
            format_func=lambda z: "Select zone" if z is None else zone_names[z],
        )
        show_field_error(form, 'zone_id')
        capacity = st.text_input(
            "Examinee Capacity *",
            value="" if form.draft['examinee_capacity'] is None else str(form.draft['examinee_capacity']),
        )
        show_field_error(form, 'examinee_capacity')
        submitted = st.form_submit_button("Update Markaz" if form.is_edit else "Create Markaz",
                                          use_container_width=True)

    if submitted:
        apply_draft(form, {'name_bn': name_bn, 'zone_id': zone_id, 'examinee_capacity': capacity})
        form.submit(on_close=lambda: drop_state("markaz_form", "markaz_host_search"))
        st.rerun()
