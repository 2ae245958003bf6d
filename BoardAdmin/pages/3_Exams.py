"""
Exams Page - List, create and edit exams; change lifecycle status.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import format_currency, format_date, exam_status_label, active_badge
from utils.session import get_service, get_state, drop_state
from utils.ui import (
    show_field_error, show_form_error, apply_draft, debounced_search, pagination_controls, csv_download
)
from core.models.entities import ExamStatus
from core.policies.exam_policy import allowed_transitions, is_fully_locked
from core.services.exam_service import ExamService, REGISTRATION_FEE_FIELDS, FEE_ROW_FIELDS

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(ExamService)
controller = get_state("exam_list", svc.list_controller)
marhalas = svc.marhalas()
marhala_names = {m.id: m.name_bn for m in marhalas}

st.title("Exam Management")
st.markdown("---")

tab_list, tab_create, tab_edit = st.tabs(["Exams", "Create Exam", "Edit / Status"])


def _text(value) -> str:
    return "" if value is None else str(value)


def render_exam_form(form, form_key: str, submit_label: str, on_close):
    """Shared create/edit layout; locked groups render disabled"""
    show_form_error(form)

    # Marhala selection changes the row set, so it lives outside the form
    selected = st.multiselect(
        "Marhalas",
        [m.id for m in marhalas],
        default=[r['marhala_id'] for r in form.fee_rows if r['marhala_id'] in marhala_names],
        format_func=lambda mid: marhala_names.get(mid, mid),
        disabled=form.is_field_disabled('exam_fees'),
        key=f"{form_key}_marhalas",
    )
    current = {r['marhala_id'] for r in form.fee_rows}
    for mid in selected:
        if mid not in current:
            form.add_fee_row(mid)
    for mid in current - set(selected):
        form.remove_fee_row(mid)
    show_field_error(form, 'exam_fee_selection')

    with st.form(form_key):
        name = st.text_input("Exam Name *", value=form.draft['name'],
                             disabled=form.is_field_disabled('name'))
        show_field_error(form, 'name')

        c1, c2 = st.columns(2)
        with c1:
            deadline = st.date_input(
                "Registration Deadline *", value=form.draft['registration_deadline'],
                disabled=form.is_field_disabled('registration_deadline'),
            )
            show_field_error(form, 'registration_deadline')
        with c2:
            start_reg = st.text_input(
                "Starting Registration Number *", value=_text(form.draft['starting_registration_number']),
                disabled=form.is_field_disabled('starting_registration_number'),
            )
            show_field_error(form, 'starting_registration_number')

        st.markdown("#### Registration Fees")
        fee_values = {}
        fee_cols = st.columns(len(REGISTRATION_FEE_FIELDS))
        for col, (field, label) in zip(fee_cols, REGISTRATION_FEE_FIELDS):
            with col:
                fee_values[field] = st.text_input(
                    label, value=_text(form.draft[field]), disabled=form.is_field_disabled(field)
                )
                show_field_error(form, field)

        st.markdown("#### Marhala Fees")
        row_values = {}
        for row in form.fee_rows:
            mid = row['marhala_id']
            st.markdown(f"**{marhala_names.get(mid, mid)}**")
            cols = st.columns(len(FEE_ROW_FIELDS) + 1)
            values = {}
            with cols[0]:
                values['starting_roll_number'] = st.text_input(
                    "Starting roll", value=_text(row['starting_roll_number']),
                    disabled=form.is_field_disabled('exam_fees'), key=f"{form_key}_{mid}_roll",
                )
                message = form.fee_error(mid, 'starting_roll_number')
                if message:
                    st.markdown(f":red[{message}]")
            for col, (field, label) in zip(cols[1:], FEE_ROW_FIELDS):
                with col:
                    values[field] = st.text_input(
                        label, value=_text(row[field]),
                        disabled=form.is_field_disabled('exam_fees'), key=f"{form_key}_{mid}_{field}",
                    )
                    message = form.fee_error(mid, field)
                    if message:
                        st.markdown(f":red[{message}]")
            row_values[mid] = values

        submitted = st.form_submit_button(submit_label, use_container_width=True,
                                          disabled=not form.can_submit)

    if submitted:
        apply_draft(form, {
            'name': name,
            'registration_deadline': deadline,
            'starting_registration_number': start_reg,
            **fee_values,
        })
        for mid, values in row_values.items():
            for field, value in values.items():
                form.on_fee_change(mid, field, value)
        form.submit(on_close=on_close)
        st.rerun()


# ===========================
# TAB 1 - Exams
# ===========================
with tab_list:
    f1, f2, f3 = st.columns([3, 2, 2])
    with f1:
        term = debounced_search("Search by name", key="exam_search")
    with f2:
        status_filter = st.selectbox(
            "Status", [None] + list(ExamStatus),
            format_func=lambda s: "All" if s is None else exam_status_label(s),
        )
    with f3:
        active_filter = st.selectbox(
            "Active", [None, True, False],
            format_func=lambda v: "All" if v is None else active_badge(v),
        )

    filters = {}
    if status_filter is not None:
        filters['status'] = status_filter
    if active_filter is not None:
        filters['is_active'] = active_filter
    controller.update(search_term=term, filters=filters)
    controller.refresh()

    exams = controller.items
    if exams:
        df = pd.DataFrame([
            {
                "Name": e.name,
                "Status": exam_status_label(e.status),
                "Active": active_badge(e.is_active),
                "Registration Deadline": format_date(e.registration_deadline),
                "Regular Fee": format_currency(e.registration_fee_regular),
                "Marhalas": len(e.exam_fees),
                "Created": format_date(e.created_at),
            }
            for e in exams
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        csv_download(df, "exams.csv", key="exam_csv")
    elif controller.last_error is None:
        st.info("No exams found.")
    pagination_controls(controller, key="exam_pages")

# ===========================
# TAB 2 - Create Exam
# ===========================
with tab_create:
    create_form = get_state("exam_create_form", svc.create_form)
    render_exam_form(create_form, "exam_create", "Create Exam",
                     on_close=lambda: drop_state("exam_create_form", "exam_create_marhalas"))

# ===========================
# TAB 3 - Edit / Status
# ===========================
with tab_edit:
    exams = controller.items
    if not exams:
        st.info("Select a page of exams in the list first.")
    else:
        by_id = {e.id: e for e in exams}
        exam_id = st.selectbox(
            "Exam", list(by_id),
            format_func=lambda i: f"{by_id[i].name} ({exam_status_label(by_id[i].status)})",
            key="exam_edit_choice",
        )
        exam = by_id[exam_id]

        edit_form = get_state("exam_edit_form", lambda: svc.edit_form(exam))
        if edit_form.exam.id != exam.id or edit_form.exam.status != exam.status:
            edit_form = svc.edit_form(exam)
            st.session_state["exam_edit_form"] = edit_form

        st.markdown("#### Status")
        s1, s2, s3 = st.columns([2, 2, 1])
        s1.metric("Current", exam_status_label(exam.status))
        targets = sorted(allowed_transitions(exam.status), key=lambda s: list(ExamStatus).index(s))
        with s2:
            target = st.selectbox(
                "Move to", targets, format_func=exam_status_label,
                disabled=not targets, key=f"exam_target_{exam.id}",
            )
        with s3:
            st.markdown("<br>", unsafe_allow_html=True)
            if st.button("Apply", disabled=not targets, key="exam_status_apply"):
                svc.change_status(exam, target, on_close=lambda: drop_state("exam_edit_form"))
                st.rerun()

        if st.button("Deactivate" if exam.is_active else "Activate", key="exam_toggle"):
            svc.toggle_active(exam)
            st.rerun()

        st.markdown("---")
        if is_fully_locked(exam.status):
            st.info(f"{exam_status_label(exam.status)} exams cannot be edited.")
        elif not edit_form.can_submit:
            st.info("No fields can be edited in the current status.")
        render_exam_form(edit_form, f"exam_edit_{exam.id}", "Save Changes",
                         on_close=lambda: drop_state("exam_edit_form"))
