"""
Teachers Page - Registration, editing and activation of teachers.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.sidebar import render_sidebar
from utils.constants import ADMIN_ROLES, MOBILE_PAYMENT_PROVIDERS, TEACHER_PAGE_SIZES
from utils.formatters import format_date, active_badge
from utils.session import get_service, get_state, drop_state
from utils.ui import (
    show_field_error, show_form_error, apply_draft, debounced_search, pagination_controls, csv_download
)
from core.controllers.query_controller import SORT_ASC
from core.models.entities import Gender, PaymentType
from core.services.teacher_service import TeacherService, ADDRESS_FIELDS

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(TeacherService)
controller = get_state("teacher_list", svc.list_controller)

SORT_FIELDS = {
    'created_at': "Registered",
    'teacher_code': "Code",
    'name_bn': "Name",
}

st.title("Teachers")
st.markdown("---")

tab_list, tab_form = st.tabs(["Teachers", "Register / Edit"])

# ===========================
# TAB 1 - Teachers
# ===========================
with tab_list:
    f1, f2, f3, f4 = st.columns([3, 2, 1, 1])
    with f1:
        term = debounced_search("Search by name, code or mobile", key="teacher_search")
    with f2:
        active_filter = st.selectbox(
            "Active", [None, True, False],
            format_func=lambda v: "All" if v is None else active_badge(v),
        )
    with f3:
        page_size = st.selectbox("Per page", TEACHER_PAGE_SIZES,
                                 index=TEACHER_PAGE_SIZES.index(controller.query.page_size))
    with f4:
        sort_field = st.selectbox("Sort by", list(SORT_FIELDS), format_func=SORT_FIELDS.get,
                                  index=list(SORT_FIELDS).index(controller.query.sort_field or 'created_at'))
        arrow = "⬆" if controller.query.sort_order == SORT_ASC else "⬇"
        if st.button(f"Order {arrow}", key="teacher_sort_toggle"):
            controller.sort_by(controller.query.sort_field)
            st.rerun()

    if sort_field != controller.query.sort_field:
        controller.sort_by(sort_field)
    controller.update(
        search_term=term, page_size=page_size,
        filters={'is_active': active_filter} if active_filter is not None else {},
    )
    controller.refresh()

    teachers = controller.items
    if teachers:
        df = pd.DataFrame([
            {
                "Code": t.teacher_code,
                "Name": t.name_bn,
                "Name (English)": t.name_en or "",
                "Mobile": t.mobile,
                "District": t.address.district or "" if t.address else "",
                "Payment": t.payment_info.type.value.title() if t.payment_info else "-",
                "Status": active_badge(t.is_active),
                "Registered": format_date(t.created_at),
            }
            for t in teachers
        ])
        st.dataframe(df, use_container_width=True, hide_index=True)
        csv_download(df, "teachers.csv", key="teacher_csv")
    elif controller.last_error is None:
        st.info("No teachers found.")
    pagination_controls(controller, key="teacher_pages")

# ===========================
# TAB 2 - Register / Edit
# ===========================
with tab_form:
    by_id = {t.id: t for t in teachers}
    choice = st.selectbox(
        "Teacher", ["__new__"] + list(by_id),
        format_func=lambda v: "➕ New teacher" if v == "__new__" else f"{by_id[v].teacher_code} - {by_id[v].name_bn}",
        key="teacher_choice",
    )
    selected = by_id.get(choice)
    form = get_state("teacher_form", lambda: svc.form(selected))
    if (form.teacher.id if form.teacher else None) != (selected.id if selected else None):
        form = svc.form(selected)
        st.session_state["teacher_form"] = form

    if selected is not None:
        if st.button("Deactivate" if selected.is_active else "Activate", key="teacher_toggle"):
            svc.toggle_active(selected)
            st.rerun()

    marhalas = svc.marhalas()
    kitabs = svc.kitabs()
    marhala_names = {m.id: m.name_bn for m in marhalas}
    kitab_names = {k.id: f"{k.kitab_code} - {k.name_bn}" for k in kitabs}

    # The payment method switches which fields apply, so it sits outside the form
    payment_options = [None] + list(PaymentType)
    payment_type = st.radio(
        "Payment Method *", payment_options,
        index=payment_options.index(form.payment_type),
        format_func=lambda p: "Not set" if p is None else p.value.title(),
        horizontal=True, key="teacher_payment_type",
    )
    if payment_type != form.payment_type:
        form.on_change('payment_type', payment_type)
    show_field_error(form, 'payment_type')

    show_form_error(form)
    with st.form("teacher_form_widget"):
        st.markdown("#### Personal")
        c1, c2 = st.columns(2)
        with c1:
            name_bn = st.text_input("Name (Bengali) *", value=form.draft['name_bn'])
            show_field_error(form, 'name_bn')
            mobile = st.text_input("Mobile *", value=form.draft['mobile'], placeholder="01XXXXXXXXX")
            show_field_error(form, 'mobile')
            email = st.text_input("Email", value=form.draft['email'])
            show_field_error(form, 'email')
            gender_options = [None] + list(Gender)
            gender = st.selectbox(
                "Gender *", gender_options,
                index=gender_options.index(form.draft['gender']) if form.draft['gender'] in gender_options else 0,
                format_func=lambda g: "Select" if g is None else g.value.title(),
            )
            show_field_error(form, 'gender')
        with c2:
            name_en = st.text_input("Name (English)", value=form.draft['name_en'])
            nid_number = st.text_input("NID Number *", value=form.draft['nid_number'])
            show_field_error(form, 'nid_number')
            date_of_birth = st.date_input("Date of Birth *", value=form.draft['date_of_birth'])
            show_field_error(form, 'date_of_birth')
            photo_url = st.text_input("Photo URL", value=form.draft['photo_url'])

        st.markdown("#### Qualification")
        marhala_ids = [None] + list(marhala_names)
        qualification = st.selectbox(
            "Educational Qualification *", marhala_ids,
            index=marhala_ids.index(form.draft['educational_qualification'])
            if form.draft['educational_qualification'] in marhala_ids else 0,
            format_func=lambda m: "Select marhala" if m is None else marhala_names[m],
        )
        show_field_error(form, 'educational_qualification')
        kitabi = st.multiselect(
            "Kitabi Qualification *", list(kitab_names),
            default=[k for k in form.draft['kitabi_qualification'] if k in kitab_names],
            format_func=kitab_names.get,
        )
        show_field_error(form, 'kitabi_qualification')
        expertise = st.text_input("Expertise Areas (comma separated)", value=form.draft['expertise_areas'])

        st.markdown("#### Address")
        address_values = {}
        address_cols = st.columns(3)
        for i, field in enumerate(ADDRESS_FIELDS):
            with address_cols[i % 3]:
                address_values[field] = st.text_input(field.replace('_', ' ').title(), value=form.draft[field])

        st.markdown("#### Payment")
        p1, p2 = st.columns(2)
        with p1:
            providers = [''] + list(MOBILE_PAYMENT_PROVIDERS)
            mobile_provider = st.selectbox(
                "Mobile Provider", providers,
                index=providers.index(form.draft['mobile_provider'])
                if form.draft['mobile_provider'] in providers else 0,
                disabled=form.is_field_disabled('mobile_provider'),
            )
            show_field_error(form, 'mobile_provider')
            mobile_account = st.text_input("Mobile Account Number", value=form.draft['mobile_account_number'],
                                           disabled=form.is_field_disabled('mobile_account_number'))
            show_field_error(form, 'mobile_account_number')
        with p2:
            bank_values = {}
            for field, label in (('bank_account_name', "Account Name"), ('bank_account_number', "Account Number"),
                                 ('bank_name', "Bank Name"), ('bank_branch_name', "Branch Name")):
                bank_values[field] = st.text_input(label, value=form.draft[field],
                                                   disabled=form.is_field_disabled(field))
                show_field_error(form, field)

        notes = st.text_area("Notes", value=form.draft['notes'])
        submitted = st.form_submit_button("Update Teacher" if form.is_edit else "Register Teacher",
                                          use_container_width=True)

    if submitted:
        apply_draft(form, {
            'name_bn': name_bn,
            'name_en': name_en,
            'mobile': mobile,
            'nid_number': nid_number,
            'email': email,
            'gender': gender,
            'date_of_birth': date_of_birth,
            'photo_url': photo_url,
            'educational_qualification': qualification,
            'kitabi_qualification': kitabi,
            'expertise_areas': expertise,
            'notes': notes,
            'mobile_provider': mobile_provider,
            'mobile_account_number': mobile_account,
            **address_values,
            **bank_values,
        })
        form.submit(on_close=lambda: drop_state("teacher_form", "teacher_payment_type"))
        st.rerun()
