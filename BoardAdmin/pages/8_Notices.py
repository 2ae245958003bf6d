"""
Notices Page - Publish, edit, hide and delete notices.
Roles: admin
"""

import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import format_date, active_badge
from utils.session import get_service, get_state, drop_state
from utils.ui import show_field_error, show_form_error, apply_draft
from core.services.notice_service import NoticeService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(NoticeService)
notices = svc.all_notices()

st.title("Notices")
st.markdown("---")

col_list, col_form = st.columns([3, 2])

with col_list:
    if not notices:
        st.info("No notices yet.")
    for notice in notices:
        with st.container(border=True):
            st.markdown(f"**{notice.title}**  \n{format_date(notice.created_at)} · {active_badge(notice.is_active)}")
            st.write(notice.content)
            b1, b2, b3 = st.columns(3)
            if b1.button("Edit", key=f"notice_edit_{notice.id}"):
                st.session_state["notice_form"] = svc.form(notice)
                st.rerun()
            if b2.button("Hide" if notice.is_active else "Show", key=f"notice_toggle_{notice.id}"):
                svc.toggle_active(notice)
                st.rerun()
            if b3.button("Delete", key=f"notice_delete_{notice.id}"):
                svc.delete_notice(notice)
                st.rerun()

with col_form:
    form = get_state("notice_form", svc.form)
    st.subheader("Edit Notice" if form.is_edit else "New Notice")
    if form.is_edit and st.button("Cancel editing", key="notice_cancel"):
        drop_state("notice_form")
        st.rerun()

    show_form_error(form)
    with st.form("notice_form_widget"):
        title = st.text_input("Title *", value=form.draft['title'])
        show_field_error(form, 'title')
        content = st.text_area("Content *", value=form.draft['content'], height=200)
        show_field_error(form, 'content')
        is_active = st.checkbox("Visible", value=form.draft['is_active'])
        submitted = st.form_submit_button("Save Notice", use_container_width=True)

    if submitted:
        apply_draft(form, {'title': title, 'content': content, 'is_active': is_active})
        if form.is_edit and not form.is_dirty:
            st.info("No changes to save.")
        else:
            form.submit(on_close=lambda: drop_state("notice_form"))
            st.rerun()
