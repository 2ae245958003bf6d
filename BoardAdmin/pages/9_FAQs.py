"""
FAQs Page - Frequently asked questions shown to madrasas.
Roles: admin
"""

import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import active_badge
from utils.session import get_service, get_state, drop_state
from utils.ui import show_field_error, show_form_error, apply_draft
from core.services.faq_service import FaqService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(FaqService)
faqs = svc.all_faqs()

st.title("FAQs")
st.markdown("---")

col_list, col_form = st.columns([3, 2])

with col_list:
    if not faqs:
        st.info("No FAQs yet.")
    for faq in faqs:
        with st.expander(f"{faq.question} ({active_badge(faq.is_active)})"):
            st.write(faq.answer)
            b1, b2, b3 = st.columns(3)
            if b1.button("Edit", key=f"faq_edit_{faq.id}"):
                st.session_state["faq_form"] = svc.form(faq)
                st.rerun()
            if b2.button("Deactivate" if faq.is_active else "Activate", key=f"faq_toggle_{faq.id}"):
                svc.toggle_active(faq)
                st.rerun()
            # Deleting keeps the row and only hides it
            if faq.is_active and b3.button("Delete", key=f"faq_delete_{faq.id}"):
                svc.deactivate(faq)
                st.rerun()

with col_form:
    form = get_state("faq_form", svc.form)
    st.subheader("Edit FAQ" if form.is_edit else "New FAQ")
    if form.is_edit and st.button("Cancel editing", key="faq_cancel"):
        drop_state("faq_form")
        st.rerun()

    show_form_error(form)
    with st.form("faq_form_widget"):
        question = st.text_input("Question *", value=form.draft['question'])
        show_field_error(form, 'question')
        answer = st.text_area("Answer *", value=form.draft['answer'], height=160)
        show_field_error(form, 'answer')
        is_active = st.checkbox("Active", value=form.draft['is_active'])
        submitted = st.form_submit_button("Save FAQ", use_container_width=True)

    if submitted:
        apply_draft(form, {'question': question, 'answer': answer, 'is_active': is_active})
        if form.is_edit and not form.is_dirty:
            st.info("No changes to save.")
        else:
            form.submit(on_close=lambda: drop_state("faq_form"))
            st.rerun()
