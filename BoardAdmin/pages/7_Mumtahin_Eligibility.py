"""
Mumtahin Eligibility Page - Mark active teachers as eligible examiners.
Roles: admin
"""

import pandas as pd
import streamlit as st

from utils.auth_guard import require_role
from utils.constants import ADMIN_ROLES
from utils.sidebar import render_sidebar
from utils.formatters import yes_no
from utils.session import get_service
from utils.ui import debounced_search, csv_download
from core.services.eligibility_service import EligibilityService

require_role(ADMIN_ROLES)
render_sidebar()

svc = get_service(EligibilityService)

st.title("Mumtahin Eligibility")
st.caption("Only active teachers are listed. Changes apply immediately.")
st.markdown("---")

if st.button("Reload", key="eligibility_reload"):
    svc.load_eligible_ids(force=True)

svc.load_teachers()
svc.load_eligible_ids()

term = debounced_search("Search by name, code or mobile", key="eligibility_search")
rows = svc.teachers_with_eligibility(term)

m1, m2 = st.columns(2)
m1.metric("Active Teachers", len(svc.load_teachers()))
m2.metric("Eligible Examiners", len(svc.eligible_ids))

if not rows:
    st.info("No teachers found.")
else:
    csv_download(pd.DataFrame([
        {"Code": t.teacher_code, "Name": t.name_bn, "Mobile": t.mobile, "Eligible": yes_no(flag)}
        for t, flag in rows
    ]), "mumtahin_eligibility.csv", key="eligibility_csv")

    for teacher, eligible in rows:
        c1, c2, c3 = st.columns([1, 4, 1])
        c1.write(teacher.teacher_code or "-")
        c2.write(f"{teacher.name_bn} ({teacher.mobile})")
        with c3:
            checked = st.checkbox("Eligible", value=eligible, key=f"elig_{teacher.id}_{eligible}")
            if checked != eligible:
                svc.set_eligibility(teacher.id, checked)
                st.rerun()
