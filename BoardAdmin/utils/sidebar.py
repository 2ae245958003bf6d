"""
Sidebar shown on every signed-in page: who is signed in, until when,
and the logout button. Also shows notifications left by the last rerun.
"""

import streamlit as st
from utils.auth_guard import handle_logout, get_current_user
from utils.formatters import format_date
from utils.notifier import flush_notifications


def render_sidebar():
    flush_notifications()
    with st.sidebar:
        st.markdown("## 📚 Board Admin")
        st.divider()

        sd = get_current_user()
        if not sd:
            return

        st.markdown(f"**{sd.get('username') or sd.get('email')}**")
        st.caption(f"{(sd.get('role') or '').replace('_', ' ').title()} · signed in {format_date(sd.get('login_time'))}")
        if sd.get("expires_at"):
            st.caption(f"Session valid until {sd['expires_at'].strftime('%I:%M %p')}")

        st.divider()
        if st.button("Logout", use_container_width=True, key="sidebar_logout"):
            handle_logout()
