"""
Page guards for the signed-in board staff.
A session ends when the access token expires or after a quiet spell.
"""

import streamlit as st
from datetime import datetime, timedelta

from utils.constants import SESSION_TIMEOUT_MINUTES

SESSION_KEY = "session_data"
_SIGN_OUT_REASON_KEY = "_sign_out_reason"


def get_current_user() -> dict:
    return st.session_state.get(SESSION_KEY, {})


def is_logged_in() -> bool:
    return SESSION_KEY in st.session_state


def start_session(login_result: dict):
    """Store what login() returned; pages read it through get_current_user()."""
    st.session_state[SESSION_KEY] = {
        "user_id": login_result.get("user_id"),
        "username": login_result.get("username"),
        "email": login_result.get("email"),
        "role": login_result.get("role"),
        "session_token": login_result.get("session_token"),
        "expires_at": login_result.get("expires_at"),
        "login_time": login_result.get("login_time", datetime.now()),
        "last_activity": datetime.now(),
    }


def require_role(allowed_roles: tuple):
    """Stop the page unless a live session with one of the roles exists."""
    if not is_logged_in():
        st.warning("Please log in to continue.")
        st.stop()

    sd = get_current_user()
    reason = _session_end_reason(sd)
    if reason:
        handle_logout(reason)

    if sd.get("role") not in [r.lower() for r in allowed_roles]:
        st.error("You do not have permission to access this page.")
        st.stop()
    sd["last_activity"] = datetime.now()


def _session_end_reason(sd: dict):
    now = datetime.now()
    expires_at = sd.get("expires_at")
    if expires_at and now >= expires_at:
        return "Your session has expired. Please log in again."
    last_activity = sd.get("last_activity")
    if last_activity and now - last_activity > timedelta(minutes=SESSION_TIMEOUT_MINUTES):
        return f"Signed out after {SESSION_TIMEOUT_MINUTES} minutes of inactivity."
    return None


def handle_logout(reason: str = None):
    """Sign out, forget every cached list and open form, and rerun."""
    from core.services.authentication_service import AuthenticationService
    from utils.session import get_gateway

    sd = get_current_user()
    if sd.get("session_token"):
        AuthenticationService(get_gateway()).logout(sd.get("user_id"))

    st.session_state.clear()
    if reason:
        st.session_state[_SIGN_OUT_REASON_KEY] = reason
    st.rerun()


def pop_sign_out_reason():
    """Message for the login page after an automatic sign-out"""
    return st.session_state.pop(_SIGN_OUT_REASON_KEY, None)
