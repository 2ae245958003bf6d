import streamlit as st

st.set_page_config(
    page_title="Examination Board Admin",
    page_icon="📚",
    layout="wide",
    initial_sidebar_state="expanded",
)

from utils.auth_guard import is_logged_in, pop_sign_out_reason, start_session
from utils.exceptions import BoardAdminException


# --- PAGE DEFINITIONS ---
def login_page():
    # Centered login card
    col_left, col_center, col_right = st.columns([1, 2, 1])

    with col_center:
        st.markdown("<br>", unsafe_allow_html=True)
        st.markdown(
            """
            <div style="text-align:center">
                <h1 style="color:#145A32">📚 Examination Board</h1>
                <p style="color:#5D6D7E; font-size:1.1rem">Administration Dashboard</p>
            </div>
            """,
            unsafe_allow_html=True,
        )
        st.markdown("---")

        reason = pop_sign_out_reason()
        if reason:
            st.info(reason)

        # --- Login form ---
        with st.form("login_form", clear_on_submit=False):
            st.subheader("Sign In")
            email = st.text_input("Email", placeholder="admin@example.org")
            password = st.text_input("Password", type="password", placeholder="Enter your password")
            submitted = st.form_submit_button("Login", use_container_width=True)

        if submitted:
            if not email or not password:
                st.error("Please enter both email and password.")
            else:
                with st.spinner("Authenticating..."):
                    try:
                        from core.services.authentication_service import AuthenticationService
                        from utils.session import get_gateway

                        result = AuthenticationService(get_gateway()).login(email, password)
                        start_session(result)
                        st.rerun()
                    except BoardAdminException as e:
                        st.error(f"Authentication error: {e.message}")

        st.markdown("---")
        st.caption("(c) 2026 Examination Board")


# --- NAVIGATION SETUP ---
if not is_logged_in():
    pg = st.navigation([st.Page(login_page, title="Login", default=True)])
    pg.run()

else:
    pg = st.navigation({
        "Main": [
            st.Page("pages/1_Dashboard.py", title="Dashboard", default=True),
            st.Page("pages/2_Banks.py", title="Bank Accounts"),
        ],
        "Examinations": [
            st.Page("pages/3_Exams.py", title="Exams"),
            st.Page("pages/4_Kitabs.py", title="Kitabs"),
            st.Page("pages/5_Markaz.py", title="Markaz"),
        ],
        "Teachers": [
            st.Page("pages/6_Teachers.py", title="Teachers"),
            st.Page("pages/7_Mumtahin_Eligibility.py", title="Mumtahin Eligibility"),
        ],
        "Content": [
            st.Page("pages/8_Notices.py", title="Notices"),
            st.Page("pages/9_FAQs.py", title="FAQs"),
        ],
    })
    pg.run()
