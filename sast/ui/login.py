import streamlit as st

from sast.context import AppContext


def render_auth_page(ctx: AppContext):
    """Login and signup forms shown while the session is unauthenticated."""
    st.markdown("<h1 style='text-align: center;'>SAST Analytics</h1>", unsafe_allow_html=True)
    st.markdown("<p style='text-align: center; color: var(--muted);'>Sign in to view the dashboard</p>",
                unsafe_allow_html=True)

    mode = st.session_state.setdefault("auth_mode", "login")

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        if mode == "login":
            _render_login(ctx)
        else:
            _render_signup(ctx)


def _render_login(ctx: AppContext):
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", use_container_width=True)

        if submitted:
            result = ctx.auth.login(email, password)
            if result.ok:
                st.session_state.page = "overview"
                st.rerun()
            else:
                st.error(result.error)

    if st.button("Create an account", use_container_width=True):
        st.session_state.auth_mode = "signup"
        st.rerun()


def _render_signup(ctx: AppContext):
    with st.form("signup_form"):
        username = st.text_input("Username")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign up", use_container_width=True)

        if submitted:
            result = ctx.auth.signup(username, email, password)
            if result.ok:
                st.success(result.message)
                st.session_state.auth_mode = "login"
            else:
                st.error(result.error)

    if st.button("Back to login", use_container_width=True):
        st.session_state.auth_mode = "login"
        st.rerun()
