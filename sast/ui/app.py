"""
SAST Analytics - Streamlit front-end.

Run with:
    streamlit run sast/ui/app.py
"""
import logging

import streamlit as st

from sast.config import get_settings
from sast.context import AppContext
from sast.logging_config import setup_logging
from sast.sections import SectionId
from sast.theme import generate_css
from sast.ui.login import render_auth_page
from sast.ui.pages import SECTION_TITLES, render_page

logger = logging.getLogger("sast.ui.app")


def get_context() -> AppContext:
    """One AppContext per browser session, initialised on first run."""
    if "ctx" not in st.session_state:
        settings = get_settings()
        setup_logging(settings.log_level)
        ctx = AppContext.create(settings)
        ctx.init()
        st.session_state.ctx = ctx
        logger.info(f"Session started ({ctx.auth.state.value})")
    return st.session_state.ctx


def render_sidebar(ctx: AppContext) -> SectionId:
    with st.sidebar:
        st.markdown("### SAST Analytics")
        user = ctx.auth.user
        if user is not None:
            st.caption(f"Signed in as **{user.username or user.email}**")

        sections = list(SECTION_TITLES)
        current = SectionId.parse(st.session_state.get("page", SectionId.OVERVIEW.value))
        choice = st.radio(
            "Navigate",
            sections,
            index=sections.index(current),
            format_func=lambda s: SECTION_TITLES[s],
            label_visibility="collapsed",
        )
        st.session_state.page = choice.value

        st.divider()
        label = "Light mode" if ctx.theme.is_dark else "Dark mode"
        if st.button(label, use_container_width=True):
            ctx.toggle_theme()
            st.rerun()

        if st.button("Reload data", use_container_width=True):
            ctx.reload()
            st.rerun()

        if st.button("Log out", use_container_width=True):
            ctx.auth.logout()
            st.session_state.auth_mode = "login"
            st.rerun()
    return choice


def main():
    st.set_page_config(page_title="SAST Analytics", layout="wide")
    ctx = get_context()
    st.markdown(generate_css(ctx.tokens), unsafe_allow_html=True)

    if not ctx.dashboard_visible:
        render_auth_page(ctx)
        return

    section = render_sidebar(ctx)
    render_page(ctx, section)


if __name__ == "__main__":
    main()
