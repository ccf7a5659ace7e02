"""Main Application Entry Point.

Orchestrates UI components and services via app_controller.
"""

import os
import sys

import streamlit as st

# Add src to path if not present (for running from root)
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from src.core.logging import configure_logging, get_logger
from src.ui.app_controller import logout, refresh_operations, restore_session
from src.ui.components.sidebar import render_navigation, render_user_section
from src.ui.pages.dashboard import render_dashboard_page
from src.ui.pages.exports import render_exports_page
from src.ui.pages.login import render_login_page
from src.ui.pages.operation_detail import render_operation_page
from src.ui.state import SessionManager

PAGE_RENDERERS = {
    "dashboard": render_dashboard_page,
    "operation": render_operation_page,
    "exports": render_exports_page,
}


def main() -> None:
    """Main application entry point."""
    # Streamlit configuration (must be first Streamlit call)
    st.set_page_config(
        page_title="SMO Reporting",
        page_icon="🏢",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    configure_logging()
    log = get_logger(__name__)

    # 1. Initialize session
    SessionManager.initialize()
    user = restore_session()

    # 2. Login gate
    if user is None:
        render_login_page()
        return
    log.debug("app_rendered", username=user.username)

    # 3. Sidebar
    with st.sidebar:
        st.title("🏢 SMO Reporting")
    page = render_navigation()
    actions = render_user_section(user)
    if actions["logout"]:
        logout()
        st.rerun()
    if actions["reload"]:
        refresh_operations()

    # 4. Page
    PAGE_RENDERERS[page]()


if __name__ == "__main__":
    main()
