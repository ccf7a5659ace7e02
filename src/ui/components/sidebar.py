"""Sidebar components for the main app.

Navigation, the logged-in user and the reload action.
"""

from __future__ import annotations

import streamlit as st

from src.core.settings import get_settings
from src.domain.models.operation import UserSession
from src.ui.state import SessionManager

# Page key -> sidebar label
PAGES = {
    "dashboard": "📋 Opérations",
    "operation": "📊 Détail de l'opération",
    "exports": "📤 Exports",
}


def render_navigation() -> str:
    """Render the page selector.

    Returns:
        Key of the page to display
    """
    pages = dict(PAGES)
    if not get_settings().enable_export:
        pages.pop("exports")
    if SessionManager.get_selected_operation() is None:
        pages.pop("operation")

    current = SessionManager.get_page()
    if current not in pages:
        current = "dashboard"
    keys = list(pages)
    choice = st.sidebar.radio("Navigation", keys, index=keys.index(current), format_func=pages.get)
    SessionManager.set_page(choice)
    return choice


def render_user_section(user: UserSession) -> dict[str, bool]:
    """Render the user box.

    Returns:
        Dict with the ``logout`` and ``reload`` button states
    """
    st.sidebar.markdown("---")
    st.sidebar.markdown(f"👤 **{user.username}**")
    reload_clicked = st.sidebar.button("🔄 Recharger les opérations", use_container_width=True)
    logout_clicked = st.sidebar.button("Se déconnecter", use_container_width=True)
    return {"logout": logout_clicked, "reload": reload_clicked}
