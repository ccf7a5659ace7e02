"""Operation explorer page.

Search, filter and paginate the loaded operations.
"""

from __future__ import annotations

import streamlit as st

from src.application.services.operations import (
    filter_operations,
    filter_options,
    paginate,
    search_operations,
)
from src.core.settings import get_settings
from src.ui.app_controller import ensure_operations
from src.ui.components.filters import render_operation_filters, render_search_box
from src.ui.components.results import render_operation_card
from src.ui.state import SessionManager


def render_pagination(page: int, total_pages: int) -> None:
    prev_col, info_col, next_col = st.columns([1, 2, 1])
    with prev_col:
        if st.button("◀ Précédent", disabled=page <= 1, use_container_width=True):
            SessionManager.set_explorer_page(page - 1)
            st.rerun()
    with info_col:
        st.markdown(f"<p style='text-align:center'>Page {page} / {total_pages}</p>", unsafe_allow_html=True)
    with next_col:
        if st.button("Suivant ▶", disabled=page >= total_pages, use_container_width=True):
            SessionManager.set_explorer_page(page + 1)
            st.rerun()


def render_dashboard_page() -> None:
    """Render the explorer."""
    st.markdown("## 📋 Opérations")
    ensure_operations()
    operations = SessionManager.get_operations()
    if not operations:
        st.info("Aucune opération disponible.")
        return

    term = render_search_box()
    filters = render_operation_filters(filter_options(operations), SessionManager.get_filters())
    SessionManager.set_filters(filters)

    matching = filter_operations(search_operations(operations, term), filters)
    page = paginate(matching, SessionManager.get_explorer_page(), get_settings().page_size)
    SessionManager.set_explorer_page(page.page)

    st.caption(f"{page.total_items} opération(s) sur {len(operations)}")
    for operation in page.items:
        if render_operation_card(operation):
            SessionManager.select_operation(operation.project_code)
            st.rerun()

    if page.total_pages > 1:
        render_pagination(page.page, page.total_pages)
