"""Export page."""

from __future__ import annotations

import streamlit as st

from src.core.glossary import EXPORT_SECTIONS
from src.services.exporter import ExportOptions
from src.ui.app_controller import build_export, load_detail
from src.ui.state import SessionManager

FORMATS = {"json": "JSON", "excel": "Excel (.xlsx)"}


def render_exports_page() -> None:
    """Choose an operation, sections and format, then download."""
    st.markdown("## 📤 Exports")
    operations = SessionManager.get_operations()
    if not operations:
        st.info("Chargez d'abord la liste des opérations.")
        return

    selected = SessionManager.get_selected_operation()
    codes = [op.project_code for op in operations]
    labels = {op.project_code: op.label for op in operations}
    project_code = st.selectbox(
        "Opération",
        codes,
        index=codes.index(selected.project_code) if selected else 0,
        format_func=labels.get,
    )
    fmt = st.radio("Format", list(FORMATS), format_func=FORMATS.get, horizontal=True)
    sections = st.multiselect(
        "Sections",
        list(EXPORT_SECTIONS),
        default=list(EXPORT_SECTIONS),
        format_func=EXPORT_SECTIONS.get,
    )

    if not st.button("Générer l'export", type="primary", disabled=not sections):
        return

    detail = SessionManager.get_detail()
    if detail is None or detail.operation.project_code != project_code:
        detail = load_detail(project_code, SessionManager.get_selected_simulation_code(project_code))
    if detail is None or detail.operation.project_code != project_code:
        st.warning("Le détail de cette opération n'a pas pu être chargé.")
        return

    payload = build_export(ExportOptions(format=fmt, operation_id=project_code, sections=sections), detail)
    if payload is not None:
        st.download_button(
            "⬇️ Télécharger",
            data=payload.content,
            file_name=payload.filename,
            mime=payload.media_type,
        )
