"""Operation detail page.

Simulation selector, characteristics and the three report tabs.
"""

from __future__ import annotations

import streamlit as st

from src.application.services.operations import select_simulation
from src.domain.models.operation import OperationRecord, Simulation
from src.ui.app_controller import load_detail
from src.ui.components.results import (
    render_budget_section,
    render_composition_section,
    render_financing_section,
)
from src.ui.helpers import format_date, get_operation_badge, status_badge
from src.ui.state import SessionManager


def _simulation_label(simulation: Simulation) -> str:
    return f"{simulation.label or simulation.code} ({format_date(simulation.modified_at)})"


def render_simulation_selector(operation: OperationRecord) -> Simulation | None:
    """Simulation dropdown, defaulting to the most recently modified."""
    if not operation.simulations:
        st.warning("Cette opération n'a aucune simulation.")
        return None

    current = select_simulation(operation, SessionManager.get_selected_simulation_code(operation.project_code))
    codes = [s.code for s in operation.simulations]
    code = st.selectbox(
        "Simulation",
        codes,
        index=codes.index(current.code),
        format_func=lambda c: _simulation_label(operation.get_simulation(c)),
        key=f"simulation_{operation.project_code}",
    )
    SessionManager.set_selected_simulation_code(operation.project_code, code)
    return operation.get_simulation(code)


def render_characteristics(operation: OperationRecord, simulation: Simulation | None) -> None:
    icon, op_type = get_operation_badge(operation.label)
    cols = st.columns(3)
    with cols[0]:
        st.markdown(f"**Adresse**  \n{operation.address}  \n{operation.postal_code} {operation.commune}")
        if operation.department:
            st.caption(f"Département {operation.department}")
    with cols[1]:
        st.markdown(
            f"**Type**  \n{icon} {op_type}  \n"
            f"**Nature**  \n{operation.construction_nature or '—'}"
        )
    with cols[2]:
        st.markdown(f"**Responsable budget**  \n{operation.budget_owner or '—'}")
        if simulation is not None:
            st.markdown(f"**Statut**  \n{status_badge(simulation.status)}")
            if simulation.comment:
                st.caption(simulation.comment)


def render_operation_page() -> None:
    """Render the selected operation."""
    operation = SessionManager.get_selected_operation()
    if operation is None:
        st.info("Sélectionnez une opération dans la liste.")
        return

    st.markdown(f"## {operation.label}")
    simulation = render_simulation_selector(operation)
    render_characteristics(operation, simulation)
    if simulation is None:
        return

    detail = SessionManager.get_detail()
    if (
        detail is None
        or detail.operation.project_code != operation.project_code
        or detail.simulation_code != simulation.code
    ):
        detail = load_detail(operation.project_code, simulation.code)
    if detail is None:
        return
    if detail.simulation_code != simulation.code:
        st.caption("Affichage de la dernière simulation chargée.")
    if detail.is_empty:
        st.info("Aucune donnée de reporting pour cette simulation.")
        return

    tab_typo, tab_budget, tab_financing = st.tabs(
        ["🏠 Typologies", "💶 Prix de revient", "🏦 Plan de financement"]
    )
    with tab_typo:
        render_composition_section(detail)
    with tab_budget:
        render_budget_section(detail)
    with tab_financing:
        render_financing_section(detail)
