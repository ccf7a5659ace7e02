"""Filter components for the operation explorer."""

from __future__ import annotations

import streamlit as st

from src.application.services.operations import FilterOptions, OperationFilters

ALL = "Toutes"


def _select(label: str, options: list[str], current: str | None, key: str) -> str | None:
    choices = [ALL, *options]
    index = choices.index(current) if current in choices else 0
    value = st.selectbox(label, choices, index=index, key=key)
    return None if value == ALL else value


def render_search_box() -> str:
    """Free-text search on label, address, commune and budget owner."""
    return st.text_input(
        "Rechercher",
        key="search_term",
        placeholder="Libellé, adresse, commune, responsable…",
    )


def render_operation_filters(options: FilterOptions, current: OperationFilters) -> OperationFilters:
    """Render the explorer filter controls.

    Args:
        options: Distinct values of the loaded operations
        current: Active filters

    Returns:
        Filters chosen by the user
    """
    cols = st.columns(3)
    with cols[0]:
        commune = _select("Commune", options.communes, current.commune, "filter_commune")
    with cols[1]:
        nature = _select(
            "Nature de construction",
            options.construction_natures,
            current.construction_nature,
            "filter_nature",
        )
    with cols[2]:
        owner = _select("Responsable budget", options.budget_owners, current.budget_owner, "filter_owner")
    return OperationFilters(commune=commune, construction_nature=nature, budget_owner=owner)
