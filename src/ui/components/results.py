"""Report display components: ratio cards, tables and sections."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd
import streamlit as st

from src.application.services.detail_loader import OperationDetail
from src.application.services.presentation import (
    RatioCard,
    budget_components_slices,
    ratio_detail_rows,
    to_dataframe,
    typology_detail_rows,
)
from src.core.glossary import (
    COST_COMPONENT_LABELS,
    FINANCING_BUCKET_LABELS,
    RATIO_DEFINITIONS,
    TOTAL_LABEL,
    TYPOLOGY_LABELS,
)
from src.domain.calculator.aggregation import FINANCING_FIELDS, filter_typology_by_nature
from src.domain.calculator.ratios import RatioKind
from src.domain.models.operation import OperationRecord
from src.domain.models.rows import COST_COMPONENTS
from src.ui.components.charts import render_pie_chart
from src.ui.helpers import format_date, format_ratio, get_operation_badge, status_badge
from src.ui.state import SessionManager

COST_COLUMNS = {"chapter": "Chapitre", **COST_COMPONENT_LABELS, "total": "Total"}
FINANCING_COLUMNS = {"programme": "Programme", **FINANCING_BUCKET_LABELS, "total": "Total"}
COMPOSITION_COLUMNS = {"nature": "Nature de financement", **TYPOLOGY_LABELS}


def _highlight_total(df: pd.DataFrame) -> Any:
    """Bold the TOTAL row."""
    def style_row(row: pd.Series) -> list[str]:
        is_total = row.iloc[0] == TOTAL_LABEL
        return ["font-weight: bold" if is_total else ""] * len(row)
    return df.style.apply(style_row, axis=1)


def render_table(
    rows: Sequence[Mapping[str, Any]],
    labels: Mapping[str, str],
    number_format: str = "{:,.0f}",
) -> None:
    """Render table rows with display labels, total row in bold."""
    if not rows:
        st.info("Aucune ligne disponible pour cette simulation.")
        return
    df = to_dataframe(rows, labels)
    df = df[[label for label in labels.values() if label in df.columns]]
    numeric = df.select_dtypes("number").columns
    styled = _highlight_total(df).format({c: number_format for c in numeric}, thousands=" ", decimal=",")
    st.dataframe(styled, use_container_width=True, hide_index=True)


def render_ratio_cards(cards: Sequence[RatioCard], section: str) -> RatioKind:
    """Render the four ratio cards as selectable buttons.

    Returns:
        Currently selected ratio
    """
    selected = SessionManager.get_ratio(section)
    cols = st.columns(len(cards))
    for col, card in zip(cols, cards):
        with col:
            st.metric(card.title, format_ratio(card.value, card.unit))
            is_selected = card.kind is selected
            if st.button(
                "Détail" if not is_selected else "✓ Détail",
                key=f"{section}_card_{card.kind.value}",
                type="primary" if is_selected else "secondary",
                use_container_width=True,
            ):
                SessionManager.set_ratio(section, card.kind)
                selected = card.kind
    return selected


def render_ratio_detail(rows: list[dict[str, Any]], components: Mapping[str, str], kind: RatioKind) -> None:
    definition = RATIO_DEFINITIONS[kind.value]
    st.markdown(f"**{definition['detail_title']}**")
    labels = {"programme": "Programme", **components, "value": f"Valeur ({definition['unit']})"}
    render_table(rows, labels, number_format="{:,.2f}")


def render_operation_card(operation: OperationRecord) -> bool:
    """Render one operation of the explorer.

    Returns:
        True if the user opened it
    """
    icon, op_type = get_operation_badge(operation.label)
    with st.container(border=True):
        top = st.columns([4, 2, 1])
        with top[0]:
            st.markdown(f"**{icon} {operation.label}**")
            st.caption(f"{operation.address} {operation.postal_code} {operation.commune}".strip())
        with top[1]:
            st.caption(op_type)
            latest = operation.default_simulation
            if latest is not None:
                st.markdown(f"{latest.label or latest.code} · {status_badge(latest.status)}")
            st.caption(f"Modifiée le {format_date(operation.latest_modification)}")
        with top[2]:
            return st.button("Ouvrir", key=f"open_{operation.project_code}", use_container_width=True)


def render_budget_section(detail: OperationDetail) -> None:
    """Cost-to-build section: ratio cards, chart and table per chapter."""
    view = detail.budget
    if not view.grouped:
        st.info("Pas de prix de revient pour cette simulation.")
        return

    kind = render_ratio_cards(view.cards, "budget")
    left, right = st.columns([3, 2])
    with left:
        if kind is RatioKind.TOTAL:
            render_table(view.table, COST_COLUMNS)
        else:
            rows = ratio_detail_rows(view.grouped, COST_COMPONENTS, kind, detail.typology_totals)
            render_ratio_detail(rows, COST_COMPONENT_LABELS, kind)
    with right:
        render_pie_chart(budget_components_slices(view.grouped), "Répartition du prix de revient", key="budget_pie")


def render_financing_section(detail: OperationDetail) -> None:
    """Financing plan section: buckets per program."""
    view = detail.financing_plan
    if not view.grouped:
        st.info("Pas de plan de financement pour cette simulation.")
        return

    kind = render_ratio_cards(view.cards, "financing")
    left, right = st.columns([3, 2])
    with left:
        if kind is RatioKind.TOTAL:
            render_table(view.table, FINANCING_COLUMNS)
        else:
            buckets = [f for f in FINANCING_FIELDS if f != "total"]
            rows = ratio_detail_rows(view.grouped, buckets, kind, detail.typology_totals)
            render_ratio_detail(rows, FINANCING_BUCKET_LABELS, kind)
    with right:
        render_pie_chart(view.slices, "Répartition du financement", key="financing_pie")


def render_composition_section(detail: OperationDetail) -> None:
    """Dwelling composition per financing nature with drill-down."""
    view = detail.composition
    if not view.grouped:
        st.info("Pas de typologie de logements pour cette simulation.")
        return

    totals = view.totals.total
    cols = st.columns(4)
    cols[0].metric("Logements", format_ratio(totals["unit_count"], "logements"))
    cols[1].metric("SHAB", format_ratio(totals["shab"], "m²"))
    cols[2].metric("SU", format_ratio(totals["su"], "m²"))
    cols[3].metric("Surface moyenne", format_ratio(totals["avg_surface"], "m²"))

    left, right = st.columns([3, 2])
    with left:
        render_table(view.table, COMPOSITION_COLUMNS, number_format="{:,.2f}")
    with right:
        render_pie_chart(view.slices, "Logements par nature de financement", key="composition_pie")

    natures = view.grouped.keys()
    current = SessionManager.get_selected_nature()
    choice = st.selectbox(
        "Détail d'une nature de financement",
        options=[None, *natures],
        index=([None, *natures].index(current) if current in natures else 0),
        format_func=lambda n: "—" if n is None else n,
        key="nature_select",
    )
    SessionManager.set_selected_nature(choice)
    if choice:
        rows = typology_detail_rows(filter_typology_by_nature(detail.typology, choice, detail.programs))
        labels = {"program_code": "Programme", "unit_type": "Type", **TYPOLOGY_LABELS}
        render_table(rows, labels, number_format="{:,.2f}")
