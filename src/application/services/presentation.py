"""Presentation adapter.

Reshapes grouped totals into table rows and chart slices for rendering.
Pure functions only: UI selections (tab, ratio, nature) are passed in,
never stored here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import pandas as pd

from src.core.glossary import (
    CHART_PALETTE,
    COST_COMPONENT_LABELS,
    FINANCING_BUCKET_LABELS,
    RATIO_DEFINITIONS,
    TOTAL_LABEL,
)
from src.domain.calculator.aggregation import (
    GroupedTotals,
    TypologyTotals,
    compute_typology_totals,
    fold_financing_buckets,
    group_costs_by_program,
    group_typology_by_nature,
)
from src.domain.calculator.ratios import (
    RatioKind,
    UnitRatios,
    compute_unit_ratios,
    ratio_breakdown,
    safe_divide,
)
from src.domain.models.rows import COST_COMPONENTS, CostRow, FinancingRow, ProgramInfo, TypologyRow


@dataclass(frozen=True)
class ChartSlice:
    """One pie slice."""

    name: str
    value: float
    color: str


@dataclass(frozen=True)
class RatioCard:
    """One headline ratio card."""

    kind: RatioKind
    title: str
    value: float
    unit: str


def to_table_rows(
    grouped: GroupedTotals,
    key_label: str = "key",
    total_label: str = TOTAL_LABEL,
) -> list[dict[str, Any]]:
    """One row per group in first-seen order, grand total row last."""
    rows = [
        {key_label: key, **{name: float(amount) for name, amount in acc.items()}}
        for key, acc in grouped.items()
    ]
    rows.append({key_label: total_label, **{name: float(amount) for name, amount in grouped.grand_total.items()}})
    return rows


def slices_from_values(values: Iterable[tuple[str, float | Decimal]]) -> list[ChartSlice]:
    """Drop non-positive values; colour by position among the kept slices."""
    kept = [(name, float(value)) for name, value in values if value > 0]
    return [
        ChartSlice(name=name, value=value, color=CHART_PALETTE[i % len(CHART_PALETTE)])
        for i, (name, value) in enumerate(kept)
    ]


def to_chart_slices(grouped: GroupedTotals, field_name: str) -> list[ChartSlice]:
    """Chart slices of one accumulated field, one per group."""
    return slices_from_values((key, acc[field_name]) for key, acc in grouped.items())


def to_dataframe(
    rows: Sequence[Mapping[str, Any]],
    labels: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Table rows as a DataFrame, columns renamed to display labels."""
    df = pd.DataFrame(list(rows))
    if labels:
        df = df.rename(columns=dict(labels))
    return df


def ratio_cards(ratios: UnitRatios) -> list[RatioCard]:
    """The four cards: total, per dwelling, per m² SHAB, average surface."""
    values = {
        RatioKind.TOTAL: ratios.total,
        RatioKind.PER_UNIT: ratios.cost_per_unit,
        RatioKind.PER_M2: ratios.cost_per_m2,
        RatioKind.SURFACE: ratios.surface_per_unit,
    }
    return [
        RatioCard(
            kind=kind,
            title=RATIO_DEFINITIONS[kind.value]["title"],
            value=value,
            unit=RATIO_DEFINITIONS[kind.value]["unit"],
        )
        for kind, value in values.items()
    ]


def ratio_detail_rows(
    grouped: GroupedTotals,
    components: Sequence[str],
    kind: RatioKind,
    totals: TypologyTotals,
) -> list[dict[str, Any]]:
    """Detail table for a selected ratio card, one row per group.

    Every group is divided by the operation-wide dwelling count and SHAB.
    """
    rows = []
    for key, acc in grouped.items():
        details, value = ratio_breakdown(
            {name: acc[name] for name in components},
            acc["total"],
            kind,
            totals.unit_count,
            totals.shab,
        )
        rows.append({
            "programme": key,
            **details,
            "value": value,
            "unit": RATIO_DEFINITIONS[kind.value]["unit"],
        })
    return rows


@dataclass
class BudgetView:
    """Cost-to-build tab content."""

    grouped: GroupedTotals
    table: list[dict[str, Any]]
    slices: list[ChartSlice]
    ratios: UnitRatios
    cards: list[RatioCard] = field(default_factory=list)


def build_budget_view(cost_rows: Sequence[CostRow], totals: TypologyTotals) -> BudgetView:
    """Cost table per chapter, chart of chapter totals and headline ratios."""
    grouped = group_costs_by_program(cost_rows)
    ratios = compute_unit_ratios(grouped.grand_total["total"], totals.unit_count, totals.shab)
    return BudgetView(
        grouped=grouped,
        table=to_table_rows(grouped, key_label="chapter"),
        slices=to_chart_slices(grouped, "total"),
        ratios=ratios,
        cards=ratio_cards(ratios),
    )


def budget_components_slices(grouped: GroupedTotals) -> list[ChartSlice]:
    """Chart of the five fiscal components of the grand total."""
    return slices_from_values(
        (COST_COMPONENT_LABELS[name], grouped.grand_total[name]) for name in COST_COMPONENTS
    )


@dataclass
class FinancingView:
    """Financing plan tab content."""

    grouped: GroupedTotals
    table: list[dict[str, Any]]
    slices: list[ChartSlice]
    ratios: UnitRatios
    cards: list[RatioCard] = field(default_factory=list)


def build_financing_view(financing_rows: Sequence[FinancingRow], totals: TypologyTotals) -> FinancingView:
    """Financing buckets per program, chart of bucket totals and ratios."""
    grouped = fold_financing_buckets(financing_rows)
    ratios = compute_unit_ratios(grouped.grand_total["total"], totals.unit_count, totals.shab)
    return FinancingView(
        grouped=grouped,
        table=to_table_rows(grouped, key_label="programme"),
        slices=slices_from_values(
            (label, grouped.grand_total[bucket]) for bucket, label in FINANCING_BUCKET_LABELS.items()
        ),
        ratios=ratios,
        cards=ratio_cards(ratios),
    )


@dataclass
class CompositionView:
    """Dwelling composition tab content."""

    totals: TypologyTotals
    grouped: GroupedTotals
    table: list[dict[str, Any]]
    slices: list[ChartSlice]


def _with_average_rent(row: dict[str, Any]) -> dict[str, Any]:
    row = dict(row)
    row["avg_rent_module"] = safe_divide(row.pop("rent_module_su"), row["su"])
    return row


def build_composition_view(
    typology_rows: Sequence[TypologyRow],
    program_map: Mapping[str, ProgramInfo] | None = None,
) -> CompositionView:
    """Dwellings per financing nature with surfaces and average rent."""
    grouped = group_typology_by_nature(typology_rows, program_map)
    return CompositionView(
        totals=compute_typology_totals(typology_rows),
        grouped=grouped,
        table=[_with_average_rent(r) for r in to_table_rows(grouped, key_label="nature")],
        slices=to_chart_slices(grouped, "unit_count"),
    )


def typology_detail_rows(rows: Sequence[TypologyRow]) -> list[dict[str, Any]]:
    """Line-level rows of a financing nature drill-down, total last."""
    table = [
        {
            "program_code": r.program_code,
            "unit_type": r.unit_type,
            "unit_count": r.unit_count,
            "shab": r.shab,
            "su": r.su,
            "annex_surface": r.annex_surface,
            "avg_rent_module": r.rent_module,
            "rent_yield": r.rent_yield,
        }
        for r in rows
    ]
    unit_count = sum(r.unit_count for r in rows)
    shab = sum(r.shab for r in rows)
    su = sum(r.su for r in rows)
    table.append({
        "program_code": TOTAL_LABEL,
        "unit_type": "",
        "unit_count": unit_count,
        "shab": shab,
        "su": su,
        "annex_surface": su - shab,
        "avg_rent_module": safe_divide(sum(r.rent_module * r.su for r in rows), su),
        "rent_yield": sum(r.rent_yield for r in rows),
    })
    return table
