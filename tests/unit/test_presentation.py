"""Unit tests for the presentation adapter."""

import pytest

from src.application.services.presentation import (
    ChartSlice,
    build_budget_view,
    build_composition_view,
    build_financing_view,
    budget_components_slices,
    ratio_cards,
    ratio_detail_rows,
    slices_from_values,
    to_chart_slices,
    to_dataframe,
    to_table_rows,
    typology_detail_rows,
)
from src.core.glossary import CHART_PALETTE, TOTAL_LABEL
from src.domain.calculator.aggregation import compute_typology_totals, group_rows
from src.domain.calculator.normalizer import (
    normalize_cost_row,
    normalize_financing,
    normalize_rows,
    normalize_typology_row,
)
from src.domain.calculator.ratios import RatioKind, compute_unit_ratios
from src.domain.models.rows import COST_COMPONENTS


@pytest.fixture
def typology(raw_typology_records):
    return normalize_rows(raw_typology_records, normalize_typology_row)


@pytest.fixture
def totals(typology):
    return compute_typology_totals(typology)


class TestTableRows:
    def test_scenario_a_a_b(self):
        grouped = group_rows(
            [{"k": "A", "v": 100}, {"k": "A", "v": 50}, {"k": "B", "v": 0}], "k", ["v"]
        )
        rows = to_table_rows(grouped, key_label="k")
        assert rows == [
            {"k": "A", "v": 150.0},
            {"k": "B", "v": 0.0},
            {"k": TOTAL_LABEL, "v": 150.0},
        ]

    def test_empty_gives_total_only(self):
        rows = to_table_rows(group_rows([], "k", ["v"]), key_label="k")
        assert rows == [{"k": TOTAL_LABEL, "v": 0.0}]


class TestChartSlices:
    def test_zero_and_negative_excluded(self):
        grouped = group_rows(
            [{"k": "A", "v": 100}, {"k": "A", "v": 50}, {"k": "B", "v": 0}, {"k": "C", "v": -5}], "k", ["v"]
        )
        slices = to_chart_slices(grouped, "v")
        assert slices == [ChartSlice(name="A", value=150.0, color=CHART_PALETTE[0])]

    def test_palette_cycles_over_emitted_slices(self):
        values = [(f"k{i}", i) for i in range(len(CHART_PALETTE) + 2)]
        slices = slices_from_values(values)
        # k0 is dropped, so k1 takes the first colour
        assert slices[0].name == "k1"
        assert [s.color for s in slices] == [
            CHART_PALETTE[i % len(CHART_PALETTE)] for i in range(len(slices))
        ]

    def test_all_zero(self):
        assert slices_from_values([("a", 0), ("b", 0.0)]) == []


def test_to_dataframe_renames_columns():
    df = to_dataframe([{"k": "A", "v": 1.0}], {"k": "Clé", "v": "Valeur"})
    assert list(df.columns) == ["Clé", "Valeur"]
    assert df.iloc[0]["Valeur"] == 1.0


def test_ratio_cards():
    cards = ratio_cards(compute_unit_ratios(1000, 10, 100))
    assert [c.kind for c in cards] == [RatioKind.TOTAL, RatioKind.PER_UNIT, RatioKind.PER_M2, RatioKind.SURFACE]
    assert [c.value for c in cards] == [1000, 100, 10, 10]
    assert cards[1].unit == "€/logement"


class TestBudgetView:
    def test_view(self, raw_cost_records, totals):
        view = build_budget_view(normalize_rows(raw_cost_records, normalize_cost_row), totals)
        assert [r["chapter"] for r in view.table] == ["PLUS", "PLAI", TOTAL_LABEL]
        assert view.table[-1]["total"] == 2_040_000
        assert view.ratios.cost_per_unit == pytest.approx(170_000)
        assert view.ratios.cost_per_m2 == pytest.approx(2_040_000 / 660)
        assert [s.name for s in view.slices] == ["PLUS", "PLAI"]

    def test_component_slices(self, raw_cost_records, totals):
        view = build_budget_view(normalize_rows(raw_cost_records, normalize_cost_row), totals)
        slices = budget_components_slices(view.grouped)
        assert [s.name for s in slices] == ["Charge foncière", "Coût travaux", "Honoraires", "Actualisation", "Frais financiers"]

    def test_ratio_detail_uses_operation_totals(self, raw_cost_records, totals):
        view = build_budget_view(normalize_rows(raw_cost_records, normalize_cost_row), totals)
        rows = ratio_detail_rows(view.grouped, COST_COMPONENTS, RatioKind.PER_UNIT, totals)
        assert rows[0]["programme"] == "PLUS"
        assert rows[0]["value"] == pytest.approx(1_700_000 / 12)
        assert rows[0]["land_charge"] == pytest.approx(300_000 / 12)

    def test_no_dwellings(self, raw_cost_records):
        """N = 0 with a non-zero cost total: ratios are 0, nothing raises."""
        totals = compute_typology_totals([])
        view = build_budget_view(normalize_rows(raw_cost_records, normalize_cost_row), totals)
        assert view.ratios.cost_per_unit == 0.0
        assert view.ratios.surface_per_unit == 0.0
        rows = ratio_detail_rows(view.grouped, COST_COMPONENTS, RatioKind.SURFACE, totals)
        assert all(r["value"] == 0.0 for r in rows)


    def test_non_numeric_totals_do_not_break_the_view(self, totals):
        rows = [
            normalize_cost_row({"Code_Programme": "A", "TotalFisc": "NaN"}),
            normalize_cost_row({"Code_Programme": "B", "TotalFisc": 500, "ChargeFonciereFisc": float("inf")}),
        ]
        view = build_budget_view(rows, totals)
        assert [s.name for s in view.slices] == ["B"]
        assert view.table[-1]["total"] == 500
        assert view.table[0]["total"] == 0.0

    def test_rows_grouped_by_program_not_chapter_label(self, totals):
        raw = [
            {"Code_Programme": "PLUS", "Chapitre": "Travaux", "TotalFisc": 100},
            {"Code_Programme": "PLUS", "Chapitre": "Foncier", "TotalFisc": 50},
            {"Code_Programme": "PLAI", "Chapitre": "Travaux", "TotalFisc": 30},
        ]
        view = build_budget_view(normalize_rows(raw, normalize_cost_row), totals)
        assert [r["chapter"] for r in view.table] == ["PLUS", "PLAI", TOTAL_LABEL]
        assert view.table[0]["total"] == 150
        detail = ratio_detail_rows(view.grouped, COST_COMPONENTS, RatioKind.PER_UNIT, totals)
        assert [r["programme"] for r in detail] == ["PLUS", "PLAI"]


class TestFinancingView:
    def test_view(self, raw_financing_records, totals):
        view = build_financing_view(normalize_financing(raw_financing_records), totals)
        assert [r["programme"] for r in view.table] == ["PLUS", "PLAI", TOTAL_LABEL]
        assert view.table[-1]["total"] == 2_040_000
        assert [s.name for s in view.slices] == ["Fonds propres", "Subventions", "Prêts"]
        assert view.slices[2].value == 1_540_000


class TestCompositionView:
    def test_view(self, typology):
        view = build_composition_view(typology)
        assert [r["nature"] for r in view.table] == ["PLUS", "PLAI", TOTAL_LABEL]
        plus = view.table[0]
        assert plus["unit_count"] == 10
        assert plus["avg_rent_module"] == pytest.approx((6.5 * 190 + 6.0 * 410) / 600)
        assert "rent_module_su" not in plus
        assert [s.value for s in view.slices] == [10, 2]

    def test_detail_rows(self, typology):
        rows = typology_detail_rows(typology[:2])
        assert rows[-1]["program_code"] == TOTAL_LABEL
        assert rows[-1]["unit_count"] == 10
        assert rows[-1]["annex_surface"] == pytest.approx(30.0)
