"""Integration tests for the reporting pipeline.

Tests the complete flow from API rows → normalized rows → grouped totals →
ratios → table rows and chart slices, with HTTP faked.
"""

import pytest

from src.application.services.detail_loader import OperationDetailLoader
from src.application.services.operations import load_operations, select_simulation
from src.application.services.reporting_client import ReportingClient
from src.core.glossary import TOTAL_LABEL
from src.services.exporter import ExportOptions, OperationExporter


class TestReportingPipeline:
    """Integration tests for the reporting pipeline."""

    @pytest.fixture
    def client(self, settings, fake_session):
        return ReportingClient(settings, session=fake_session)

    @pytest.fixture
    def detail(self, client, settings):
        operations = load_operations(client)
        operation = operations[0]
        return OperationDetailLoader(client, settings).load(operation, "S1")

    def test_operations_to_detail(self, detail):
        assert detail is not None
        assert detail.simulation_code == "S1"
        assert len(detail.typology) == 3
        assert len(detail.costs) == 2
        assert len(detail.financing) == 6
        assert set(detail.programs) == {"PLUS", "PLAI"}

    def test_composition(self, detail):
        view = detail.composition
        assert view.totals.unit_count == 12
        assert [row["nature"] for row in view.table] == ["PLUS", "PLAI", TOTAL_LABEL]

    def test_budget_and_financing_balance(self, detail):
        """Fixture data is balanced: cost-to-build equals the financing total."""
        assert detail.budget.ratios.total == detail.financing_plan.ratios.total == 2_040_000
        assert detail.budget.ratios.cost_per_unit == pytest.approx(170_000)

    def test_financing_chart_excludes_empty_buckets(self, detail):
        names = [s.name for s in detail.financing_plan.slices]
        assert names == ["Fonds propres", "Subventions", "Prêts"]

    def test_other_simulation_is_empty(self, client, settings):
        operation = load_operations(client)[0]
        detail = OperationDetailLoader(client, settings).load(operation, select_simulation(operation))
        # The fake API only holds rows for S1; S2 is the most recent
        assert detail.simulation_code == "S2"
        assert detail.is_empty
        assert len(detail.budget.table) == 1
        assert detail.budget.table[0]["chapter"] == TOTAL_LABEL
        assert detail.budget.table[0]["total"] == 0.0
        assert detail.financing_plan.slices == []

    def test_export_roundtrip(self, detail, settings):
        payload = OperationExporter(settings).export(ExportOptions(format="excel"), detail, "ADM")
        assert payload.content[:2] == b"PK"
