"""Unit tests for the operation exporter."""

import io
import json
from datetime import date, datetime

import pandas as pd
import pytest
from pydantic import ValidationError

from src.application.services.detail_loader import OperationDetail
from src.application.services.operations import build_operations
from src.core.exceptions import ExportError
from src.domain.calculator.normalizer import (
    normalize_cost_row,
    normalize_financing,
    normalize_rows,
    normalize_typology_row,
)
from src.services.exporter import (
    EXCEL_MEDIA_TYPE,
    JSON_MEDIA_TYPE,
    ExportOptions,
    OperationExporter,
    build_export_filename,
)


@pytest.fixture
def detail(raw_operation_records, raw_typology_records, raw_cost_records, raw_financing_records):
    operation = build_operations(raw_operation_records)[0]
    return OperationDetail(
        operation=operation,
        simulation=operation.get_simulation("S1"),
        typology=tuple(normalize_rows(raw_typology_records, normalize_typology_row)),
        costs=tuple(normalize_rows(raw_cost_records, normalize_cost_row)),
        financing=tuple(normalize_financing(raw_financing_records)),
    )


class TestFilename:
    def test_spaces_replaced(self):
        assert build_export_filename("Les Jardins du Parc", "json", date(2024, 5, 2)) == "Les_Jardins_du_Parc_2024-05-02.json"

    def test_excel_extension(self):
        assert build_export_filename("Op", "excel", date(2024, 5, 2)) == "Op_2024-05-02.xlsx"


class TestOptions:
    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            ExportOptions(sections=["operation", "bogus"])

    def test_sections_in_canonical_order(self):
        options = ExportOptions(sections=["financement", "operation"])
        assert options.selected_sections() == ["operation", "financement"]

    def test_all_sections_by_default(self):
        assert ExportOptions().selected_sections() == ["operation", "typologielogement", "prixrevient", "financement"]


class TestJsonExport:
    def test_document(self, settings, detail):
        exporter = OperationExporter(settings)
        payload = exporter.export(
            ExportOptions(format="json", operation_id="P001"),
            detail,
            username="jdupont",
            exported_at=datetime(2024, 5, 2, 14, 30),
        )
        assert payload.media_type == JSON_MEDIA_TYPE
        assert payload.filename.startswith("Résidence_sociale_Les_Tilleuls_")
        document = json.loads(payload.content.decode("utf-8"))
        assert document["user"] == "jdupont"
        assert document["exportedAt"] == "2024-05-02T14:30:00"
        sections = document["operation"]
        assert sections["operation"][0]["simulation_code"] == "S1"
        assert sections["operation"][0]["simulation_modified_at"] == "2024-02-01T10:00:00"
        assert len(sections["typologielogement"]) == 3
        assert sections["prixrevient"][-1]["chapter"] == "TOTAL"
        assert sections["financement"][-1]["total"] == 2_040_000

    def test_selected_sections_only(self, settings, detail):
        payload = OperationExporter(settings).export(ExportOptions(sections=["prixrevient"]), detail)
        assert list(json.loads(payload.content)["operation"]) == ["prixrevient"]


class TestExcelExport:
    def test_one_sheet_per_section(self, settings, detail):
        payload = OperationExporter(settings).export(ExportOptions(format="excel"), detail)
        assert payload.media_type == EXCEL_MEDIA_TYPE
        assert payload.filename.endswith(".xlsx")
        sheets = pd.read_excel(io.BytesIO(payload.content), sheet_name=None)
        assert list(sheets) == ["operation", "typologielogement", "prixrevient", "financement"]
        assert list(sheets["prixrevient"]["chapter"]) == ["PLUS", "PLAI", "TOTAL"]

    def test_empty_section_still_written(self, settings, detail):
        empty = OperationDetail(operation=detail.operation, simulation=detail.simulation)
        payload = OperationExporter(settings).export(ExportOptions(format="excel", sections=["typologielogement"]), empty)
        sheets = pd.read_excel(io.BytesIO(payload.content), sheet_name=None)
        assert list(sheets) == ["typologielogement"]


class TestErrors:
    def test_no_detail(self, settings):
        with pytest.raises(ExportError):
            OperationExporter(settings).export(ExportOptions(), None)

    def test_detail_of_another_operation(self, settings, detail):
        with pytest.raises(ExportError):
            OperationExporter(settings).export(ExportOptions(operation_id="P999"), detail)

    def test_disabled(self, settings, detail):
        disabled = settings.model_copy(update={"enable_export": False})
        with pytest.raises(ExportError):
            OperationExporter(disabled).export(ExportOptions(), detail)


def test_save_writes_file(settings, detail, tmp_path):
    exporter = OperationExporter(settings)
    payload = exporter.export(ExportOptions(), detail)
    path = exporter.save(payload)
    assert path.startswith(settings.export_dir)
    with open(path, "rb") as f:
        assert f.read() == payload.content
