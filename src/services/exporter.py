"""Export services for operation details.

Serializes a loaded operation detail to JSON or to an Excel workbook with
one sheet per section, and saves exports to disk.
"""

from __future__ import annotations

import io
import json
import os
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

import pandas as pd
from pydantic import BaseModel, Field, field_validator

from src.application.services.detail_loader import OperationDetail
from src.core.exceptions import ExportError
from src.core.glossary import EXPORT_SECTIONS
from src.core.logging import get_logger
from src.core.settings import AppSettings, get_settings

log = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ExportFormat = Literal["json", "excel"]


class ExportOptions(BaseModel):
    """What to export."""

    format: ExportFormat = Field(default="json")
    operation_id: str | None = Field(None, description="Code_Projet of the exported operation")
    sections: list[str] | None = Field(None, description="Sections to include; all when empty")

    @field_validator("sections")
    @classmethod
    def known_sections(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        unknown = [s for s in v if s not in EXPORT_SECTIONS]
        if unknown:
            raise ValueError(f"Unknown export sections: {', '.join(unknown)}")
        return v

    def selected_sections(self) -> list[str]:
        """Requested sections in canonical order."""
        if not self.sections:
            return list(EXPORT_SECTIONS)
        return [s for s in EXPORT_SECTIONS if s in self.sections]


@dataclass(frozen=True)
class ExportPayload:
    """A generated export file."""

    content: bytes
    media_type: str
    filename: str


def build_export_filename(label: str, fmt: ExportFormat, today: date | None = None) -> str:
    """``<label with underscores>_<YYYY-MM-DD>.<json|xlsx>``."""
    today = today or date.today()
    stem = re.sub(r"\s", "_", label.strip()) or "export"
    extension = "json" if fmt == "json" else "xlsx"
    return f"{stem}_{today.isoformat()}.{extension}"


def _operation_section(detail: OperationDetail) -> list[dict[str, Any]]:
    op = detail.operation
    sim = detail.simulation
    return [{
        "project_code": op.project_code,
        "label": op.label,
        "address": op.address,
        "commune": op.commune,
        "postal_code": op.postal_code,
        "construction_nature": op.construction_nature,
        "budget_owner": op.budget_owner,
        "simulation_code": sim.code if sim else None,
        "simulation_label": sim.label if sim else None,
        "simulation_status": sim.status if sim else None,
        "simulation_modified_at": sim.modified_at if sim else None,
    }]


def section_rows(detail: OperationDetail, section: str) -> list[dict[str, Any]]:
    """Flat rows of one export section."""
    if section == "operation":
        return _operation_section(detail)
    if section == "typologielogement":
        return [row.model_dump() for row in detail.typology]
    if section == "prixrevient":
        return detail.budget.table
    if section == "financement":
        return detail.financing_plan.table
    raise ExportError(f"Section d'export inconnue: {section}")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class OperationExporter:
    """Builds export files from operation details."""

    def __init__(self, settings: AppSettings | None = None, output_dir: str | None = None):
        """Initialize exporter.

        Args:
            settings: Application settings
            output_dir: Directory where saved exports go; defaults to settings.export_dir
        """
        self.settings = settings or get_settings()
        self.output_dir = output_dir or self.settings.export_dir

    def export(
        self,
        options: ExportOptions,
        detail: OperationDetail | None,
        username: str | None = None,
        exported_at: datetime | None = None,
    ) -> ExportPayload:
        """Serialize a detail.

        Args:
            options: Format and sections
            detail: Loaded detail of the operation
            username: Logged-in user recorded in JSON exports
            exported_at: Export timestamp (now by default)

        Raises:
            ExportError: Nothing to export or the workbook could not be written
        """
        if not self.settings.enable_export:
            raise ExportError("Les exports sont désactivés")
        if detail is None:
            raise ExportError("Aucune opération chargée à exporter")
        if options.operation_id and options.operation_id != detail.operation.project_code:
            raise ExportError(
                f"Le détail chargé ({detail.operation.project_code}) ne correspond pas à {options.operation_id}"
            )

        sections = {name: section_rows(detail, name) for name in options.selected_sections()}
        filename = build_export_filename(detail.operation.label, options.format)

        if options.format == "json":
            payload = ExportPayload(
                content=self._to_json(sections, username, exported_at or datetime.now()),
                media_type=JSON_MEDIA_TYPE,
                filename=filename,
            )
        else:
            payload = ExportPayload(
                content=self._to_excel(sections),
                media_type=EXCEL_MEDIA_TYPE,
                filename=filename,
            )
        log.info(
            "export_built",
            format=options.format,
            project=detail.operation.project_code,
            sections=list(sections),
            size=len(payload.content),
        )
        return payload

    @staticmethod
    def _to_json(sections: dict[str, list[dict[str, Any]]], username: str | None, exported_at: datetime) -> bytes:
        document = {
            "operation": sections,
            "exportedAt": exported_at.isoformat(),
            "user": username,
        }
        return json.dumps(document, indent=2, ensure_ascii=False, default=_json_default).encode("utf-8")

    @staticmethod
    def _to_excel(sections: dict[str, list[dict[str, Any]]]) -> bytes:
        output = io.BytesIO()
        try:
            with pd.ExcelWriter(output, engine="openpyxl") as writer:
                for name, rows in sections.items():
                    df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=["Aucune donnée"])
                    df.to_excel(writer, sheet_name=name, index=False)
        except (ValueError, OSError) as e:
            log.error("excel_export_failed", error=str(e))
            raise ExportError(f"Impossible de générer le classeur: {e}") from e
        return output.getvalue()

    def save(self, payload: ExportPayload, output_dir: str | None = None) -> str:
        """Write an export to disk.

        Returns:
            Path to the saved file
        """
        directory = output_dir or self.output_dir
        filepath = os.path.join(directory, payload.filename)
        try:
            os.makedirs(directory, exist_ok=True)
            with open(filepath, "wb") as f:
                f.write(payload.content)
        except OSError as e:
            log.error("export_save_failed", path=filepath, error=str(e))
            raise ExportError(f"Écriture impossible: {filepath}") from e

        log.info("export_saved", path=filepath, size=len(payload.content))
        return filepath
