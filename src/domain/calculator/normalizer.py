"""Row normalizer.

Maps raw reporting-axis records (one JSON object per row, field names
depending on the axis) onto the fixed row shapes of ``src.domain.models``.
Missing values default to zero or empty; nothing here raises on bad data.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from src.core.glossary import DEFAULT_CHAPTER, UNDEFINED_PROGRAM
from src.core.logging import get_logger
from src.domain.models.operation import Simulation
from src.domain.models.rows import CostRow, FinancingRow, ProgramInfo, TypologyRow

log = get_logger(__name__)

T = TypeVar("T")

RawRecord = Mapping[str, Any]

# Alternative field names, tried in order
FINANCING_CODE_FIELDS = ("Code_Financement", "CodeFinancement", "Code_TypeFinancement", "TypeFinancement")
FINANCING_LABEL_FIELDS = ("Libelle_Financement", "LibelleFinancement", "Libelle_TypeFinancement", "Designation")
FINANCING_AMOUNT_FIELDS = ("Valeur_HT", "ValeurHT", "Montant_HT", "Montant")
HIERARCHY_FIELDS = ("Hierarchie", "Niveau", "NiveauHierarchie")

# Wide financing layout: one column per bucket
WIDE_FINANCING_COLUMNS: dict[str, tuple[str, str]] = {
    "FondsPropres": ("FP", "Fonds propres"),
    "Subventions": ("SUBV", "Subventions"),
    "Prets": ("PRET", "Prêts"),
}


def first_present(raw: RawRecord, fields: Iterable[str], default: Any = None) -> Any:
    """Return the first non-null value among alternative field names."""
    for name in fields:
        value = raw.get(name)
        if value is not None and value != "":
            return value
    return default


def to_float(value: Any, field: str = "") -> float:
    """Coerce an API value to float; None, garbage, NaN and infinities become 0.0."""
    if value is None or value == "":
        return 0.0
    candidate = value if isinstance(value, (bool, int, float)) else str(value).replace(",", ".").replace(" ", "")
    try:
        result = float(candidate)
    except (ValueError, OverflowError):
        result = math.nan
    if not math.isfinite(result):
        log.warning("non_numeric_value", field=field, value=str(value))
        return 0.0
    return result


def to_int(value: Any, field: str = "") -> int:
    """Coerce an API value to int, rounding decimals."""
    return int(round(to_float(value, field)))


def to_text(value: Any, default: str = "") -> str:
    """Coerce an API value to a stripped string."""
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def to_datetime(value: Any) -> datetime | None:
    """Parse an ISO date string; unparseable dates become None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        log.warning("invalid_date", value=str(value))
        return None
    # Mixed naive/aware dates would not sort
    return parsed.replace(tzinfo=None)


def to_bool(value: Any) -> bool:
    """Interpret API flags ("true", 1, True...)."""
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "oui", "yes", "o"}
    return bool(value)


def _program_code(raw: RawRecord) -> str:
    return to_text(raw.get("Code_Programme"), UNDEFINED_PROGRAM)


def normalize_typology_row(raw: RawRecord) -> TypologyRow:
    """Map a typology axis record to a TypologyRow."""
    return TypologyRow(
        project_code=to_text(raw.get("Code_Projet")),
        simulation_code=to_text(raw.get("Code_Simulation")),
        program_code=_program_code(raw),
        designation=to_text(raw.get("Designation")),
        unit_count=to_int(raw.get("Nb"), "Nb"),
        unit_type=to_text(raw.get("Type"), UNDEFINED_PROGRAM),
        avg_surface=to_float(raw.get("SurfHabMoy"), "SurfHabMoy"),
        shab=to_float(raw.get("Shab"), "Shab"),
        su=to_float(raw.get("Su"), "Su"),
        rent_module=to_float(raw.get("LRetModule"), "LRetModule"),
        rent_yield=to_float(raw.get("ProdLocLoyerRet"), "ProdLocLoyerRet"),
    )


def normalize_cost_row(raw: RawRecord) -> CostRow:
    """Map a "prix de revient" axis record to a CostRow."""
    program_code = to_text(raw.get("Code_Programme"))
    # Cost tables are keyed by program; upstream chapter labels are ignored
    chapter = program_code or DEFAULT_CHAPTER
    return CostRow(
        project_code=to_text(raw.get("Code_Projet")),
        simulation_code=to_text(raw.get("Code_Simulation")),
        program_code=program_code or UNDEFINED_PROGRAM,
        chapter=chapter,
        land_charge=to_float(raw.get("ChargeFonciereFisc"), "ChargeFonciereFisc"),
        works_cost=to_float(raw.get("CoutTravauxFisc"), "CoutTravauxFisc"),
        fees=to_float(raw.get("HonorairesFisc"), "HonorairesFisc"),
        indexation=to_float(raw.get("ActuRevisFisc"), "ActuRevisFisc"),
        financial_charges=to_float(raw.get("FraisFinancierFisc"), "FraisFinancierFisc"),
        total=to_float(raw.get("TotalFisc"), "TotalFisc"),
    )


def normalize_financing_rows(raw: RawRecord) -> list[FinancingRow]:
    """Map a financing axis record to one or more FinancingRows.

    Long records (one financing line each) give one row. Wide records with
    FondsPropres/Subventions/Prets columns give one row per filled column,
    tagged with the explicit bucket code.
    """
    common = {
        "project_code": to_text(raw.get("Code_Projet")),
        "simulation_code": to_text(raw.get("Code_Simulation")),
        "program_code": _program_code(raw),
    }
    level = to_int(first_present(raw, HIERARCHY_FIELDS, 1), "Hierarchie")

    wide = [col for col in WIDE_FINANCING_COLUMNS if raw.get(col) is not None]
    if wide:
        return [
            FinancingRow(
                **common,
                financing_code=WIDE_FINANCING_COLUMNS[col][0],
                financing_label=WIDE_FINANCING_COLUMNS[col][1],
                amount_ht=to_float(raw.get(col), col),
                hierarchy_level=level,
            )
            for col in wide
        ]

    return [
        FinancingRow(
            **common,
            financing_code=to_text(first_present(raw, FINANCING_CODE_FIELDS)),
            financing_label=to_text(first_present(raw, FINANCING_LABEL_FIELDS)),
            amount_ht=to_float(first_present(raw, FINANCING_AMOUNT_FIELDS), "Valeur_HT"),
            hierarchy_level=level,
        )
    ]


def normalize_program_info(raw: RawRecord) -> ProgramInfo:
    """Map a program characteristics record to a ProgramInfo."""
    return ProgramInfo(
        program_code=_program_code(raw),
        financing_nature=to_text(raw.get("NatureFinancement")) or None,
        label=to_text(raw.get("LibelleProgramme")) or None,
    )


def normalize_simulation(raw: RawRecord) -> Simulation:
    """Map an operation characteristics record to its Simulation."""
    label = to_text(raw.get("LibelleSimulation"))
    return Simulation(
        code=to_text(raw.get("Code_Simulation")),
        label=label,
        created_at=to_datetime(raw.get("DateCreation")),
        modified_at=to_datetime(raw.get("DateModif")),
        value_date=to_datetime(raw.get("DateValeur")),
        stage=to_text(raw.get("Etape")) or None,
        owner=to_text(raw.get("Proprietaire")) or None,
        comment=to_text(raw.get("Commentaire"), label),
        is_default=to_bool(raw.get("SimulDefaut")),
    )


def normalize_rows(raws: Iterable[RawRecord], normalizer: Callable[[RawRecord], T]) -> list[T]:
    """Apply a normalizer to every record, skipping non-mapping entries."""
    rows: list[T] = []
    for raw in raws or []:
        if not isinstance(raw, Mapping):
            log.warning("skipping_non_record", kind=type(raw).__name__)
            continue
        rows.append(normalizer(raw))
    return rows


def normalize_financing(raws: Iterable[RawRecord]) -> list[FinancingRow]:
    """Flatten financing records into FinancingRows."""
    rows: list[FinancingRow] = []
    for batch in normalize_rows(raws, normalize_financing_rows):
        rows.extend(batch)
    return rows


def build_program_map(infos: Iterable[ProgramInfo]) -> dict[str, ProgramInfo]:
    """Index program characteristics by program code (first record wins)."""
    mapping: dict[str, ProgramInfo] = {}
    for info in infos:
        mapping.setdefault(info.program_code, info)
    return mapping
