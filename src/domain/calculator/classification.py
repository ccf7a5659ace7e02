"""Static classification tables for the reporting pipeline.

Maps program codes to financing natures, financing lines to one of the
three funding buckets, and operation labels to an operation type. Every
lookup is total: unseen codes fall back instead of raising.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping
from enum import Enum

from src.core.glossary import UNDEFINED_PROGRAM
from src.domain.models.rows import FinancingRow, ProgramInfo

# Program code -> financing nature
FINANCING_NATURES: dict[str, str] = {
    "PLAI": "PLAI",
    "PLAI_A": "PLAI",
    "PLAIA": "PLAI",
    "PLUS": "PLUS",
    "PLUS_CD": "PLUS",
    "PLS": "PLS",
    "PLI": "PLI",
    "LLI": "LLI",
    "PSLA": "PSLA",
    "BRS": "BRS",
    "ACC": "Accession libre",
    "ACCESSION": "Accession libre",
    "LIBRE": "Accession libre",
    "PALULOS": "PALULOS",
    "PAM": "PAM",
}


class FinancingBucket(str, Enum):
    """Funding buckets of the financing plan."""
    FONDS_PROPRES = "fonds_propres"
    SUBVENTIONS = "subventions"
    PRETS = "prets"


# Financing codes that name a bucket explicitly
BUCKET_CODES: dict[str, FinancingBucket] = {
    "FP": FinancingBucket.FONDS_PROPRES,
    "FONDSPROPRES": FinancingBucket.FONDS_PROPRES,
    "FONDS_PROPRES": FinancingBucket.FONDS_PROPRES,
    "SUBV": FinancingBucket.SUBVENTIONS,
    "SUBVENTIONS": FinancingBucket.SUBVENTIONS,
    "PRET": FinancingBucket.PRETS,
    "PRETS": FinancingBucket.PRETS,
}


class OperationType(str, Enum):
    """Operation families shown as badges in the explorer."""
    RESIDENCE_SOCIALE = "Résidence sociale"
    REHABILITATION = "Réhabilitation"
    CONSTRUCTION_NEUVE = "Construction neuve"


def _fold(text: str | None) -> str:
    """Uppercase without accents, for keyword matching."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).upper()


def resolve_financing_nature(
    program_code: str | None,
    program_map: Mapping[str, ProgramInfo] | None = None,
) -> str:
    """Resolve the financing nature of a program code.

    Order: nature delivered by the program axis, static table, raw code.

    Args:
        program_code: Raw Code_Programme
        program_map: Optional program characteristics keyed by code

    Returns:
        Financing nature label, never empty
    """
    if not program_code or program_code == UNDEFINED_PROGRAM:
        return UNDEFINED_PROGRAM

    if program_map:
        info = program_map.get(program_code)
        if info is not None and info.financing_nature:
            return info.financing_nature

    return FINANCING_NATURES.get(program_code.strip().upper(), program_code)


def classify_financing(row: FinancingRow) -> FinancingBucket | None:
    """Assign a financing line to exactly one bucket.

    Precedence: explicit bucket code, then "SUBV"/"subvention" in the label,
    then "PRET"/"prêt" in the label. Anything else is dropped (None).
    """
    code = _fold(row.financing_code).strip()
    if code in BUCKET_CODES:
        return BUCKET_CODES[code]

    label = _fold(row.financing_label)
    if "SUBV" in label:
        return FinancingBucket.SUBVENTIONS
    if "PRET" in label:
        return FinancingBucket.PRETS
    return None


def classify_operation_type(label: str | None) -> OperationType:
    """Guess the operation family from its label."""
    folded = _fold(label)
    if "RESIDENCE SOCIALE" in folded or "SOCIAL" in folded or "HLM" in folded:
        return OperationType.RESIDENCE_SOCIALE
    if "REHABILITATION" in folded or "RENOVATION" in folded:
        return OperationType.REHABILITATION
    return OperationType.CONSTRUCTION_NEUVE


def derive_simulation_status(is_default: bool) -> str:
    """Status badge of a simulation."""
    return "Défaut" if is_default else "Actif"
