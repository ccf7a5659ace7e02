"""
Standardized Reporting Definitions.
Single Source of Truth for labels, units and colours shown by the dashboard.
"""
from typing import TypedDict

# Reserved key of the grand-total entry in grouped totals
TOTAL_KEY = "total"
TOTAL_LABEL = "TOTAL"

UNDEFINED_PROGRAM = "Non défini"
DEFAULT_CHAPTER = "Programme principal"

# Positional chart palette (slice index modulo palette size)
CHART_PALETTE: tuple[str, ...] = (
    "#2a9d8f",
    "#e9c46a",
    "#f4a261",
    "#e76f51",
    "#264653",
)

# Fiscal cost components of the "prix de revient", in display order
COST_COMPONENT_LABELS: dict[str, str] = {
    "land_charge": "Charge foncière",
    "works_cost": "Coût travaux",
    "fees": "Honoraires",
    "indexation": "Actualisation",
    "financial_charges": "Frais financiers",
}

FINANCING_BUCKET_LABELS: dict[str, str] = {
    "fonds_propres": "Fonds propres",
    "subventions": "Subventions",
    "prets": "Prêts",
}

TYPOLOGY_LABELS: dict[str, str] = {
    "unit_count": "Logements",
    "shab": "SHAB (m²)",
    "su": "SU (m²)",
    "annex_surface": "Surf. annexes (m²)",
    "avg_surface": "Surf. hab. moy. (m²)",
    "avg_rent_module": "Loyer moyen (€/m² SU)",
    "rent_yield": "Produit locatif (€)",
}


class RatioDefinition(TypedDict):
    title: str
    unit: str
    detail_title: str


# Headline ratio cards, keyed by RatioKind value
RATIO_DEFINITIONS: dict[str, RatioDefinition] = {
    "total": {
        "title": "Total",
        "unit": "€",
        "detail_title": "Total par nature de financement",
    },
    "logement": {
        "title": "Par logement",
        "unit": "€/logement",
        "detail_title": "Par logement et par nature de financement",
    },
    "shab": {
        "title": "Par m² SHAB",
        "unit": "€/m²",
        "detail_title": "Par m² SHAB et par nature de financement",
    },
    "surface": {
        "title": "Surface moyenne par logement",
        "unit": "m²/logement",
        "detail_title": "Surface moyenne par logement et par nature de financement",
    },
}

# Sections selectable for an export
EXPORT_SECTIONS: dict[str, str] = {
    "operation": "Caractéristiques de l'opération",
    "typologielogement": "Typologies de logement",
    "prixrevient": "Prix de revient",
    "financement": "Plan de financement",
}
