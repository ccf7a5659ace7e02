"""Normalized report rows.

Every reporting axis returns its own field names; the row normalizer maps
them onto these fixed shapes before any aggregation happens.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from src.core.glossary import DEFAULT_CHAPTER, UNDEFINED_PROGRAM


class TypologyRow(BaseModel):
    """One housing-unit type line of a simulation."""

    project_code: str = Field(default="", description="Code_Projet")
    simulation_code: str = Field(default="", description="Code_Simulation")
    program_code: str = Field(default=UNDEFINED_PROGRAM, description="Code_Programme")
    designation: str = Field(default="", description="Free label of the line")

    unit_count: int = Field(default=0, description="Number of dwellings (Nb)")
    unit_type: str = Field(default="", description="Dwelling type code (T1, T2...)")
    avg_surface: float = Field(default=0.0, description="Average habitable surface per unit (m²)")
    shab: float = Field(default=0.0, description="Habitable surface SHAB (m²)")
    su: float = Field(default=0.0, description="Usable surface SU (m²)")
    rent_module: float = Field(default=0.0, description="Monthly rent per m² SU (LRetModule)")
    rent_yield: float = Field(default=0.0, description="Annual rent yield (ProdLocLoyerRet)")

    model_config = {"frozen": True}

    @computed_field
    @property
    def annex_surface(self) -> float:
        """SU minus SHAB. Not validated: inconsistent sources give a negative value."""
        return self.su - self.shab


class CostRow(BaseModel):
    """One chapter of the cost-to-build ("prix de revient")."""

    project_code: str = Field(default="")
    simulation_code: str = Field(default="")
    program_code: str = Field(default=UNDEFINED_PROGRAM)
    chapter: str = Field(default=DEFAULT_CHAPTER, description="Budget chapter: program code or \"Programme principal\"")

    land_charge: float = Field(default=0.0, description="ChargeFonciereFisc")
    works_cost: float = Field(default=0.0, description="CoutTravauxFisc")
    fees: float = Field(default=0.0, description="HonorairesFisc")
    indexation: float = Field(default=0.0, description="ActuRevisFisc")
    financial_charges: float = Field(default=0.0, description="FraisFinancierFisc")
    total: float = Field(default=0.0, description="TotalFisc, taken as delivered")

    model_config = {"frozen": True}


COST_COMPONENTS: tuple[str, ...] = (
    "land_charge",
    "works_cost",
    "fees",
    "indexation",
    "financial_charges",
)


class FinancingRow(BaseModel):
    """One financing line of the financing plan."""

    project_code: str = Field(default="")
    simulation_code: str = Field(default="")
    program_code: str = Field(default=UNDEFINED_PROGRAM)
    financing_code: str = Field(default="", description="Financing type code")
    financing_label: str = Field(default="", description="Financing type label")
    amount_ht: float = Field(default=0.0, description="Pre-tax value (Valeur_HT)")
    hierarchy_level: int = Field(default=1, description="1 = consolidated line, anything else is detail")

    model_config = {"frozen": True}

    @property
    def is_consolidated(self) -> bool:
        """Only level-1 rows count towards totals."""
        return self.hierarchy_level == 1


class ProgramInfo(BaseModel):
    """Program characteristics used to resolve the financing nature."""

    program_code: str = Field(..., description="Code_Programme")
    financing_nature: str | None = Field(None, description="NatureFinancement")
    label: str | None = Field(None, description="LibelleProgramme")

    model_config = {"frozen": True}
