"""Operation and simulation models.

An operation is a real-estate project; each operation carries one or more
named simulations (financing scenarios).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class Simulation(BaseModel):
    """A named scenario of an operation."""

    code: str = Field(..., description="Code_Simulation")
    label: str = Field(default="", description="LibelleSimulation")
    created_at: datetime | None = Field(None, description="DateCreation")
    modified_at: datetime | None = Field(None, description="DateModif")
    value_date: datetime | None = Field(None, description="DateValeur")
    stage: str | None = Field(None, description="Workflow stage (Etape)")
    owner: str | None = Field(None, description="Proprietaire")
    comment: str = Field(default="", description="Commentaire, falls back to the label")
    is_default: bool = Field(default=False, description="SimulDefaut")

    model_config = {"frozen": True}

    @computed_field
    @property
    def status(self) -> str:
        """Display status derived from the default flag."""
        from src.domain.calculator.classification import derive_simulation_status

        return derive_simulation_status(self.is_default)


class OperationRecord(BaseModel):
    """A project and its simulations, built from operation characteristic rows."""

    project_code: str = Field(..., description="Code_Projet")
    label: str = Field(..., description="LibelleOperation")
    address: str = Field(default="", description="AdresseOperation")
    commune: str = Field(default="")
    postal_code: str = Field(default="", description="CodePostal")
    construction_nature: str | None = Field(None, description="NatureConstruction")
    budget_owner: str | None = Field(None, description="RespBudget")
    simulations: tuple[Simulation, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @property
    def department(self) -> str:
        """Department number taken from the postal code."""
        return self.postal_code[:2] if self.postal_code else ""

    @property
    def latest_modification(self) -> datetime | None:
        """Most recent modification date across simulations."""
        dates = [s.modified_at for s in self.simulations if s.modified_at is not None]
        return max(dates) if dates else None

    @property
    def default_simulation(self) -> Simulation | None:
        """Simulation selected when the user has not chosen one."""
        return self.simulations[0] if self.simulations else None

    def get_simulation(self, code: str) -> Simulation | None:
        """Find a simulation by code."""
        return next((s for s in self.simulations if s.code == code), None)


class UserSession(BaseModel):
    """Authenticated user record kept between page loads."""

    id: str
    username: str
    token: str
