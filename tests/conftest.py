"""Pytest fixtures for smo_reporting tests."""

import os
import sys
from collections.abc import Callable
from typing import Any

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.core.settings import AppSettings  # noqa: E402

BASE_URL = "http://reporting.test/AccessionRV/api/reporting"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Stand-in for requests.Session routing GETs to a handler."""

    def __init__(self, handler: Callable[[str, dict | None, Any], FakeResponse]):
        self.handler = handler
        self.headers: dict[str, str] = {}
        self.auth = None
        self.calls: list[dict[str, Any]] = []

    def get(self, url, params=None, timeout=None, auth=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout, "auth": auth})
        return self.handler(url, params, auth)


def axis_handler(axes: dict[str, list[dict[str, Any]]]) -> Callable[[str, dict | None, Any], FakeResponse]:
    """Serve each axis' rows in one page; unknown axes answer 404.

    When a ``$filter`` on Code_Simulation is present, rows of other
    simulations are left out.
    """
    def handler(url, params, auth):
        axis = url.rsplit("/", 1)[-1]
        if axis not in axes:
            return FakeResponse(404, {"error": "not found"})
        rows = axes[axis]
        odata_filter = (params or {}).get("$filter") or ""
        if "Code_Simulation eq '" in odata_filter:
            sim = odata_filter.split("Code_Simulation eq '", 1)[1].split("'", 1)[0]
            rows = [r for r in rows if r.get("Code_Simulation") == sim]
        return FakeResponse(200, {"value": rows})
    return handler


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a fake API and a temporary directory."""
    return AppSettings(
        api_base_url=BASE_URL + "/",
        api_username="ADM",
        api_password="ADM",
        api_timeout_s=5,
        max_workers=4,
        page_size=2,
        session_file=str(tmp_path / "session.json"),
        export_dir=str(tmp_path / "exports"),
    )


@pytest.fixture
def raw_typology_records():
    """Typology axis rows of simulation S1 (two programs)."""
    return [
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS", "Type": "T2",
         "Nb": 4, "SurfHabMoy": 45.0, "Shab": 180.0, "Su": 190.0, "LRetModule": 6.5, "ProdLocLoyerRet": 14820.0},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS", "Type": "T3",
         "Nb": 6, "SurfHabMoy": 65.0, "Shab": 390.0, "Su": 410.0, "LRetModule": 6.0, "ProdLocLoyerRet": 29520.0},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLAI", "Type": "T2",
         "Nb": 2, "SurfHabMoy": 45.0, "Shab": 90.0, "Su": 95.0, "LRetModule": 5.5, "ProdLocLoyerRet": 6270.0},
    ]


@pytest.fixture
def raw_cost_records():
    """Prix de revient rows of simulation S1."""
    return [
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS", "Chapitre": "PLUS",
         "ChargeFonciereFisc": 300000, "CoutTravauxFisc": 1200000, "HonorairesFisc": 150000,
         "ActuRevisFisc": 40000, "FraisFinancierFisc": 10000, "TotalFisc": 1700000},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLAI", "Chapitre": "PLAI",
         "ChargeFonciereFisc": 60000, "CoutTravauxFisc": 240000, "HonorairesFisc": 30000,
         "ActuRevisFisc": 8000, "FraisFinancierFisc": 2000, "TotalFisc": 340000},
    ]


@pytest.fixture
def raw_financing_records():
    """Financing rows of simulation S1, including a level-2 detail line."""
    return [
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS",
         "Code_Financement": "FP", "Libelle_Financement": "Fonds propres", "Valeur_HT": 200000, "Hierarchie": 1},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS",
         "Code_Financement": "ETAT", "Libelle_Financement": "Subvention Etat", "Valeur_HT": 300000, "Hierarchie": 1},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS",
         "Code_Financement": "CDC", "Libelle_Financement": "Prêt CDC", "Valeur_HT": 1200000, "Hierarchie": 1},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLUS",
         "Code_Financement": "CDC1", "Libelle_Financement": "Prêt CDC foncier", "Valeur_HT": 400000, "Hierarchie": 2},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLAI",
         "Code_Financement": "PRET", "Libelle_Financement": "Emprunt", "Valeur_HT": 340000, "Hierarchie": 1},
        {"Code_Projet": "P001", "Code_Simulation": "S1", "Code_Programme": "PLAI",
         "Code_Financement": "TVA", "Libelle_Financement": "TVA récupérable", "Valeur_HT": 5000, "Hierarchie": 1},
    ]


@pytest.fixture
def raw_program_records():
    return [
        {"Code_Projet": "P001", "Code_Programme": "PLUS", "NatureFinancement": "PLUS", "LibelleProgramme": "Locatif PLUS"},
        {"Code_Projet": "P001", "Code_Programme": "PLAI", "NatureFinancement": "PLAI", "LibelleProgramme": "Locatif PLAI"},
    ]


@pytest.fixture
def raw_operation_records():
    """Operation characteristic rows: two operations, one with two simulations."""
    return [
        {"Code_Projet": "P001", "LibelleOperation": "Résidence sociale Les Tilleuls",
         "AdresseOperation": "12 rue des Tilleuls", "Commune": "Nantes", "CodePostal": "44000",
         "NatureConstruction": "Neuf", "RespBudget": "Martin",
         "Code_Simulation": "S1", "LibelleSimulation": "Simulation initiale",
         "DateCreation": "2024-01-10T09:00:00", "DateModif": "2024-02-01T10:00:00", "SimulDefaut": True},
        {"Code_Projet": "P001", "LibelleOperation": "Résidence sociale Les Tilleuls",
         "AdresseOperation": "12 rue des Tilleuls", "Commune": "Nantes", "CodePostal": "44000",
         "NatureConstruction": "Neuf", "RespBudget": "Martin",
         "Code_Simulation": "S2", "LibelleSimulation": "Variante PLAI",
         "DateCreation": "2024-03-01T09:00:00", "DateModif": "2024-03-15T16:30:00", "SimulDefaut": False},
        {"Code_Projet": "P001", "LibelleOperation": "Résidence sociale Les Tilleuls",
         "Code_Simulation": "S1", "LibelleSimulation": "Doublon",
         "DateModif": "2024-02-01T10:00:00"},
        {"Code_Projet": "P002", "LibelleOperation": "Réhabilitation Bellevue",
         "AdresseOperation": "3 place Bellevue", "Commune": "Saint-Herblain", "CodePostal": "44800",
         "NatureConstruction": "Réhabilitation", "RespBudget": "Durand",
         "Code_Simulation": "S1", "LibelleSimulation": "Base",
         "DateModif": "2023-11-20T08:00:00Z", "SimulDefaut": "false"},
    ]


@pytest.fixture
def reporting_axes(raw_typology_records, raw_cost_records, raw_financing_records, raw_program_records,
                   raw_operation_records):
    """Fake API content keyed by axis name (first candidate of each list unavailable)."""
    return {
        "AXE_MON_SRCaracOp": raw_operation_records,
        "AXE_MON_Typo": raw_typology_records,
        "AXE_MON_SRPrixRev": raw_cost_records,
        "AXE_MON_SRFinancement": raw_financing_records,
        "AXE_MON_SRCaracProg": raw_program_records,
    }


@pytest.fixture
def fake_session(reporting_axes):
    return FakeSession(axis_handler(reporting_axes))


@pytest.fixture
def make_session():
    """Factory for FakeSession objects."""
    return FakeSession


@pytest.fixture
def make_response():
    """Factory for FakeResponse objects."""
    return FakeResponse


@pytest.fixture
def make_axis_handler():
    """Factory for axis-routing handlers."""
    return axis_handler
