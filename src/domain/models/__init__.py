"""Data models for smo_reporting."""

from .operation import OperationRecord, Simulation, UserSession
from .rows import COST_COMPONENTS, CostRow, FinancingRow, ProgramInfo, TypologyRow

__all__ = [
    "OperationRecord",
    "Simulation",
    "UserSession",
    "TypologyRow",
    "CostRow",
    "FinancingRow",
    "ProgramInfo",
    "COST_COMPONENTS",
]
