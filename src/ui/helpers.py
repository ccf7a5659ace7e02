"""UI helper functions for Streamlit.

Common formatting and display utilities.
"""

from __future__ import annotations

from datetime import datetime

from src.domain.calculator.classification import OperationType, classify_operation_type


def _group_thousands(text: str) -> str:
    # French grouping: space for thousands, comma for decimals
    return text.replace(",", " ").replace(".", ",")


def format_number(value: float | None, decimals: int = 0) -> str:
    """Format a number with French separators ("1 234,5")."""
    if value is None:
        return "—"
    if decimals == 0:
        return _group_thousands(f"{int(round(value)):,}")
    return _group_thousands(f"{value:,.{decimals}f}")


def format_euro(value: float | None, decimals: int = 0) -> str:
    """Format a number as Euro currency.

    Args:
        value: Amount to format
        decimals: Number of decimal places

    Returns:
        Formatted string like "1 234 567 €"
    """
    if value is None:
        return "—"
    return f"{format_number(value, decimals)} €"


def format_m2(value: float | None, decimals: int = 2) -> str:
    """Format a surface in square metres."""
    if value is None:
        return "—"
    return f"{format_number(value, decimals)} m²"


def format_ratio(value: float | None, unit: str) -> str:
    """Format a ratio card value with its unit."""
    if value is None:
        return "—"
    if unit.startswith("m²"):
        return f"{format_number(value, 2)} {unit}"
    return f"{format_number(value)} {unit}"


def format_date(value: datetime | None) -> str:
    """Format a date as DD/MM/YYYY."""
    if value is None:
        return "—"
    return value.strftime("%d/%m/%Y")


def get_operation_badge(label: str) -> tuple[str, str]:
    """Get badge info for an operation.

    Returns:
        Tuple of (icon, operation type)
    """
    icons = {
        OperationType.RESIDENCE_SOCIALE: "🏘️",
        OperationType.REHABILITATION: "🛠️",
        OperationType.CONSTRUCTION_NEUVE: "🏗️",
    }
    op_type = classify_operation_type(label)
    return icons.get(op_type, "🏢"), op_type.value


def status_badge(status: str) -> str:
    """Coloured markdown for a simulation status."""
    color = "red" if status == "Défaut" else "green"
    return f":{color}[{status}]"
