"""Ratio calculator.

Per-unit metrics derived from totals. A zero divisor yields a zero ratio,
never NaN, infinity or an exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Union

Number = Union[int, float, Decimal]


class RatioKind(str, Enum):
    """Ratio selectable on the budget and financing cards."""
    TOTAL = "total"
    PER_UNIT = "logement"
    PER_M2 = "shab"
    SURFACE = "surface"


def safe_divide(numerator: Number, denominator: Number) -> float:
    """Divide, returning 0.0 when the denominator is zero."""
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


@dataclass(frozen=True)
class UnitRatios:
    """Headline ratios of a cost or financing total."""

    total: float
    cost_per_unit: float
    cost_per_m2: float
    surface_per_unit: float


def compute_unit_ratios(total: Number, unit_count: Number, surface: Number) -> UnitRatios:
    """Cost per dwelling, cost per m² and average surface per dwelling.

    Args:
        total: Amount to spread (cost or financing total)
        unit_count: Number of dwellings N
        surface: Habitable surface S (m²)
    """
    return UnitRatios(
        total=float(total),
        cost_per_unit=safe_divide(total, unit_count),
        cost_per_m2=safe_divide(total, surface),
        surface_per_unit=safe_divide(surface, unit_count),
    )


def apply_ratio(value: Number, kind: RatioKind, unit_count: Number, surface: Number) -> float:
    """Express one amount under the selected ratio.

    ``SURFACE`` has no meaning for an amount and gives 0.
    """
    if kind is RatioKind.TOTAL:
        return float(value)
    if kind is RatioKind.PER_UNIT:
        return safe_divide(value, unit_count)
    if kind is RatioKind.PER_M2:
        return safe_divide(value, surface)
    return 0.0


def ratio_breakdown(
    components: Mapping[str, Number],
    total: Number,
    kind: RatioKind,
    unit_count: Number,
    surface: Number,
) -> tuple[dict[str, float], float]:
    """Apply a ratio to every component of a line and to its total.

    In ``SURFACE`` mode the line value is the average surface per
    dwelling and the components are zero.

    Returns:
        Tuple of (component values, line value)
    """
    details = {name: apply_ratio(amount, kind, unit_count, surface) for name, amount in components.items()}
    if kind is RatioKind.SURFACE:
        return details, safe_divide(surface, unit_count)
    return details, apply_ratio(total, kind, unit_count, surface)
