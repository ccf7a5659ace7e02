"""Grouping/reduction engine.

Folds normalized rows into keyed totals. Sums are accumulated as
``Decimal`` under a context wide enough to hold any sum of finite floats
exactly, so that the result does not depend on row order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Context, Decimal
from typing import Any

from src.core.glossary import TOTAL_KEY
from src.domain.calculator.classification import (
    FinancingBucket,
    classify_financing,
    resolve_financing_nature,
)
from src.domain.calculator.ratios import safe_divide
from src.domain.models.rows import (
    COST_COMPONENTS,
    CostRow,
    FinancingRow,
    ProgramInfo,
    TypologyRow,
)

ZERO = Decimal("0")

# Finite doubles span about 650 decimal digits (5e-324 to 1.8e308), their
# pairwise products about 1300; sums of either stay exact at this precision
_SUM_CONTEXT = Context(prec=1500)

KeyRule = str | Callable[[Any], Any]

TYPOLOGY_FIELDS: tuple[str, ...] = ("unit_count", "shab", "su", "rent_yield")
COST_FIELDS: tuple[str, ...] = COST_COMPONENTS + ("total",)
FINANCING_FIELDS: tuple[str, ...] = tuple(b.value for b in FinancingBucket) + ("total",)


def to_decimal(value: Any) -> Decimal:
    """Convert a numeric value to Decimal exactly as it prints."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _get(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _key_getter(key: KeyRule) -> Callable[[Any], Any]:
    if callable(key):
        return key
    return lambda row: _get(row, key)


@dataclass
class GroupedTotals:
    """Accumulators keyed by group, in first-seen key order, plus a grand total.

    The grand total is exposed under the reserved ``"total"`` key by
    ``__getitem__`` and ``as_dict``.
    """

    fields: tuple[str, ...]
    groups: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    grand_total: dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.grand_total:
            self.grand_total = {f: ZERO for f in self.fields}

    def accumulator(self, key: str) -> dict[str, Decimal]:
        """Resolve or create the accumulator of a key."""
        acc = self.groups.get(key)
        if acc is None:
            acc = {f: ZERO for f in self.fields}
            self.groups[key] = acc
        return acc

    def add(self, key: str, values: Mapping[str, Any]) -> None:
        """Add field values to a key and to the grand total."""
        acc = self.accumulator(key)
        for name in self.fields:
            amount = to_decimal(values.get(name))
            acc[name] = _SUM_CONTEXT.add(acc[name], amount)
            self.grand_total[name] = _SUM_CONTEXT.add(self.grand_total[name], amount)

    def keys(self) -> list[str]:
        """Group keys in first-seen order (grand total excluded)."""
        return list(self.groups)

    def items(self) -> Iterator[tuple[str, dict[str, Decimal]]]:
        return iter(self.groups.items())

    def __getitem__(self, key: str) -> dict[str, Decimal]:
        if key == TOTAL_KEY:
            return self.grand_total
        return self.groups[key]

    def __contains__(self, key: object) -> bool:
        return key == TOTAL_KEY or key in self.groups

    def __len__(self) -> int:
        return len(self.groups)

    def as_dict(self) -> dict[str, dict[str, Decimal]]:
        """All accumulators with the grand total last, under ``"total"``."""
        result = {k: dict(v) for k, v in self.groups.items()}
        result[TOTAL_KEY] = dict(self.grand_total)
        return result


def group_rows(rows: Iterable[Any], key: KeyRule, fields: Sequence[str]) -> GroupedTotals:
    """Fold rows into totals per key.

    Args:
        rows: Mappings or objects exposing the fields
        key: Field name or callable giving the group key of a row
        fields: Numeric fields to sum

    Returns:
        GroupedTotals with first-seen key order
    """
    get_key = _key_getter(key)
    grouped = GroupedTotals(fields=tuple(fields))
    for row in rows:
        group = get_key(row)
        grouped.add(str(group), {f: _get(row, f) for f in grouped.fields})
    return grouped


@dataclass(frozen=True)
class TypologyTotals:
    """Grand totals and per-type totals of a typology breakdown."""

    total: dict[str, float]
    by_type: dict[str, dict[str, float]]

    @property
    def unit_count(self) -> float:
        return self.total["unit_count"]

    @property
    def shab(self) -> float:
        return self.total["shab"]


def _weighted_surface(rows: Iterable[TypologyRow]) -> Decimal:
    total = ZERO
    for r in rows:
        total = _SUM_CONTEXT.add(total, _SUM_CONTEXT.multiply(to_decimal(r.avg_surface), Decimal(r.unit_count)))
    return total


def _finish_typology(acc: Mapping[str, Decimal], weighted_surface: Decimal) -> dict[str, float]:
    values = {name: float(amount) for name, amount in acc.items()}
    values["avg_surface"] = safe_divide(weighted_surface, acc["unit_count"])
    return values


def compute_typology_totals(rows: Sequence[TypologyRow]) -> TypologyTotals:
    """Totals of dwellings, surfaces and rent, overall and by dwelling type.

    The average habitable surface is weighted by the number of units.
    """
    by_type = group_rows(rows, "unit_type", TYPOLOGY_FIELDS)

    per_type = {
        unit_type: _finish_typology(acc, _weighted_surface(r for r in rows if r.unit_type == unit_type))
        for unit_type, acc in by_type.items()
    }
    total = _finish_typology(by_type.grand_total, _weighted_surface(rows))
    return TypologyTotals(total=total, by_type=per_type)


def group_typology_by_nature(
    rows: Sequence[TypologyRow],
    program_map: Mapping[str, ProgramInfo] | None = None,
) -> GroupedTotals:
    """Typology totals per financing nature.

    Adds ``annex_surface`` (SU - SHAB) and ``rent_module_su``, the
    rent module weighted by SU, so that the average rent is
    ``rent_module_su / su``.
    """
    enriched = (
        {
            "nature": resolve_financing_nature(r.program_code, program_map),
            "unit_count": r.unit_count,
            "shab": r.shab,
            "su": r.su,
            "annex_surface": r.annex_surface,
            "rent_yield": r.rent_yield,
            "rent_module_su": _SUM_CONTEXT.multiply(to_decimal(r.rent_module), to_decimal(r.su)),
        }
        for r in rows
    )
    return group_rows(
        enriched,
        "nature",
        TYPOLOGY_FIELDS + ("annex_surface", "rent_module_su"),
    )


def filter_typology_by_nature(
    rows: Iterable[TypologyRow],
    nature: str,
    program_map: Mapping[str, ProgramInfo] | None = None,
) -> list[TypologyRow]:
    """Rows whose program resolves to the given financing nature."""
    return [r for r in rows if resolve_financing_nature(r.program_code, program_map) == nature]


def group_costs_by_program(rows: Iterable[CostRow]) -> GroupedTotals:
    """Cost components and total per program chapter. Upstream totals are trusted."""
    return group_rows(rows, "chapter", COST_FIELDS)


def fold_financing_buckets(rows: Iterable[FinancingRow]) -> GroupedTotals:
    """Split consolidated financing lines into buckets per program.

    Only hierarchy level 1 is considered. Each line lands in at most one
    bucket; unclassified lines are dropped and never reach the totals.
    """
    grouped = GroupedTotals(fields=FINANCING_FIELDS)
    for row in rows:
        if not row.is_consolidated:
            continue
        bucket = classify_financing(row)
        if bucket is None:
            continue
        grouped.add(row.program_code, {bucket.value: row.amount_ht, "total": row.amount_ht})
    return grouped
