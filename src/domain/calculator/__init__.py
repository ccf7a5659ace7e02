"""Aggregation pipeline: normalizer, classification, reduction and ratios."""

from .aggregation import (
    GroupedTotals,
    TypologyTotals,
    compute_typology_totals,
    filter_typology_by_nature,
    fold_financing_buckets,
    group_costs_by_program,
    group_rows,
    group_typology_by_nature,
)
from .classification import (
    FinancingBucket,
    OperationType,
    classify_financing,
    classify_operation_type,
    resolve_financing_nature,
)
from .ratios import RatioKind, UnitRatios, compute_unit_ratios, safe_divide

__all__ = [
    "GroupedTotals",
    "TypologyTotals",
    "group_rows",
    "compute_typology_totals",
    "group_typology_by_nature",
    "filter_typology_by_nature",
    "group_costs_by_program",
    "fold_financing_buckets",
    "FinancingBucket",
    "OperationType",
    "classify_financing",
    "classify_operation_type",
    "resolve_financing_nature",
    "RatioKind",
    "UnitRatios",
    "compute_unit_ratios",
    "safe_divide",
]
