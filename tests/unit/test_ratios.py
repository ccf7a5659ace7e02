"""Unit tests for the ratio calculator."""

import math
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.domain.calculator.ratios import (
    RatioKind,
    apply_ratio,
    compute_unit_ratios,
    ratio_breakdown,
    safe_divide,
)


class TestSafeDivide:
    def test_regular(self):
        assert safe_divide(10, 4) == 2.5
        assert safe_divide(Decimal("9"), 3) == 3.0

    def test_zero_denominator(self):
        assert safe_divide(1000, 0) == 0.0
        assert safe_divide(1000, 0.0) == 0.0
        assert safe_divide(0, 0) == 0.0

    @given(st.floats(allow_nan=False, allow_infinity=False, min_value=-1e12, max_value=1e12))
    def test_never_nan_or_infinite(self, numerator):
        result = safe_divide(numerator, 0)
        assert result == 0.0
        assert not math.isnan(result) and not math.isinf(result)


class TestUnitRatios:
    def test_regular(self):
        ratios = compute_unit_ratios(1_000_000, 10, 500)
        assert ratios.total == 1_000_000
        assert ratios.cost_per_unit == 100_000
        assert ratios.cost_per_m2 == 2_000
        assert ratios.surface_per_unit == 50

    def test_no_dwellings(self):
        """N = 0: per-dwelling and surface ratios are 0, per-m² still computed."""
        ratios = compute_unit_ratios(1_000_000, 0, 500)
        assert ratios.cost_per_unit == 0.0
        assert ratios.surface_per_unit == 0.0
        assert ratios.cost_per_m2 == 2_000

    def test_no_surface(self):
        ratios = compute_unit_ratios(1_000_000, 10, 0)
        assert ratios.cost_per_m2 == 0.0
        assert ratios.cost_per_unit == 100_000


class TestBreakdown:
    def test_apply_ratio(self):
        assert apply_ratio(1000, RatioKind.TOTAL, 10, 100) == 1000
        assert apply_ratio(1000, RatioKind.PER_UNIT, 10, 100) == 100
        assert apply_ratio(1000, RatioKind.PER_M2, 10, 100) == 10
        assert apply_ratio(1000, RatioKind.SURFACE, 10, 100) == 0

    def test_per_unit_breakdown(self):
        details, value = ratio_breakdown({"a": 300, "b": 700}, 1000, RatioKind.PER_UNIT, 4, 200)
        assert details == {"a": 75.0, "b": 175.0}
        assert value == 250.0

    def test_surface_breakdown(self):
        details, value = ratio_breakdown({"a": 300}, 300, RatioKind.SURFACE, 4, 200)
        assert details == {"a": 0.0}
        assert value == pytest.approx(50.0)

    def test_surface_breakdown_without_dwellings(self):
        _, value = ratio_breakdown({"a": 300}, 300, RatioKind.SURFACE, 0, 200)
        assert value == 0.0
