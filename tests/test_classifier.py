"""Unit tests for range classification and chart domain computation."""

import math

import pytest

from lab_trend_ledger.domain.measurement import RangeStatus
from lab_trend_ledger.domain.parameter import NormalRange
from lab_trend_ledger.services.classifier import (
    DEGENERATE_PADDING,
    chart_domain,
    classify,
    is_in_range,
)
from lab_trend_ledger.utils.exceptions import ValidationError

HEMOGLOBIN_RANGE = NormalRange(min=120, max=160)


def test_classify_bounds_are_inclusive() -> None:
    """Test both range ends count as in range and just outside does not."""
    eps = 1e-9
    cases = {
        120: RangeStatus.IN_RANGE,
        160: RangeStatus.IN_RANGE,
        140: RangeStatus.IN_RANGE,
        120 - eps: RangeStatus.OUT_OF_RANGE,
        160 + eps: RangeStatus.OUT_OF_RANGE,
    }
    for value, expected in cases.items():
        result = classify(value, HEMOGLOBIN_RANGE)
        if result is not expected:
            raise AssertionError(f"classify({value}) = {result}, expected {expected}")


def test_classify_nan_is_out_of_range() -> None:
    """Test that NaN never counts as normal."""
    if classify(float("nan"), HEMOGLOBIN_RANGE) is not RangeStatus.OUT_OF_RANGE:
        raise AssertionError("NaN should be out of range")

    if is_in_range(float("nan"), HEMOGLOBIN_RANGE):
        raise AssertionError("NaN should be out of range")


def test_chart_domain_example() -> None:
    """Test domain for values below the range."""
    domain = chart_domain([100, 150], HEMOGLOBIN_RANGE)

    if domain.low != pytest.approx(88) or domain.high != pytest.approx(172):
        raise AssertionError(f"Expected (88, 172), got {domain}")


def test_chart_domain_empty_series_uses_range() -> None:
    """Test domain of an empty series."""
    domain = chart_domain([], HEMOGLOBIN_RANGE)

    if domain.low != pytest.approx(112) or domain.high != pytest.approx(168):
        raise AssertionError(f"Expected (112, 168), got {domain}")


def test_chart_domain_custom_padding() -> None:
    """Test that the padding factor scales with the domain width."""
    domain = chart_domain([200], HEMOGLOBIN_RANGE, padding_factor=0)

    if tuple(domain) != (120, 200):
        raise AssertionError(f"Expected (120, 200), got {domain}")


def test_chart_domain_degenerate_width_uses_fixed_padding() -> None:
    """Test a zero-width domain is padded by an absolute amount."""
    degenerate = NormalRange.model_construct(min=5.0, max=5.0)

    domain = chart_domain([5.0], degenerate)

    if tuple(domain) != (5.0 - DEGENERATE_PADDING, 5.0 + DEGENERATE_PADDING):
        raise AssertionError(f"Unexpected degenerate domain {domain}")

    if not all(math.isfinite(bound) for bound in domain):
        raise AssertionError("Domain bounds must be finite")


def test_chart_domain_stays_finite_near_float_max() -> None:
    """Test that padding a huge value cannot overflow the bounds to infinity."""
    domain = chart_domain([1.5e308], NormalRange(min=0, max=1))

    if not all(math.isfinite(bound) for bound in domain):
        raise AssertionError(f"Domain bounds must be finite, got {domain}")

    if not (domain.low <= 0 and 1.5e308 <= domain.high):
        raise AssertionError(f"Domain {domain} does not enclose the values")


@pytest.mark.parametrize(
    "series, factor",
    [([float("inf")], 0.2), ([float("nan")], 0.2), ([100], -0.1), ([100], float("nan"))],
)
def test_chart_domain_rejects_non_finite_input(series, factor) -> None:
    """Test that non-finite inputs cannot produce NaN or infinite bounds."""
    with pytest.raises(ValidationError):
        chart_domain(series, HEMOGLOBIN_RANGE, padding_factor=factor)
