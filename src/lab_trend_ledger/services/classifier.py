"""
Range classification and chart domain computation.

Pure functions without hidden state; results depend only on their arguments.
"""

import math
from collections.abc import Iterable
from typing import NamedTuple

from lab_trend_ledger.domain.measurement import Measurement, RangeStatus
from lab_trend_ledger.domain.parameter import NormalRange
from lab_trend_ledger.utils.exceptions import ValidationError

DEFAULT_PADDING_FACTOR = 0.2

# absolute padding used when the domain has zero width
DEGENERATE_PADDING = 0.5


class ChartDomain(NamedTuple):
    """Numeric bounds of a chart's value axis."""

    low: float
    high: float


def classify(value: float, normal_range: NormalRange) -> RangeStatus:
    """Classify a value against an inclusive normal range."""
    if normal_range.min <= value <= normal_range.max:
        return RangeStatus.IN_RANGE
    return RangeStatus.OUT_OF_RANGE


def is_in_range(value: float, normal_range: NormalRange) -> bool:
    """Check whether a value lies within an inclusive normal range."""
    return classify(value, normal_range) is RangeStatus.IN_RANGE


def chart_domain(
    series: Iterable[Measurement | float],
    normal_range: NormalRange,
    padding_factor: float = DEFAULT_PADDING_FACTOR,
) -> ChartDomain:
    """
    Compute the padded value-axis domain for a series and its normal range.

    The domain always covers the normal range and every value, widened on
    both sides by padding_factor times its width.

    Args:
        series: Measurements or raw values; may be empty.
        normal_range: Range drawn as reference lines on the chart.
        padding_factor: Fraction of the width added on each side.

    Returns:
        Finite (low, high) bounds.

    Raises:
        ValidationError: If a value or the padding factor is not finite,
            or the padding factor is negative.
    """
    if not math.isfinite(padding_factor) or padding_factor < 0:
        raise ValidationError("padding_factor", "Padding factor must be a finite non-negative number")

    values = [item.value if isinstance(item, Measurement) else float(item) for item in series]
    if not all(math.isfinite(v) for v in values):
        raise ValidationError("series", "Series values must be finite")

    low = min(values + [normal_range.min])
    high = max(values + [normal_range.max])

    if high == low:
        padding = DEGENERATE_PADDING
    else:
        padding = (high - low) * padding_factor

    domain = ChartDomain(low=low - padding, high=high + padding)
    if not (math.isfinite(domain.low) and math.isfinite(domain.high)):
        # padding overflowed the float range
        return ChartDomain(low=low, high=high)
    return domain
