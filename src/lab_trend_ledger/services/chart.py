"""
Chart view preparation.

Combines a windowed series with classification and axis domain into a
presentation-agnostic structure, with a pandas DataFrame export for
plotting backends.
"""

from dataclasses import dataclass, field

import pandas as pd

from lab_trend_ledger.domain.measurement import Measurement, RangeStatus, WindowPolicy
from lab_trend_ledger.domain.parameter import Parameter
from lab_trend_ledger.services.classifier import (
    DEFAULT_PADDING_FACTOR,
    ChartDomain,
    chart_domain,
    classify,
)

FRAME_COLUMNS = ["date", "value", "timestamp", "status"]


@dataclass(frozen=True)
class ChartPoint:
    """A plotted measurement with its range classification."""

    measurement: Measurement
    status: RangeStatus

    @property
    def in_range(self) -> bool:
        return self.status is RangeStatus.IN_RANGE


@dataclass
class ChartView:
    """
    Everything needed to draw one parameter's trend chart.

    Points are in chronological order. The domain covers every plotted value
    and the normal range, padded on both sides.
    """

    parameter: Parameter
    policy: WindowPolicy
    domain: ChartDomain
    points: list[ChartPoint] = field(default_factory=list)

    @property
    def values(self) -> list[float]:
        return [p.measurement.value for p in self.points]

    @property
    def reference_lines(self) -> tuple[float, float]:
        """Normal range bounds drawn as horizontal reference lines."""
        return self.parameter.normal_range.min, self.parameter.normal_range.max

    @property
    def out_of_range_count(self) -> int:
        return sum(1 for p in self.points if not p.in_range)

    def to_frame(self) -> pd.DataFrame:
        """Return the points as a DataFrame with date, value, timestamp and status columns."""
        rows = [
            {
                "date": p.measurement.display_date,
                "value": p.measurement.value,
                "timestamp": p.measurement.timestamp,
                "status": p.status.value,
            }
            for p in self.points
        ]
        return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def build_chart_view(
    parameter: Parameter,
    series: list[Measurement],
    policy: WindowPolicy = WindowPolicy.ALL,
    padding_factor: float = DEFAULT_PADDING_FACTOR,
) -> ChartView:
    """
    Build the chart view for an already windowed series.

    Args:
        parameter: Parameter being charted.
        series: Measurements to plot, in chronological order.
        policy: Window the series was cut with.
        padding_factor: Axis padding factor passed to chart_domain.

    Returns:
        Chart view with classified points and the axis domain.
    """
    points = [ChartPoint(m, classify(m.value, parameter.normal_range)) for m in series]
    domain = chart_domain(series, parameter.normal_range, padding_factor)
    return ChartView(parameter=parameter, policy=WindowPolicy(policy), domain=domain, points=points)
