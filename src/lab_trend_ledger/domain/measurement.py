"""
Measurement domain models.

Defines the recorded lab reading, range classification results and the
time windows offered by the chart range toggle.
"""

from enum import Enum
from typing import Any

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class RangeStatus(str, Enum):
    """Classification of a value against a normal range."""

    IN_RANGE = "in_range"
    OUT_OF_RANGE = "out_of_range"


class WindowPolicy(str, Enum):
    """Time window for chart series, measured back from now."""

    LAST_6_MONTHS = "last-6-months"
    LAST_12_MONTHS = "last-12-months"
    LAST_24_MONTHS = "last-24-months"
    ALL = "all"

    @property
    def months(self) -> int | None:
        """Window length in calendar months, or None for the full series."""
        return _WINDOW_MONTHS[self]


_WINDOW_MONTHS: dict[WindowPolicy, int | None] = {
    WindowPolicy.LAST_6_MONTHS: 6,
    WindowPolicy.LAST_12_MONTHS: 12,
    WindowPolicy.LAST_24_MONTHS: 24,
    WindowPolicy.ALL: None,
}


class Measurement(BaseModel):
    """
    One recorded value for a parameter at a point in time.

    Timestamps are timezone-aware. display_date is a cached rendering of
    the timestamp and can be recomputed at any time.
    """

    parameter_id: str = Field(min_length=1, description="Registered parameter id")
    value: float = Field(gt=0, allow_inf_nan=False, description="Reading value")
    timestamp: AwareDatetime = Field(description="Measurement timestamp (timezone-aware)")
    display_date: str = Field(description="Formatted date label")

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert measurement to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")
