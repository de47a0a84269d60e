"""
Measurement store.

Owns one chronologically ordered series of measurements per registered
parameter and provides windowed and most-recent views of each series.
"""

import logging
from datetime import datetime

from lab_trend_ledger.domain.measurement import Measurement, WindowPolicy
from lab_trend_ledger.services.registry import ParameterRegistry, parse_number
from lab_trend_ledger.utils.exceptions import UnknownParameter, ValidationError
from lab_trend_ledger.utils.timezone_utils import (
    Clock,
    format_display_date,
    make_timezone_aware,
    months_before,
    utc_now,
)

logger = logging.getLogger(__name__)


def _by_timestamp(measurement: Measurement) -> datetime:
    return measurement.timestamp


class MeasurementStore:
    """
    Per-parameter measurement series.

    Every series is kept non-decreasing by timestamp. Measurements sharing a
    timestamp stay in insertion order, since list.sort is stable.
    """

    def __init__(
        self,
        registry: ParameterRegistry,
        clock: Clock = utc_now,
        timezone: str = "UTC",
        display_date_format: str = "%b %y",
    ) -> None:
        """
        Initialize the store.

        Args:
            registry: Registry used to check that parameter ids exist.
            clock: Source of the current instant.
            timezone: Timezone for naive timestamps and display dates.
            display_date_format: strftime format of the cached display date.
        """
        self.registry = registry
        self.timezone = timezone
        self.display_date_format = display_date_format
        self._clock = clock
        self._series: dict[str, list[Measurement]] = {}

    def _require(self, parameter_id: str) -> None:
        if not self.registry.has_parameter(parameter_id):
            raise UnknownParameter(parameter_id)

    def format_date(self, timestamp: datetime) -> str:
        """Render the display date for a timestamp."""
        return format_display_date(timestamp, self.display_date_format, self.timezone)

    def ensure_series(self, parameter_id: str) -> None:
        """
        Create an empty series for a registered parameter if it has none.

        Raises:
            UnknownParameter: If the parameter is not registered.
        """
        self._require(parameter_id)
        self._series.setdefault(parameter_id, [])

    def series_ids(self) -> list[str]:
        """Return ids of all parameters that own a series."""
        return list(self._series)

    def get_series(self, parameter_id: str) -> list[Measurement]:
        """
        Return the full series for a parameter in chronological order.

        Raises:
            UnknownParameter: If the parameter is not registered.
        """
        self._require(parameter_id)
        return list(self._series.get(parameter_id, []))

    def insert(self, parameter_id: str, value: float | str, timestamp: datetime) -> Measurement:
        """
        Record a new measurement.

        Args:
            parameter_id: Registered parameter id.
            value: Reading; must be finite and strictly positive.
            timestamp: When the sample was taken; naive values are read in
                the configured timezone.

        Returns:
            The created measurement.

        Raises:
            UnknownParameter: If the parameter is not registered.
            ValidationError: If the value or timestamp is invalid.
        """
        self._require(parameter_id)

        number = parse_number(value)
        if number is None or number <= 0:
            raise ValidationError("value", "Enter a valid positive value")

        if not isinstance(timestamp, datetime):
            raise ValidationError("timestamp", "Select a date")

        if timestamp.tzinfo is None:
            timestamp = make_timezone_aware(timestamp, self.timezone, assume_local=True)

        if timestamp > self._clock():
            raise ValidationError("timestamp", "Date cannot be in the future")

        measurement = Measurement(
            parameter_id=parameter_id,
            value=number,
            timestamp=timestamp,
            display_date=self.format_date(timestamp),
        )

        series = self._series.setdefault(parameter_id, [])
        series.append(measurement)
        series.sort(key=_by_timestamp)

        logger.info(f"Recorded {parameter_id}={number} at {timestamp.isoformat()}")
        return measurement

    def windowed(self, parameter_id: str, policy: WindowPolicy | str) -> list[Measurement]:
        """
        Return the part of a series that falls within a time window.

        Args:
            parameter_id: Registered parameter id.
            policy: Window measured back from now.

        Raises:
            UnknownParameter: If the parameter is not registered.
            ValidationError: If the policy is not a known window.
        """
        try:
            policy = WindowPolicy(policy)
        except ValueError:
            raise ValidationError("policy", f"Unknown window: {policy}") from None

        series = self.get_series(parameter_id)
        if policy.months is None:
            return series

        cutoff = months_before(self._clock(), policy.months)
        return [m for m in series if m.timestamp >= cutoff]

    def latest(self, parameter_id: str, n: int) -> list[Measurement]:
        """
        Return the n most recent measurements, oldest first.

        Raises:
            UnknownParameter: If the parameter is not registered.
            ValidationError: If n is negative.
        """
        if n < 0:
            raise ValidationError("n", "Count must not be negative")

        series = self.get_series(parameter_id)
        return series[-n:] if n else []

    def _restore(self, parameter_id: str, measurements: list[Measurement]) -> None:
        """Load a decoded series, re-establishing chronological order."""
        self._require(parameter_id)
        self._series[parameter_id] = sorted(measurements, key=_by_timestamp)

    def _remove(self, measurement: Measurement) -> None:
        """Drop a measurement whose insertion could not be persisted."""
        series = self._series.get(measurement.parameter_id, [])
        for index, existing in enumerate(series):
            if existing is measurement:
                del series[index]
                return

    def _drop_series(self, parameter_id: str) -> None:
        self._series.pop(parameter_id, None)
