"""Sample readings for a fresh ledger, one per month around mid-range."""

import random
from datetime import datetime

from lab_trend_ledger.domain.measurement import Measurement
from lab_trend_ledger.domain.parameter import Parameter
from lab_trend_ledger.services.store import MeasurementStore
from lab_trend_ledger.utils.timezone_utils import months_before


def generate_demo_series(
    parameter: Parameter,
    months: int,
    now: datetime,
    rng: random.Random | None = None,
) -> list[tuple[datetime, float]]:
    """
    Generate monthly (timestamp, value) pairs ending at now.

    Values vary by up to 30% of the normal range width around its middle,
    rounded to one decimal, so they always stay positive.
    """
    rng = rng or random.Random()
    low, high = parameter.normal_range.min, parameter.normal_range.max
    width = high - low
    base = low + width / 2

    readings = []
    for i in range(months):
        timestamp = months_before(now, months - 1 - i)
        variation = (rng.random() - 0.5) * width * 0.6
        value = round(base + variation, 1)
        if value <= 0:
            value = base + variation
        readings.append((timestamp, value))
    return readings


def seed_demo_data(
    store: MeasurementStore,
    parameters: list[Parameter],
    now: datetime,
    months: int = 12,
    seed: int | None = None,
) -> list[Measurement]:
    """
    Insert demo readings for each parameter.

    Returns:
        The inserted measurements.
    """
    rng = random.Random(seed)
    inserted = []
    for parameter in parameters:
        for timestamp, value in generate_demo_series(parameter, months, now, rng):
            inserted.append(store.insert(parameter.id, value, timestamp))
    return inserted
