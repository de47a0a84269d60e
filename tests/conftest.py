"""Shared fixtures for lab trend ledger tests."""

from datetime import datetime

import pytest
import pytz

from lab_trend_ledger.domain.defaults import DEFAULT_PARAMETERS
from lab_trend_ledger.services.registry import ParameterRegistry
from lab_trend_ledger.services.store import MeasurementStore

T0 = datetime(2024, 6, 15, 12, 0, 0, tzinfo=pytz.UTC)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def registry(clock: FixedClock) -> ParameterRegistry:
    return ParameterRegistry(DEFAULT_PARAMETERS, clock=clock)


@pytest.fixture
def store(registry: ParameterRegistry, clock: FixedClock) -> MeasurementStore:
    measurement_store = MeasurementStore(registry, clock=clock)
    for parameter in registry.list_parameters():
        measurement_store.ensure_series(parameter.id)
    return measurement_store
