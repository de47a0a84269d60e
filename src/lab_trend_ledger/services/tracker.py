"""
Tracker session.

Owns one parameter registry and one measurement store for a single user,
loads them from key-value storage and rewrites the full snapshot after
every successful mutation.
"""

import logging
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from lab_trend_ledger.domain.defaults import DEFAULT_PARAMETERS
from lab_trend_ledger.domain.measurement import Measurement, RangeStatus, WindowPolicy
from lab_trend_ledger.domain.parameter import Parameter, ParameterDraft
from lab_trend_ledger.infrastructure.storage.key_value import KeyValueStore
from lab_trend_ledger.services.chart import ChartView, build_chart_view
from lab_trend_ledger.services.classifier import ChartDomain, chart_domain, classify
from lab_trend_ledger.services.demo import seed_demo_data
from lab_trend_ledger.services.registry import ParameterRegistry
from lab_trend_ledger.services.snapshot import SnapshotCodec
from lab_trend_ledger.services.store import MeasurementStore
from lab_trend_ledger.utils.exceptions import (
    CorruptSnapshot,
    LabTrendLedgerError,
    StorageError,
    ValidationError,
)
from lab_trend_ledger.utils.parameters import StorageConfig, TrackerConfig
from lab_trend_ledger.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class LabTracker:
    """
    Session facade over registry, store and persistence.

    All mutations go through add_parameter and insert, which validate,
    apply the change in memory and persist both snapshot keys. If the
    write fails the in-memory change is rolled back before re-raising.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        config: TrackerConfig | None = None,
        storage_config: StorageConfig | None = None,
        clock: Clock = utc_now,
    ) -> None:
        """
        Open a tracker session.

        Args:
            storage: Key-value backend holding the snapshot blobs.
            config: Tracking configuration.
            storage_config: Storage configuration (for the key names).
            clock: Source of the current instant.

        Raises:
            StorageError: If the backend cannot be read.
        """
        self.storage = storage
        self.config = config or TrackerConfig()
        self.storage_config = storage_config or StorageConfig()
        self.clock = clock
        self.codec = SnapshotCodec(
            clock=clock,
            timezone=self.config.timezone,
            display_date_format=self.config.display_date_format,
        )
        self.load_error: CorruptSnapshot | None = None
        self.registry: ParameterRegistry
        self.store: MeasurementStore
        self._load()

    @property
    def parameters_key(self) -> str:
        return self.storage_config.parameters_key

    @property
    def measurements_key(self) -> str:
        return self.storage_config.measurements_key

    def _load(self) -> None:
        parameters_blob = self.storage.get(self.parameters_key)
        measurements_blob = self.storage.get(self.measurements_key)

        if parameters_blob is None and measurements_blob is None:
            logger.info("No snapshot found, seeding default parameters")
            self._reset_to_defaults()
            self._persist()
            return

        try:
            if parameters_blob is None:
                # only series were ever saved; they belong to the built-ins
                self.registry = self.codec.new_registry(list(DEFAULT_PARAMETERS))
                self.store = self.codec.decode_measurements(measurements_blob, self.registry)
            else:
                self.registry, self.store = self.codec.decode(parameters_blob, measurements_blob)
        except CorruptSnapshot as e:
            logger.error(f"Snapshot is corrupt, falling back to defaults: {e}")
            self.load_error = e
            self._reset_to_defaults()
            return

        logger.info(
            f"Loaded snapshot with {len(self.registry)} parameters "
            f"and {self.measurement_count()} measurements"
        )

    def _reset_to_defaults(self) -> None:
        self.registry = self.codec.new_registry(list(DEFAULT_PARAMETERS))
        self.store = self.codec.new_store(self.registry)
        for parameter in self.registry.list_parameters():
            self.store.ensure_series(parameter.id)

    def _persist(self) -> None:
        parameters_blob = self.codec.encode_parameters(self.registry)
        measurements_blob = self.codec.encode_measurements(self.store)
        previous_parameters = self.storage.get(self.parameters_key)

        self.storage.set(self.parameters_key, parameters_blob)
        try:
            self.storage.set(self.measurements_key, measurements_blob)
        except StorageError:
            if previous_parameters is not None and previous_parameters != parameters_blob:
                self._restore_parameters_blob(previous_parameters)
            raise

    def _restore_parameters_blob(self, blob: bytes) -> None:
        try:
            self.storage.set(self.parameters_key, blob)
        except StorageError as e:
            logger.error(f"Could not restore previous parameters snapshot: {e}")

    def measurement_count(self) -> int:
        """Total number of measurements across all series."""
        return sum(len(self.store.get_series(pid)) for pid in self.store.series_ids())

    def list_parameters(self) -> list[Parameter]:
        """Return all parameters in insertion order."""
        return self.registry.list_parameters()

    def get_parameter(self, parameter_id: str) -> Parameter:
        """Look up a parameter, raising NotFound if it is not registered."""
        return self.registry.get_parameter(parameter_id)

    def add_parameter(self, draft: ParameterDraft | dict) -> Parameter:
        """
        Register a custom parameter with an empty series and persist.

        Raises:
            ValidationError: If the draft is invalid.
            StorageError: If the snapshot cannot be written; nothing is added.
        """
        if not isinstance(draft, ParameterDraft):
            try:
                draft = ParameterDraft.model_validate(draft)
            except PydanticValidationError as e:
                error = e.errors()[0]
                field = str(error["loc"][0]) if error["loc"] else "draft"
                raise ValidationError(field, error["msg"]) from e

        parameter = self.registry.add_parameter(draft)
        try:
            self.store.ensure_series(parameter.id)
            self._persist()
        except LabTrendLedgerError:
            self.store._drop_series(parameter.id)
            self.registry._discard(parameter.id)
            raise
        return parameter

    def insert(self, parameter_id: str, value: float | str, timestamp: datetime) -> Measurement:
        """
        Record a measurement and persist.

        Raises:
            UnknownParameter: If the parameter is not registered.
            ValidationError: If the value or timestamp is invalid.
            StorageError: If the snapshot cannot be written; nothing is recorded.
        """
        measurement = self.store.insert(parameter_id, value, timestamp)
        try:
            self._persist()
        except LabTrendLedgerError:
            self.store._remove(measurement)
            raise
        return measurement

    def seed_demo(self, months: int = 12, seed: int | None = None) -> int:
        """
        Fill every parameter with monthly sample readings and persist.

        Returns:
            Number of measurements added.
        """
        inserted = seed_demo_data(
            self.store, self.registry.list_parameters(), self.clock(), months, seed
        )
        try:
            self._persist()
        except LabTrendLedgerError:
            for measurement in inserted:
                self.store._remove(measurement)
            raise

        logger.info(f"Seeded {len(inserted)} demo measurements")
        return len(inserted)

    def get_series(self, parameter_id: str) -> list[Measurement]:
        """Return the full chronological series of a parameter."""
        return self.store.get_series(parameter_id)

    def windowed(self, parameter_id: str, policy: WindowPolicy | str) -> list[Measurement]:
        """Return the series restricted to a time window."""
        return self.store.windowed(parameter_id, policy)

    def latest(self, parameter_id: str, n: int) -> list[Measurement]:
        """Return the n most recent measurements, oldest first."""
        return self.store.latest(parameter_id, n)

    def recent_results(
        self, parameter_id: str, n: int | None = None
    ) -> list[tuple[Measurement, RangeStatus]]:
        """Return the most recent measurements newest first, each with its status."""
        if n is None:
            n = self.config.recent_results_count
        parameter = self.get_parameter(parameter_id)
        return [
            (m, classify(m.value, parameter.normal_range))
            for m in reversed(self.latest(parameter_id, n))
        ]

    def classify(self, value: float, parameter_id: str) -> RangeStatus:
        """Classify a value against a parameter's normal range."""
        return classify(value, self.get_parameter(parameter_id).normal_range)

    def chart_domain(
        self, parameter_id: str, policy: WindowPolicy | str = WindowPolicy.ALL
    ) -> ChartDomain:
        """Compute the chart axis domain for a parameter's windowed series."""
        parameter = self.get_parameter(parameter_id)
        return chart_domain(
            self.windowed(parameter_id, policy),
            parameter.normal_range,
            self.config.chart_padding_factor,
        )

    def chart_view(
        self, parameter_id: str, policy: WindowPolicy | str | None = None
    ) -> ChartView:
        """Build the chart view for a parameter, defaulting to the configured window."""
        policy = policy or self.config.default_window
        series = self.windowed(parameter_id, policy)
        return build_chart_view(
            self.get_parameter(parameter_id),
            series,
            WindowPolicy(policy),
            self.config.chart_padding_factor,
        )
