"""
Snapshot codec.

Encodes the parameter registry and measurement store to deterministic JSON
blobs and decodes them back, rejecting anything that does not match the
expected structure.
"""

import json
import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from lab_trend_ledger.domain.measurement import Measurement
from lab_trend_ledger.domain.parameter import Parameter
from lab_trend_ledger.services.registry import ParameterRegistry
from lab_trend_ledger.services.store import MeasurementStore
from lab_trend_ledger.utils.exceptions import CorruptSnapshot, NotFound, ValidationError
from lab_trend_ledger.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _dump(data: Any) -> bytes:
    return json.dumps(
        data, sort_keys=True, ensure_ascii=False, separators=(",", ":")
    ).encode("utf-8")


def _load(blob: bytes, what: str) -> Any:
    try:
        return json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptSnapshot(f"{what} snapshot is not valid JSON: {e}") from e


class SnapshotCodec:
    """
    Serializer for registry and store state.

    State is either encoded as one combined document or as two blobs, one
    per logical storage key. Both layouts share the same entry format.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        timezone: str = "UTC",
        display_date_format: str = "%b %y",
    ) -> None:
        """
        Initialize the codec.

        Args:
            clock: Clock handed to decoded registries and stores.
            timezone: Timezone of decoded stores.
            display_date_format: Display date format of decoded stores.
        """
        self.clock = clock
        self.timezone = timezone
        self.display_date_format = display_date_format

    def new_registry(self, parameters: list[Parameter]) -> ParameterRegistry:
        """Create a registry bound to this codec's clock."""
        return ParameterRegistry(parameters, clock=self.clock)

    def new_store(self, registry: ParameterRegistry) -> MeasurementStore:
        """Create an empty store bound to this codec's clock and formatting."""
        return MeasurementStore(
            registry,
            clock=self.clock,
            timezone=self.timezone,
            display_date_format=self.display_date_format,
        )

    def _parameters_data(self, registry: ParameterRegistry) -> list[dict[str, Any]]:
        return [p.to_dict() for p in registry.list_parameters()]

    def _measurements_data(self, store: MeasurementStore) -> dict[str, list[dict[str, Any]]]:
        return {
            parameter_id: [
                {
                    "value": m.value,
                    "timestamp": m.timestamp.isoformat(),
                    "date": m.display_date,
                }
                for m in store.get_series(parameter_id)
            ]
            for parameter_id in store.series_ids()
        }

    def encode_parameters(self, registry: ParameterRegistry) -> bytes:
        """Encode the parameter list."""
        return _dump(self._parameters_data(registry))

    def encode_measurements(self, store: MeasurementStore) -> bytes:
        """Encode all series keyed by parameter id."""
        return _dump(self._measurements_data(store))

    def serialize(self, registry: ParameterRegistry, store: MeasurementStore) -> bytes:
        """Encode registry and store as a single versioned document."""
        return _dump(
            {
                "version": SNAPSHOT_VERSION,
                "parameters": self._parameters_data(registry),
                "measurements": self._measurements_data(store),
            }
        )

    def deserialize(self, blob: bytes) -> tuple[ParameterRegistry, MeasurementStore]:
        """
        Decode a document produced by serialize.

        Raises:
            CorruptSnapshot: If the blob does not match the expected structure.
        """
        document = _load(blob, "Combined")
        if not isinstance(document, dict):
            raise CorruptSnapshot("Snapshot root must be an object")

        version = document.get("version")
        if version != SNAPSHOT_VERSION:
            raise CorruptSnapshot(f"Unsupported snapshot version: {version!r}")

        for key in ("parameters", "measurements"):
            if key not in document:
                raise CorruptSnapshot(f"Snapshot is missing '{key}'")

        registry = self._build_registry(document["parameters"])
        store = self._build_store(document["measurements"], registry)
        return registry, store

    def decode(
        self, parameters_blob: bytes, measurements_blob: bytes | None
    ) -> tuple[ParameterRegistry, MeasurementStore]:
        """
        Decode the two-key layout.

        A missing measurements blob yields empty series.

        Raises:
            CorruptSnapshot: If either blob does not match the expected structure.
        """
        registry = self._build_registry(_load(parameters_blob, "Parameters"))
        if measurements_blob is None:
            store = self._build_store({}, registry)
        else:
            store = self._build_store(_load(measurements_blob, "Measurements"), registry)
        return registry, store

    def decode_measurements(
        self, measurements_blob: bytes, registry: ParameterRegistry
    ) -> MeasurementStore:
        """
        Decode series against an already known registry.

        Raises:
            CorruptSnapshot: If the blob does not match the expected structure.
        """
        return self._build_store(_load(measurements_blob, "Measurements"), registry)

    def _build_registry(self, data: Any) -> ParameterRegistry:
        if not isinstance(data, list):
            raise CorruptSnapshot("Parameters must be a list")

        try:
            parameters = [Parameter.model_validate(item, strict=True) for item in data]
            return self.new_registry(parameters)
        except PydanticValidationError as e:
            raise CorruptSnapshot(f"Invalid parameter entry: {e}") from e
        except ValidationError as e:
            raise CorruptSnapshot(str(e)) from e

    def _build_store(self, data: Any, registry: ParameterRegistry) -> MeasurementStore:
        if not isinstance(data, dict):
            raise CorruptSnapshot("Measurements must be an object keyed by parameter id")

        store = self.new_store(registry)
        for parameter in registry.list_parameters():
            store.ensure_series(parameter.id)

        for parameter_id, entries in data.items():
            if not isinstance(entries, list):
                raise CorruptSnapshot(f"Series for {parameter_id} must be a list")

            try:
                measurements = [self._measurement(parameter_id, entry, store) for entry in entries]
                store._restore(parameter_id, measurements)
            except NotFound as e:
                raise CorruptSnapshot(f"Series references unknown parameter: {parameter_id}") from e

        logger.debug(
            f"Decoded {len(registry)} parameters and "
            f"{sum(len(store.get_series(pid)) for pid in store.series_ids())} measurements"
        )
        return store

    def _measurement(
        self, parameter_id: str, entry: Any, store: MeasurementStore
    ) -> Measurement:
        if not isinstance(entry, dict):
            raise CorruptSnapshot(f"Measurement entry for {parameter_id} must be an object")

        for key in ("value", "timestamp"):
            if key not in entry:
                raise CorruptSnapshot(f"Measurement entry for {parameter_id} is missing '{key}'")

        if isinstance(entry["value"], bool) or not isinstance(entry["value"], (int, float)):
            raise CorruptSnapshot(f"Measurement value for {parameter_id} must be a number")

        timestamp = entry["timestamp"]
        if not isinstance(timestamp, str):
            raise CorruptSnapshot(f"Measurement timestamp for {parameter_id} must be an ISO-8601 string")
        try:
            parsed_timestamp = datetime.fromisoformat(timestamp)
        except ValueError as e:
            raise CorruptSnapshot(f"Invalid timestamp for {parameter_id}: {timestamp!r}") from e

        try:
            measurement = Measurement.model_validate(
                {
                    "parameter_id": parameter_id,
                    "value": entry["value"],
                    "timestamp": parsed_timestamp,
                    "display_date": entry.get("date") or "",
                },
                strict=True,
            )
        except PydanticValidationError as e:
            raise CorruptSnapshot(f"Invalid measurement for {parameter_id}: {e}") from e

        if not measurement.display_date:
            measurement = measurement.model_copy(
                update={"display_date": store.format_date(measurement.timestamp)}
            )
        return measurement
