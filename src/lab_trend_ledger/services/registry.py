"""
Parameter registry.

Owns the set of tracked parameter definitions, validates custom parameter
drafts and generates unique ids for them.
"""

import logging
import math
from collections.abc import Iterable

from lab_trend_ledger.domain.defaults import PRESET_COLORS
from lab_trend_ledger.domain.parameter import NormalRange, Parameter, ParameterDraft
from lab_trend_ledger.utils.exceptions import NotFound, ValidationError
from lab_trend_ledger.utils.timezone_utils import Clock, utc_now

logger = logging.getLogger(__name__)

CUSTOM_ID_PREFIX = "custom_"


def parse_number(raw: float | str | None) -> float | None:
    """
    Parse a numeric form value.

    Returns:
        The finite float value, or None if raw is missing or not a finite number.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, str):
        raw = raw.strip().replace(",", ".")
        if not raw:
            return None

    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None

    return number if math.isfinite(number) else None


class ParameterRegistry:
    """
    Registry of lab parameters in insertion order.

    Parameters are never mutated or removed through the public interface.
    """

    def __init__(self, parameters: Iterable[Parameter] = (), clock: Clock = utc_now) -> None:
        """
        Initialize the registry.

        Args:
            parameters: Initial parameters (built-ins or restored from a snapshot).
            clock: Source of the current instant, used for id generation.

        Raises:
            ValidationError: If two initial parameters share an id.
        """
        self._clock = clock
        self._parameters: dict[str, Parameter] = {}
        self._last_generated_ms = 0

        for parameter in parameters:
            self._register(parameter)

    def __len__(self) -> int:
        return len(self._parameters)

    def __contains__(self, parameter_id: object) -> bool:
        return parameter_id in self._parameters

    def list_parameters(self) -> list[Parameter]:
        """Return all parameters in insertion order."""
        return list(self._parameters.values())

    def has_parameter(self, parameter_id: str) -> bool:
        """Check whether a parameter id is registered."""
        return parameter_id in self._parameters

    def get_parameter(self, parameter_id: str) -> Parameter:
        """
        Look up a parameter by id.

        Raises:
            NotFound: If no parameter has that id.
        """
        try:
            return self._parameters[parameter_id]
        except KeyError:
            raise NotFound(parameter_id) from None

    def add_parameter(self, draft: ParameterDraft) -> Parameter:
        """
        Validate a draft and register it as a new custom parameter.

        Args:
            draft: Unvalidated user input.

        Returns:
            The created parameter with a freshly generated id.

        Raises:
            ValidationError: If any field is invalid. The registry is left unchanged.
        """
        name = (draft.name or "").strip()
        if not name:
            raise ValidationError("name", "Enter the parameter name")

        unit = (draft.unit or "").strip()
        if not unit:
            raise ValidationError("unit", "Enter the unit of measurement")

        low = parse_number(draft.min)
        if low is None or low < 0:
            raise ValidationError("min", "Enter a valid minimum value")

        high = parse_number(draft.max)
        if high is None or high <= low:
            raise ValidationError("max", "Maximum value must be greater than minimum")

        parameter = Parameter(
            id=self._generate_id(),
            name=name,
            unit=unit,
            normal_range=NormalRange(min=low, max=high),
            color=draft.color or PRESET_COLORS[0],
        )
        self._register(parameter)

        logger.info(f"Added parameter {parameter.id} ({parameter.name}, {parameter.unit})")
        return parameter

    def _generate_id(self) -> str:
        millis = int(self._clock().timestamp() * 1000)
        # strictly increasing even when called twice within one millisecond
        millis = max(millis, self._last_generated_ms + 1)
        while f"{CUSTOM_ID_PREFIX}{millis}" in self._parameters:
            millis += 1

        self._last_generated_ms = millis
        return f"{CUSTOM_ID_PREFIX}{millis}"

    def _register(self, parameter: Parameter) -> None:
        if parameter.id in self._parameters:
            raise ValidationError("id", f"Duplicate parameter id: {parameter.id}")
        self._parameters[parameter.id] = parameter

    def _discard(self, parameter_id: str) -> None:
        """Drop a parameter whose addition could not be persisted."""
        self._parameters.pop(parameter_id, None)
