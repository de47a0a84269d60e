"""Unit tests for the parameter registry."""

from datetime import timedelta

import pytest

from lab_trend_ledger.domain.defaults import DEFAULT_PARAMETERS, PRESET_COLORS
from lab_trend_ledger.domain.parameter import ParameterDraft
from lab_trend_ledger.services.registry import ParameterRegistry, parse_number
from lab_trend_ledger.utils.exceptions import NotFound, ValidationError


def test_list_parameters_preserves_insertion_order(registry: ParameterRegistry) -> None:
    """Test that built-ins are listed in the order they were registered."""
    ids = [p.id for p in registry.list_parameters()]
    expected = [p.id for p in DEFAULT_PARAMETERS]

    if ids != expected:
        raise AssertionError(f"Expected {expected}, got {ids}")


def test_get_parameter_unknown_raises(registry: ParameterRegistry) -> None:
    """Test lookup of an unregistered id."""
    with pytest.raises(NotFound) as excinfo:
        registry.get_parameter("does-not-exist")

    if excinfo.value.parameter_id != "does-not-exist":
        raise AssertionError(f"Unexpected parameter_id {excinfo.value.parameter_id}")


def test_add_parameter_creates_custom_parameter(registry: ParameterRegistry, clock) -> None:
    """Test that a valid draft is stripped, parsed and registered."""
    parameter = registry.add_parameter(
        ParameterDraft(name="  Ferritin ", unit=" ng/mL ", min="30", max="400")
    )

    expected_id = f"custom_{int(clock.now.timestamp() * 1000)}"
    if parameter.id != expected_id:
        raise AssertionError(f"Expected id {expected_id}, got {parameter.id}")

    if (parameter.name, parameter.unit) != ("Ferritin", "ng/mL"):
        raise AssertionError(f"Unexpected name/unit {parameter.name!r}/{parameter.unit!r}")

    if (parameter.normal_range.min, parameter.normal_range.max) != (30.0, 400.0):
        raise AssertionError(f"Unexpected range {parameter.normal_range}")

    if parameter.color != PRESET_COLORS[0]:
        raise AssertionError(f"Expected default color, got {parameter.color}")

    if registry.list_parameters()[-1] != parameter:
        raise AssertionError("New parameter should be listed last")

    if registry.get_parameter(parameter.id) != parameter:
        raise AssertionError("New parameter should be retrievable")


def test_rapid_additions_get_distinct_increasing_ids(registry: ParameterRegistry, clock) -> None:
    """Test id uniqueness when the clock does not advance or goes backwards."""
    first = registry.add_parameter(ParameterDraft(name="A", unit="u", min=0, max=1))
    second = registry.add_parameter(ParameterDraft(name="B", unit="u", min=0, max=1))

    clock.now = clock.now - timedelta(seconds=10)
    third = registry.add_parameter(ParameterDraft(name="C", unit="u", min=0, max=1))

    millis = [int(p.id.removeprefix("custom_")) for p in (first, second, third)]
    if not millis[0] < millis[1] < millis[2]:
        raise AssertionError(f"Expected strictly increasing ids, got {millis}")


def test_generated_id_skips_existing_custom_id(clock) -> None:
    """Test that a generated id never collides with a restored custom id."""
    existing = ParameterRegistry(clock=clock).add_parameter(
        ParameterDraft(name="Old", unit="u", min=1, max=2)
    )
    registry = ParameterRegistry([existing], clock=clock)

    created = registry.add_parameter(ParameterDraft(name="New", unit="u", min=1, max=2))

    if created.id == existing.id:
        raise AssertionError("Generated id collides with an existing one")


@pytest.mark.parametrize(
    "draft, field",
    [
        (ParameterDraft(name="", unit="x", min=0, max=1), "name"),
        (ParameterDraft(name="   ", unit="x", min=0, max=1), "name"),
        (ParameterDraft(name="X", unit="", min=0, max=1), "unit"),
        (ParameterDraft(name="X", unit="u", min=None, max=1), "min"),
        (ParameterDraft(name="X", unit="u", min="abc", max=1), "min"),
        (ParameterDraft(name="X", unit="u", min=-1, max=1), "min"),
        (ParameterDraft(name="X", unit="u", min=5, max=5), "max"),
        (ParameterDraft(name="X", unit="u", min=5, max=4), "max"),
        (ParameterDraft(name="X", unit="u", min=0, max="inf"), "max"),
    ],
)
def test_add_parameter_rejects_invalid_draft(
    registry: ParameterRegistry, draft: ParameterDraft, field: str
) -> None:
    """Test field-specific validation errors without partial mutation."""
    before = registry.list_parameters()

    with pytest.raises(ValidationError) as excinfo:
        registry.add_parameter(draft)

    if excinfo.value.field != field:
        raise AssertionError(f"Expected error on {field}, got {excinfo.value.field}")

    if registry.list_parameters() != before:
        raise AssertionError("Registry changed after a failed addition")


def test_duplicate_initial_ids_rejected() -> None:
    """Test uniqueness enforcement on construction."""
    with pytest.raises(ValidationError):
        ParameterRegistry([DEFAULT_PARAMETERS[0], DEFAULT_PARAMETERS[0]])


def test_parse_number() -> None:
    """Test numeric form value parsing."""
    cases = {"12.5": 12.5, " 3,3 ": 3.3, 7: 7.0, "": None, None: None, "nan": None, True: None}
    for raw, expected in cases.items():
        result = parse_number(raw)
        if result != expected:
            raise AssertionError(f"parse_number({raw!r}) = {result!r}, expected {expected!r}")
