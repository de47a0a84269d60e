"""
Lab parameter domain models.

This module defines tracked lab metric definitions, their normal ranges
and the unvalidated draft submitted when a user creates a custom parameter.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NormalRange(BaseModel):
    """Inclusive [min, max] interval considered healthy for a parameter."""

    min: float = Field(ge=0, allow_inf_nan=False, description="Lower bound (inclusive)")
    max: float = Field(allow_inf_nan=False, description="Upper bound (inclusive)")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "NormalRange":
        if self.max <= self.min:
            raise ValueError("max must be greater than min")
        return self


class Parameter(BaseModel):
    """
    Definition of one trackable lab metric.

    Parameters are immutable once registered. The color token is opaque
    to the core and only passed through to presentation.
    """

    id: str = Field(min_length=1, description="Stable unique identifier")
    name: str = Field(min_length=1, description="Display label")
    unit: str = Field(min_length=1, description="Display unit")
    normal_range: NormalRange = Field(description="Normal reference range")
    color: str = Field(description="Display color token")

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert parameter to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class ParameterDraft(BaseModel):
    """
    User input for a new custom parameter, before validation.

    Range bounds may arrive as numbers or as raw form strings.
    """

    name: str = ""
    unit: str = ""
    min: float | str | None = None
    max: float | str | None = None
    color: str | None = None
