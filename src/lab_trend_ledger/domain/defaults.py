"""Built-in lab parameters and the color palette offered for custom ones."""

from lab_trend_ledger.domain.parameter import NormalRange, Parameter

PRESET_COLORS: tuple[str, ...] = (
    "#3B82F6",  # blue
    "#EF4444",  # red
    "#10B981",  # green
    "#F59E0B",  # amber
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#14B8A6",  # teal
    "#F97316",  # orange
    "#06B6D4",  # cyan
    "#84CC16",  # lime
    "#6366F1",  # indigo
    "#F43F5E",  # rose
)


def _builtin(
    parameter_id: str, name: str, unit: str, low: float, high: float, color: str
) -> Parameter:
    return Parameter(
        id=parameter_id,
        name=name,
        unit=unit,
        normal_range=NormalRange(min=low, max=high),
        color=color,
    )


DEFAULT_PARAMETERS: tuple[Parameter, ...] = (
    _builtin("hemoglobin", "Hemoglobin", "g/L", 120, 160, "#3B82F6"),
    _builtin("erythrocytes", "Erythrocytes", "×10¹²/L", 3.5, 5.5, "#EF4444"),
    _builtin("leukocytes", "Leukocytes", "×10⁹/L", 4, 9, "#10B981"),
    _builtin("platelets", "Platelets", "×10⁹/L", 180, 320, "#F59E0B"),
    _builtin("esr", "ESR", "mm/h", 2, 15, "#8B5CF6"),
    _builtin("glucose", "Glucose", "mmol/L", 3.3, 5.5, "#EC4899"),
    _builtin("cholesterol", "Cholesterol", "mmol/L", 3, 5.2, "#14B8A6"),
)
