"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from lab_trend_ledger.utils.exceptions import ConfigurationError
from lab_trend_ledger.utils.parameters import ParameterLoader

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"


def test_load_bundled_config() -> None:
    """Test that the shipped configuration validates."""
    loader = ParameterLoader(str(CONFIG_DIR / "config.yaml"))

    if loader.get_storage_config().parameters_key != "lab_parameters":
        raise AssertionError("Unexpected parameters key")

    if loader.get_tracker_config().chart_padding_factor != 0.2:
        raise AssertionError("Unexpected padding factor")


def test_partial_config_uses_defaults(tmp_path: Path) -> None:
    """Test that omitted sections fall back to defaults."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("storage:\n  backend: memory\n", encoding="utf-8")

    loader = ParameterLoader(str(config_file))

    if loader.get_storage_config().backend != "memory":
        raise AssertionError("Storage backend override ignored")

    if loader.get_tracker_config().default_window != "last-12-months":
        raise AssertionError("Tracker defaults not applied")


@pytest.mark.parametrize(
    "content",
    [
        "storage: [unclosed",
        "- just\n- a list\n",
        "tracker:\n  default_window: fortnight\n",
        "tracker:\n  timezone: Mars/Olympus\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    """Test configuration errors."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ParameterLoader(str(config_file))


def test_missing_config_raises(tmp_path: Path) -> None:
    """Test a missing configuration file."""
    with pytest.raises(ConfigurationError):
        ParameterLoader(str(tmp_path / "absent.yaml"))
