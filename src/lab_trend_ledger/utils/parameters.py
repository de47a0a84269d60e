"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All settings are loaded from YAML and validated using Pydantic models.
"""

from pathlib import Path
from typing import Any

import pytz
import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lab_trend_ledger.utils.exceptions import ConfigurationError


class TrackerConfig(BaseModel):
    """Measurement tracking configuration."""

    timezone: str = "UTC"
    display_date_format: str = "%b %y"
    recent_results_count: int = Field(3, ge=0)
    chart_padding_factor: float = Field(0.2, ge=0)
    default_window: str = Field("last-12-months", pattern="^(last-(6|12|24)-months|all)$")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value


class StorageConfig(BaseModel):
    """Key-value snapshot storage configuration."""

    backend: str = Field("file", pattern="^(memory|file)$")
    dir: str = "data"
    parameters_key: str = "lab_parameters"
    measurements_key: str = "lab_measurements"


class OutputFilesConfig(BaseModel):
    """Output file names configuration."""

    series_csv: str = "{parameter_id}_series.csv"
    parameters_summary: str = "parameters_summary.json"


class OutputConfig(BaseModel):
    """Output configuration."""

    dir: str = "output"
    files: OutputFilesConfig = Field(default_factory=OutputFilesConfig)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    tracker: TrackerConfig = Field(default_factory=TrackerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="LTL_", case_sensitive=False)


class ParameterLoader:
    """
    Centralized settings loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration sections.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize settings loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            if not isinstance(config_dict, dict):
                raise ConfigurationError("Configuration root must be a mapping")

            self.config = AppConfig(**config_dict)

        except ConfigurationError:
            raise
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_tracker_config(self) -> TrackerConfig:
        """Get measurement tracking configuration."""
        return self.config.tracker

    def get_storage_config(self) -> StorageConfig:
        """Get snapshot storage configuration."""
        return self.config.storage

    def get_output_config(self) -> OutputConfig:
        """Get output configuration."""
        return self.config.output

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
