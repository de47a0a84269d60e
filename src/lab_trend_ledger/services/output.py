"""
Output service for exporting tracked data.

Writes per-parameter series to CSV and a JSON summary of all parameters
with their latest reading and classification.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from lab_trend_ledger.domain.measurement import Measurement
from lab_trend_ledger.domain.parameter import Parameter
from lab_trend_ledger.services.classifier import classify
from lab_trend_ledger.utils.parameters import OutputConfig

logger = logging.getLogger(__name__)


class ExportService:
    """
    Service for writing tracked data to output files.

    File names come from the output configuration.
    """

    def __init__(self, config: OutputConfig) -> None:
        """
        Initialize export service.

        Args:
            config: Output configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write_series_csv(self, parameter: Parameter, series: list[Measurement]) -> Path | None:
        """
        Write one parameter's series to CSV.

        Args:
            parameter: Exported parameter.
            series: Its measurements in chronological order.

        Returns:
            Path of the written file, or None if the series is empty.
        """
        if not series:
            logger.warning(f"No measurements to export for {parameter.id}")
            return None

        csv_path = self.output_dir / self.config.files.series_csv.format(parameter_id=parameter.id)

        df = pd.DataFrame(
            [
                {
                    "timestamp": m.timestamp.isoformat(),
                    "date": m.display_date,
                    "value": m.value,
                    "unit": parameter.unit,
                    "status": classify(m.value, parameter.normal_range).value,
                }
                for m in series
            ]
        )

        df.to_csv(csv_path, index=False, encoding="utf-8")
        logger.info(f"Wrote {len(series)} measurements to {csv_path}")
        return csv_path

    def write_parameters_summary(
        self, parameters: list[Parameter], series_by_id: dict[str, list[Measurement]]
    ) -> Path:
        """
        Write a JSON summary of every parameter.

        Args:
            parameters: Parameters in display order.
            series_by_id: Series keyed by parameter id.

        Returns:
            Path of the written file.
        """
        summary_path = self.output_dir / self.config.files.parameters_summary

        entries: list[dict[str, Any]] = []
        for parameter in parameters:
            series = series_by_id.get(parameter.id, [])
            entry: dict[str, Any] = {
                **parameter.to_dict(),
                "measurement_count": len(series),
                "latest": None,
            }
            if series:
                last = series[-1]
                entry["latest"] = {
                    "value": last.value,
                    "timestamp": last.timestamp.isoformat(),
                    "status": classify(last.value, parameter.normal_range).value,
                }
            entries.append(entry)

        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump({"total_parameters": len(entries), "parameters": entries}, f, indent=2, ensure_ascii=False)

        logger.info(f"Wrote parameters summary to {summary_path}")
        return summary_path
