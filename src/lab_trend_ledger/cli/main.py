"""
Command-line interface for Lab Trend Ledger.

Provides commands for managing parameters, recording lab results and
inspecting trends.
"""

import typer

from lab_trend_ledger.domain.measurement import RangeStatus
from lab_trend_ledger.domain.parameter import ParameterDraft
from lab_trend_ledger.infrastructure.storage.key_value import create_key_value_store
from lab_trend_ledger.services.output import ExportService
from lab_trend_ledger.services.tracker import LabTracker
from lab_trend_ledger.utils.exceptions import LabTrendLedgerError
from lab_trend_ledger.utils.logging_config import get_logger, setup_logging
from lab_trend_ledger.utils.parameters import ParameterLoader
from lab_trend_ledger.utils.timezone_utils import parse_datetime, utc_now

app = typer.Typer(help="Lab Trend Ledger - Lab result tracking and trends")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Settings loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "lab_trend_ledger")
    return param_loader


def open_tracker(param_loader: ParameterLoader) -> LabTracker:
    """Open a tracker session on the configured storage backend."""
    storage_config = param_loader.get_storage_config()
    tracker = LabTracker(
        create_key_value_store(storage_config),
        config=param_loader.get_tracker_config(),
        storage_config=storage_config,
    )
    if tracker.load_error is not None:
        typer.echo(f"Warning: stored data was unreadable, started from defaults ({tracker.load_error})", err=True)
    return tracker


def fail(action: str, error: LabTrendLedgerError) -> typer.Exit:
    logger.error(f"{action} failed: {error}")
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


@app.command()
def init(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    demo: bool = typer.Option(False, help="Fill built-in parameters with a year of sample readings"),
    seed: int | None = typer.Option(None, help="Random seed for sample readings"),
) -> None:
    """
    Create the ledger with the built-in parameters.

    Existing data is loaded, not replaced.
    """
    try:
        tracker = open_tracker(init_config(config_path))

        if demo:
            count = tracker.seed_demo(months=12, seed=seed)
            typer.echo(f"Added {count} sample measurements")

        typer.echo(
            f"Ledger ready: {len(tracker.list_parameters())} parameters, "
            f"{tracker.measurement_count()} measurements"
        )

    except LabTrendLedgerError as e:
        raise fail("Init", e) from e


@app.command()
def parameters(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """List tracked parameters with their normal ranges."""
    try:
        tracker = open_tracker(init_config(config_path))

        for parameter in tracker.list_parameters():
            normal = parameter.normal_range
            typer.echo(
                f"{parameter.id}: {parameter.name} [{parameter.unit}] "
                f"normal {normal.min:g}-{normal.max:g}"
            )

    except LabTrendLedgerError as e:
        raise fail("Listing parameters", e) from e


@app.command("add-parameter")
def add_parameter(
    name: str = typer.Option(..., help="Display name"),
    unit: str = typer.Option(..., help="Unit of measurement"),
    min_value: str = typer.Option(..., "--min", help="Lower bound of the normal range"),
    max_value: str = typer.Option(..., "--max", help="Upper bound of the normal range"),
    color: str | None = typer.Option(None, help="Display color, e.g. #3B82F6"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Add a custom parameter."""
    try:
        tracker = open_tracker(init_config(config_path))

        parameter = tracker.add_parameter(
            ParameterDraft(name=name, unit=unit, min=min_value, max=max_value, color=color)
        )
        typer.echo(f"Added parameter {parameter.id} ({parameter.name})")

    except LabTrendLedgerError as e:
        raise fail("Adding parameter", e) from e


@app.command()
def add(
    parameter_id: str = typer.Argument(..., help="Parameter id"),
    value: str = typer.Argument(..., help="Measured value"),
    date: str | None = typer.Option(None, help="Sample date (defaults to now)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Record a lab result."""
    try:
        param_loader = init_config(config_path)
        tracker = open_tracker(param_loader)

        if date:
            try:
                timestamp = parse_datetime(date, param_loader.get_tracker_config().timezone)
            except (ValueError, OverflowError) as e:
                typer.echo(f"Error: cannot parse date {date!r}", err=True)
                raise typer.Exit(code=1) from e
        else:
            timestamp = utc_now()

        measurement = tracker.insert(parameter_id, value, timestamp)
        parameter = tracker.get_parameter(parameter_id)
        status = tracker.classify(measurement.value, parameter_id)

        typer.echo(
            f"Recorded {measurement.value:g} {parameter.unit} on {measurement.display_date} "
            f"({status.value})"
        )

    except LabTrendLedgerError as e:
        raise fail("Recording result", e) from e


@app.command()
def series(
    parameter_id: str = typer.Argument(..., help="Parameter id"),
    window: str = typer.Option("all", help="last-6-months, last-12-months, last-24-months or all"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show a parameter's measurements in chronological order."""
    try:
        tracker = open_tracker(init_config(config_path))
        parameter = tracker.get_parameter(parameter_id)

        measurements = tracker.windowed(parameter_id, window)
        if not measurements:
            typer.echo("No measurements")
            return

        for m in measurements:
            status = tracker.classify(m.value, parameter_id)
            typer.echo(f"{m.timestamp.date().isoformat()}  {m.value:g} {parameter.unit}  {status.value}")

    except LabTrendLedgerError as e:
        raise fail("Listing series", e) from e


@app.command()
def recent(
    parameter_id: str = typer.Argument(..., help="Parameter id"),
    count: int | None = typer.Option(None, help="Number of results (defaults to config)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Show the most recent results, newest first."""
    try:
        tracker = open_tracker(init_config(config_path))
        parameter = tracker.get_parameter(parameter_id)

        for m, status in tracker.recent_results(parameter_id, count):
            label = "normal" if status is RangeStatus.IN_RANGE else "attention"
            typer.echo(f"{m.display_date}  {m.value:g} {parameter.unit}  {label}")

    except LabTrendLedgerError as e:
        raise fail("Listing recent results", e) from e


@app.command()
def chart(
    parameter_id: str = typer.Argument(..., help="Parameter id"),
    window: str | None = typer.Option(None, help="Time window (defaults to config)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Print chart data: axis domain, normal range and plotted points."""
    try:
        tracker = open_tracker(init_config(config_path))
        view = tracker.chart_view(parameter_id, window)

        low, high = view.reference_lines
        typer.echo(f"{view.parameter.name} ({view.policy.value})")
        typer.echo(f"Axis: {view.domain.low:.1f} - {view.domain.high:.1f}")
        typer.echo(f"Normal: {low:g} - {high:g} {view.parameter.unit}")

        frame = view.to_frame()
        if frame.empty:
            typer.echo("No measurements in window")
        else:
            typer.echo(frame[["date", "value", "status"]].to_string(index=False))
            typer.echo(f"Out of range: {view.out_of_range_count}")

    except LabTrendLedgerError as e:
        raise fail("Chart", e) from e


@app.command()
def export(
    parameter_id: str | None = typer.Argument(None, help="Parameter id (defaults to all)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """Export series to CSV and write the parameters summary."""
    try:
        param_loader = init_config(config_path)
        tracker = open_tracker(param_loader)
        service = ExportService(param_loader.get_output_config())

        if parameter_id:
            selected = [tracker.get_parameter(parameter_id)]
        else:
            selected = tracker.list_parameters()

        series_by_id = {p.id: tracker.get_series(p.id) for p in selected}
        for parameter in selected:
            path = service.write_series_csv(parameter, series_by_id[parameter.id])
            if path:
                typer.echo(f"Wrote {path}")

        summary_path = service.write_parameters_summary(selected, series_by_id)
        typer.echo(f"Summary written to {summary_path}")

    except LabTrendLedgerError as e:
        raise fail("Export", e) from e


if __name__ == "__main__":
    app()
