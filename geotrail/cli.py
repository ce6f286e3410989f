from __future__ import annotations

import asyncio
import importlib.metadata as md
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .apps.tracker.main import TrackerResult, run_tracker, service_loop
from .config import (
    GeoTrailConfig,
    configure_logging,
    load_config,
    load_config_or_default,
    resolve_config_path,
)
from .infrastructure.gps.distance import calculate_distance
from .infrastructure.gps.replay import ReplayGPSClient, load_samples

# Typer application: tests import this
app = typer.Typer(no_args_is_help=True, add_completion=False, help="GeoTrail CLI")
console = Console()


def _load(config: Path | None) -> GeoTrailConfig:
    try:
        cfg = load_config_or_default(config)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    configure_logging(cfg.logging)
    return cfg


def _print_result(result: TrackerResult) -> None:
    table = Table(title="GeoTrail session", show_header=False)
    table.add_row("samples", str(result.samples))
    table.add_row("points", str(result.points))
    table.add_row("distance", f"{result.total_meters:.2f} m")
    table.add_row("status", result.status)
    if result.image_path is not None:
        table.add_row("image", str(result.image_path))
    if result.message:
        table.add_row("message", result.message)
    console.print(table)


@app.command()
def version() -> None:
    """Print version information."""
    try:
        dist_version = md.version("geotrail")
    except md.PackageNotFoundError:
        from . import __version__

        dist_version = __version__
    console.print(f"geotrail {dist_version}")
    raise typer.Exit(code=0)


@app.command()
def distance(
    lat1: float = typer.Argument(..., help="Start latitude (degrees)"),
    lon1: float = typer.Argument(..., help="Start longitude (degrees)"),
    lat2: float = typer.Argument(..., help="End latitude (degrees)"),
    lon2: float = typer.Argument(..., help="End longitude (degrees)"),
) -> None:
    """Great-circle distance in meters between two positions."""
    meters = calculate_distance(lat1, lon1, lat2, lon2)
    console.print(f"{meters:.2f} m")


@app.command(name="config-validate")
def config_validate(path: Path = typer.Argument(Path("configs/geotrail.yml"))) -> None:
    """Validate and show resolved configuration."""
    resolved = resolve_config_path(path)
    console.print(f"Using config: {resolved}")
    try:
        cfg: GeoTrailConfig = load_config(resolved)
    except Exception as exc:
        console.print(f"Config validation failed: {exc}")
        raise typer.Exit(code=1) from exc
    console.print("Config OK.")
    console.print(f"- gpsd: {cfg.gps.host}:{cfg.gps.port} (mock={cfg.gps.mock_mode})")
    console.print(f"- canvas: {cfg.canvas.width}x{cfg.canvas.height}")
    console.print(f"- output: {cfg.output.image_path}")


@app.command(name="config-which")
def config_which(path: Path = typer.Option(Path("configs/geotrail.yml"), "--config", "-c")) -> None:
    """Print resolved config path by priority rules."""
    console.print(str(resolve_config_path(path)))


@app.command()
def replay(
    samples: Path = typer.Argument(..., help="CSV or JSON lines file of samples"),
    out: Path | None = typer.Option(None, "--out", "-o", help="PNG to write"),
    width: int | None = typer.Option(None, "--width"),
    height: int | None = typer.Option(None, "--height"),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Replay recorded samples, print the distance and render the path."""
    cfg = _load(config)
    if width is not None:
        cfg.canvas.width = width
    if height is not None:
        cfg.canvas.height = height

    try:
        points = load_samples(samples)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read samples:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    target = out or cfg.output.image_path
    result = asyncio.run(run_tracker(cfg, ReplayGPSClient(points), target))
    _print_result(result)


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c"),
    mock: bool = typer.Option(False, "--mock", help="Use the simulated walking feed"),
    max_samples: int | None = typer.Option(None, "--max-samples", min=1),
    out: Path | None = typer.Option(None, "--out", "-o", help="PNG to keep updated"),
) -> None:
    """Track live positions from gpsd (or the mock feed) until stopped."""
    cfg = _load(config)
    if not cfg.gps.enabled and not (mock or cfg.gps.mock_mode):
        console.print("GPS is disabled in config; use --mock to simulate.")
        raise typer.Exit(code=1)

    try:
        result = service_loop(cfg, mock=mock, image_path=out, max_samples=max_samples)
    except KeyboardInterrupt:
        console.print("Stopped.")
        raise typer.Exit(code=0)

    _print_result(result)
    if result.error is not None:
        raise typer.Exit(code=2)


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover
    app()
