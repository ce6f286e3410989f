from __future__ import annotations

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class GPSConfig(BaseModel):
    """GPS daemon configuration."""

    enabled: bool = Field(True)
    host: str = Field("localhost")
    port: int = Field(2947, ge=1, le=65535)
    timeout: float = Field(5.0, gt=0)  # seconds without a fix
    distance_filter: float = Field(1.0, ge=0)  # meters, 0 = off
    mock_mode: bool = Field(False)  # Use mock GPS for testing
    mock_lat: float = Field(37.5665, ge=-90, le=90)
    mock_lon: float = Field(126.9780, ge=-180, le=180)
    mock_interval: float = Field(1.0, ge=0)

    @field_validator("host")
    @classmethod
    def _validate_host(cls, value: str) -> str:
        if not value or any(c.isspace() for c in value):
            raise ValueError("host must be a valid hostname or IP")
        return value


class CanvasConfig(BaseModel):
    width: int = Field(800, gt=0)
    height: int = Field(400, gt=0)
    fit_margin: float = Field(0.95, gt=0, le=1)
    min_effective_range: float = Field(0.0001, gt=0)  # degrees
    background: str = Field("#ffffff")

    @field_validator("background")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            raise ValueError(f"invalid color: {value}")
        return value.lower()


class StyleConfig(BaseModel):
    line_color: str = Field("#007bff")
    line_width: float = Field(4, gt=0)
    start_color: str = Field("#28a745")
    end_color: str = Field("#dc3545")
    marker_radius: float = Field(6, gt=0)

    @field_validator("line_color", "start_color", "end_color")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        if not _HEX_COLOR.match(value):
            raise ValueError(f"invalid color: {value}")
        return value.lower()


class MessagesConfig(BaseModel):
    display_secs: float = Field(5.0, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    format: str = Field("%(asctime)s | %(name)s | %(levelname)s | %(message)s")
    datefmt: str = Field("%Y-%m-%d %H:%M:%S")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {value}")
        return level


class OutputConfig(BaseModel):
    image_path: Path = Field(Path("output/trail.png"))

    @field_validator("image_path")
    @classmethod
    def _expand_image_path(cls, value: Path) -> Path:
        return value.expanduser()


class GeoTrailConfig(BaseModel):
    gps: GPSConfig = Field(default_factory=GPSConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    style: StyleConfig = Field(default_factory=StyleConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: Path) -> GeoTrailConfig:
    with Path(path).expanduser().open("r", encoding="utf-8") as fp:
        raw = yaml.safe_load(fp) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"config root must be a mapping, got {type(raw).__name__}")
    try:
        return GeoTrailConfig.model_validate(raw)
    except ValidationError as exc:  # pragma: no cover - formatting
        raise ValueError(str(exc)) from exc


def resolve_config_path(cli_path: Path | None) -> Path:
    """Resolve config path by priority: CLI, env, /etc/geotrail, repo configs."""
    candidates: list[Path] = []
    if cli_path:
        p = Path(cli_path).expanduser()
        if p.exists():
            return p.resolve()
        candidates.append(p)
    env = os.environ.get("GEOTRAIL_CONFIG")
    if env:
        p = Path(env).expanduser()
        if p.exists():
            return p.resolve()
        candidates.append(p)
    for p in [Path("/etc/geotrail/geotrail.yml"), Path("configs/geotrail.yml")]:
        if p.exists():
            return p.resolve()
        candidates.append(p)
    # Fallback to first candidate even if not exists to surface errors consistently
    return candidates[0] if candidates else Path("configs/geotrail.yml").resolve()


def load_config_or_default(path: Path | None) -> GeoTrailConfig:
    """Load the resolved config, or defaults when no config file exists."""
    resolved = resolve_config_path(path)
    if not resolved.exists():
        return GeoTrailConfig()
    return load_config(resolved)


def configure_logging(cfg: LoggingConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, cfg.level),
        format=cfg.format,
        datefmt=cfg.datefmt,
    )
