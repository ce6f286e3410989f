"""Tracker service: wires a position feed, a session and an image sink together."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from ...config import GeoTrailConfig
from ...core.path import PathAccumulator
from ...core.renderer import PathRenderer, PathStyle
from ...core.session import PositionFeed, TrackingSession
from ...infrastructure.display.image_sink import PillowSink
from ...infrastructure.gps.gpsd_client import AsyncGPSClient, GPSClientConfig, MockGPSClient

logger = logging.getLogger(__name__)


@dataclass
class TrackerResult:
    samples: int
    points: int
    total_meters: float
    image_path: Path | None
    status: str
    message: str | None
    error: str | None


def style_from_config(cfg: GeoTrailConfig) -> PathStyle:
    return PathStyle(
        line_color=cfg.style.line_color,
        line_width=cfg.style.line_width,
        start_color=cfg.style.start_color,
        end_color=cfg.style.end_color,
        marker_radius=cfg.style.marker_radius,
    )


def build_session(cfg: GeoTrailConfig, sink: PillowSink) -> TrackingSession:
    """Create a session whose renderer draws into sink at the configured size."""
    renderer = PathRenderer(
        sink,
        cfg.canvas.width,
        cfg.canvas.height,
        style_from_config(cfg),
        fit_margin=cfg.canvas.fit_margin,
        min_effective_range=cfg.canvas.min_effective_range,
    )
    return TrackingSession(
        accumulator=PathAccumulator(),
        renderer=renderer,
        message_display_secs=cfg.messages.display_secs,
    )


def build_feed(cfg: GeoTrailConfig, mock: bool = False) -> AsyncGPSClient:
    """gpsd client, or the walking mock when mock mode is requested."""
    if mock or cfg.gps.mock_mode:
        return MockGPSClient(
            start_lat=cfg.gps.mock_lat,
            start_lon=cfg.gps.mock_lon,
            interval=cfg.gps.mock_interval,
        )
    return AsyncGPSClient(
        GPSClientConfig(
            host=cfg.gps.host,
            port=cfg.gps.port,
            timeout=cfg.gps.timeout,
            distance_filter=cfg.gps.distance_filter,
        )
    )


async def run_tracker(
    cfg: GeoTrailConfig,
    feed: PositionFeed,
    image_path: Path | None = None,
    max_samples: int | None = None,
    save_on_change: bool = False,
) -> TrackerResult:
    """
    Track until the feed ends, fails, or max_samples is reached.

    The rendered image is written once at the end, and after every path
    change when save_on_change is set.
    """
    sink = PillowSink(cfg.canvas.width, cfg.canvas.height, background=cfg.canvas.background)
    session = build_session(cfg, sink)

    if image_path is not None and save_on_change:
        session.accumulator.subscribe(lambda _acc: sink.save(image_path))

    samples = await session.run(feed, max_samples=max_samples)

    saved: Path | None = None
    if image_path is not None:
        saved = sink.save(image_path)

    message = session.message()
    error = session.last_error
    logger.info(
        "Session finished: %d samples, %s", samples, session.formatted_distance
    )
    return TrackerResult(
        samples=samples,
        points=len(session.accumulator),
        total_meters=session.accumulator.total_distance,
        image_path=saved,
        status=session.status.value,
        message=message.text if message else None,
        error=error.kind.value if error else None,
    )


def service_loop(
    cfg: GeoTrailConfig,
    mock: bool = False,
    image_path: Path | None = None,
    max_samples: int | None = None,
) -> TrackerResult:
    """Blocking entry point for live tracking."""
    feed = build_feed(cfg, mock=mock)
    target = image_path or cfg.output.image_path
    try:
        return asyncio.run(
            run_tracker(cfg, feed, target, max_samples=max_samples, save_on_change=True)
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, tracking stopped")
        raise
