"""
Integration tests: feed -> session -> accumulator -> renderer -> sink.
"""

import pytest

from geotrail.apps.tracker.main import build_feed, run_tracker
from geotrail.config import GeoTrailConfig
from geotrail.core.renderer import PathRenderer
from geotrail.core.session import TrackingSession
from geotrail.domain.models import GeoPoint, MessageType, SensorErrorKind
from geotrail.infrastructure.display.recording import RecordingSink
from geotrail.infrastructure.gps.gpsd_client import AsyncGPSClient, MockGPSClient
from geotrail.infrastructure.gps.replay import ReplayGPSClient


def P(lat: float, lon: float) -> GeoPoint:
    return GeoPoint(latitude=lat, longitude=lon)


L_SHAPE = [P(0, 0), P(0, 0.001), P(0.001, 0.001)]


@pytest.mark.asyncio
async def test_l_shape_end_to_end():
    sink = RecordingSink()
    session = TrackingSession(renderer=PathRenderer(sink, 800, 400))

    await session.run(ReplayGPSClient(L_SHAPE))

    assert session.accumulator.total_distance == pytest.approx(222.5, abs=1.0)

    # Inspect the last render pass only
    last_clear = max(i for i, c in enumerate(sink.calls) if c.op == "clear_surface")
    last_pass = sink.calls[last_clear:]
    coords = [c.args for c in last_pass if c.op in ("move_to", "line_to")]
    assert len(coords) == 3
    xs = [x for x, _ in coords]
    ys = [y for _, y in coords]
    assert max(xs) - min(xs) <= 0.95 * 800 + 1e-6
    assert max(ys) - min(ys) <= 0.95 * 400 + 1e-6

    # L-shape: first leg horizontal, second leg vertical
    assert coords[0][1] == pytest.approx(coords[1][1])
    assert coords[1][0] == pytest.approx(coords[2][0])

    start, end = [c for c in last_pass if c.op == "fill_circle"]
    assert start.args[:2] == pytest.approx(coords[0])
    assert end.args[:2] == pytest.approx(coords[2])


@pytest.mark.asyncio
async def test_dropout_keeps_distance_walked():
    session = TrackingSession()
    await session.run(MockGPSClient(interval=0, fail_after=10))
    walked = session.accumulator.total_distance
    assert walked > 0
    assert session.message().type is MessageType.ERROR

    # A new watch continues the same path
    await session.run(ReplayGPSClient([session.accumulator.last_point]))
    assert session.accumulator.total_distance == pytest.approx(walked)
    assert len(session.accumulator) == 11


@pytest.mark.asyncio
async def test_run_tracker_writes_image(tmp_path):
    cfg = GeoTrailConfig()
    out = tmp_path / "trail.png"

    result = await run_tracker(cfg, ReplayGPSClient(L_SHAPE), out)

    assert result.samples == 3
    assert result.points == 3
    assert result.total_meters == pytest.approx(222.39, abs=0.05)
    assert result.image_path == out
    assert out.exists()
    assert result.error is None


@pytest.mark.asyncio
async def test_run_tracker_reports_sensor_error(tmp_path):
    cfg = GeoTrailConfig()
    feed = ReplayGPSClient(L_SHAPE[:2], fail_with=SensorErrorKind.TIMEOUT)

    result = await run_tracker(cfg, feed, tmp_path / "trail.png", save_on_change=True)

    assert result.error == "timeout"
    assert result.points == 2
    assert result.message.startswith("Error: Timed out")


def test_build_feed_selects_mock():
    cfg = GeoTrailConfig()
    assert isinstance(build_feed(cfg, mock=True), MockGPSClient)
    feed = build_feed(cfg)
    assert type(feed) is AsyncGPSClient
    assert feed.config.port == 2947
    assert feed.config.distance_filter == 1.0
