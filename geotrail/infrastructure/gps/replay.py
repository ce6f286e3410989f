"""
Replay recorded position samples as a GPS feed.

Supported sample files:
- CSV with a ``latitude,longitude`` (or ``lat,lon``) header, or two bare
  numeric columns
- JSON lines, one ``{"latitude": .., "longitude": ..}`` object per line
  (``lat``/``lon`` keys accepted)
"""

from __future__ import annotations

import asyncio
import csv
import json
import logging
from collections.abc import AsyncIterator, Iterable
from datetime import UTC, datetime
from pathlib import Path

from ...domain.models import GeoPoint, SensorError, SensorErrorKind
from .gpsd_client import AsyncGPSClient, GPSClientConfig

logger = logging.getLogger(__name__)

_LAT_KEYS = ("latitude", "lat")
_LON_KEYS = ("longitude", "lon", "lng")


def _pick(row: dict, keys: tuple[str, ...]) -> object:
    for key in keys:
        if key in row:
            return row[key]
    raise KeyError(keys[0])


def _load_jsonl(path: Path) -> list[GeoPoint]:
    points: list[GeoPoint] = []
    with path.open("r", encoding="utf-8") as fp:
        for lineno, line in enumerate(fp, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
                points.append(
                    GeoPoint(
                        latitude=float(_pick(row, _LAT_KEYS)),  # type: ignore[arg-type]
                        longitude=float(_pick(row, _LON_KEYS)),  # type: ignore[arg-type]
                    )
                )
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"{path}:{lineno}: invalid sample: {exc}") from exc
    return points


def _load_csv(path: Path) -> list[GeoPoint]:
    points: list[GeoPoint] = []
    with path.open("r", encoding="utf-8", newline="") as fp:
        rows = list(csv.reader(fp))

    if not rows:
        return points

    header = [c.strip().lower() for c in rows[0]]
    lat_idx = lon_idx = None
    for key in _LAT_KEYS:
        if key in header:
            lat_idx = header.index(key)
    for key in _LON_KEYS:
        if key in header:
            lon_idx = header.index(key)

    start = 1
    if lat_idx is None or lon_idx is None:
        lat_idx, lon_idx, start = 0, 1, 0

    for lineno, row in enumerate(rows[start:], start=start + 1):
        if not row or all(not c.strip() for c in row):
            continue
        try:
            points.append(
                GeoPoint(latitude=float(row[lat_idx]), longitude=float(row[lon_idx]))
            )
        except (IndexError, ValueError) as exc:
            raise ValueError(f"{path}:{lineno}: invalid sample: {exc}") from exc
    return points


def load_samples(path: Path | str) -> list[GeoPoint]:
    """
    Load recorded samples from a CSV or JSON lines file.

    Raises:
        ValueError: on a malformed line, with its line number.
    """
    path = Path(path).expanduser()
    if path.suffix.lower() in (".jsonl", ".ndjson", ".json"):
        points = _load_jsonl(path)
    else:
        points = _load_csv(path)
    logger.info("Loaded %d samples from %s", len(points), path)
    return points


class ReplayGPSClient(AsyncGPSClient):
    """Feed that yields a fixed sequence of samples, then optionally fails."""

    def __init__(
        self,
        points: Iterable[GeoPoint],
        interval: float = 0.0,
        fail_with: SensorErrorKind | None = None,
    ) -> None:
        super().__init__(GPSClientConfig(distance_filter=0.0))
        self._points = list(points)
        self._interval = interval
        self._fail_with = fail_with

    @classmethod
    def from_file(cls, path: Path | str, interval: float = 0.0) -> ReplayGPSClient:
        return cls(load_samples(path), interval=interval)

    async def connect(self) -> None:
        self._state.connected = True

    async def stream_positions(self) -> AsyncIterator[GeoPoint]:
        self._running = True
        await self.connect()

        try:
            for point in self._points:
                if not self._running:
                    return
                self._position = point
                self._state.fix_count += 1
                self._state.last_fix = datetime.now(UTC)
                yield point
                if self._interval > 0:
                    await asyncio.sleep(self._interval)

            if self._fail_with is not None and self._running:
                raise self._fail(self._fail_with, "replay ended with injected failure")
        finally:
            self._running = False
            self._state.connected = False
