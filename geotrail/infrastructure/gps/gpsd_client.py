"""Async gpsd client that streams position samples and reports typed failures."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from ...domain.models import GeoPoint, SensorError, SensorErrorKind
from .distance import distance

logger = logging.getLogger(__name__)


@dataclass
class GPSClientConfig:
    """GPS daemon connection and watch options."""

    host: str = "localhost"
    port: int = 2947
    timeout: float = 5.0  # seconds without a fix before TIMEOUT
    distance_filter: float = 1.0  # meters; 0 = emit every fix


@dataclass
class GPSState:
    """Internal GPS state tracking."""

    connected: bool = False
    fix_count: int = 0
    filtered_count: int = 0
    error_count: int = 0
    last_fix: Optional[datetime] = None
    satellites: int = 0
    last_error: Optional[SensorErrorKind] = None


class AsyncGPSClient:
    """
    Async gpsd client.

    Streams GeoPoints from TPV reports. Any acquisition failure ends the
    stream with a SensorError; there is no automatic reconnect, the caller
    decides whether to start a new watch.

    Usage:
        client = AsyncGPSClient()

        try:
            async for point in client.stream_positions():
                print(point.latitude, point.longitude)
        except SensorError as e:
            print(e.user_message)
    """

    def __init__(self, config: GPSClientConfig | None = None) -> None:
        self.config = config or GPSClientConfig()
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._running = False
        self._position: Optional[GeoPoint] = None
        self._callbacks: list[Callable[[GeoPoint], None]] = []
        self._state = GPSState()

    @property
    def position(self) -> Optional[GeoPoint]:
        """Get last emitted position."""
        return self._position

    @property
    def is_connected(self) -> bool:
        return self._state.connected

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> GPSState:
        """Get internal state for diagnostics."""
        return self._state

    def on_position(self, callback: Callable[[GeoPoint], None]) -> None:
        """Register callback for position updates."""
        self._callbacks.append(callback)

    def remove_callback(self, callback: Callable[[GeoPoint], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def connect(self) -> None:
        """
        Connect to gpsd and enable JSON watch mode.

        Raises:
            SensorError: mapped from the connection failure.
        """
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.config.host, self.config.port),
                timeout=self.config.timeout,
            )
            self._writer.write(b'?WATCH={"enable":true,"json":true}\n')
            await self._writer.drain()

        except asyncio.TimeoutError as e:
            raise self._fail(
                SensorErrorKind.TIMEOUT,
                f"connect to {self.config.host}:{self.config.port} timed out",
            ) from e

        except PermissionError as e:
            raise self._fail(SensorErrorKind.PERMISSION_DENIED, str(e)) from e

        except OSError as e:
            # Refused, unreachable, unknown host: no position source available
            raise self._fail(SensorErrorKind.POSITION_UNAVAILABLE, str(e)) from e

        self._state.connected = True
        logger.info("Connected to gpsd at %s:%d", self.config.host, self.config.port)

    async def disconnect(self) -> None:
        """Disconnect from gpsd gracefully."""
        if self._writer:
            try:
                self._writer.write(b'?WATCH={"enable":false}\n')
                await self._writer.drain()
                self._writer.close()
                await self._writer.wait_closed()
            except (OSError, RuntimeError) as e:
                logger.debug("gpsd disconnect error ignored: %s", e)

        self._reader = None
        self._writer = None
        self._state.connected = False

    async def stream_positions(self) -> AsyncIterator[GeoPoint]:
        """
        Async generator that yields GeoPoints.

        Raises:
            SensorError: when no fix arrives within config.timeout, the
                connection drops, or gpsd reports an error.
        """
        self._running = True
        loop = asyncio.get_running_loop()

        try:
            if not self._reader:
                await self.connect()

            deadline = loop.time() + self.config.timeout

            while self._running:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise self._fail(
                        SensorErrorKind.TIMEOUT,
                        f"no fix within {self.config.timeout:.1f}s",
                    )

                try:
                    line = await asyncio.wait_for(
                        self._reader.readline(),  # type: ignore[union-attr]
                        timeout=remaining,
                    )
                except asyncio.TimeoutError as e:
                    raise self._fail(
                        SensorErrorKind.TIMEOUT,
                        f"no fix within {self.config.timeout:.1f}s",
                    ) from e
                except OSError as e:
                    raise self._fail(SensorErrorKind.POSITION_UNAVAILABLE, str(e)) from e

                if not line:
                    raise self._fail(
                        SensorErrorKind.POSITION_UNAVAILABLE, "connection closed by gpsd"
                    )

                try:
                    data = json.loads(line.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    logger.warning("GPS JSON parse error: %s", e)
                    continue

                msg_class = data.get("class")
                if msg_class == "SKY":
                    self._state.satellites = len(data.get("satellites", []))
                    continue

                if msg_class == "ERROR":
                    raise self._fail(SensorErrorKind.UNKNOWN, str(data.get("message", "")))

                if msg_class != "TPV":
                    continue

                point = self._parse_tpv(data)
                if point is None:
                    continue

                # Any fix, filtered or not, proves the receiver is alive
                deadline = loop.time() + self.config.timeout

                if not self._passes_filter(point):
                    self._state.filtered_count += 1
                    continue

                self._position = point
                self._state.fix_count += 1
                self._state.last_fix = datetime.now(UTC)

                for cb in self._callbacks:
                    try:
                        cb(point)
                    except Exception as e:
                        logger.error("GPS callback error: %s", e)

                yield point
                deadline = loop.time() + self.config.timeout

        finally:
            self._running = False
            await self.disconnect()

    def _parse_tpv(self, data: dict) -> Optional[GeoPoint]:
        """
        Parse TPV (Time-Position-Velocity) message from gpsd.

        Args:
            data: JSON dict from gpsd TPV message

        Returns:
            GeoPoint if a 2D/3D fix with finite lat/lon is present, None otherwise
        """
        if "lat" not in data or "lon" not in data:
            return None

        # Mode: 0=unknown, 1=no fix, 2=2D, 3=3D
        if data.get("mode", 0) < 2:
            return None

        try:
            lat = float(data["lat"])
            lon = float(data["lon"])
        except (TypeError, ValueError) as e:
            logger.error("TPV parse error: %s - data: %s", e, data)
            return None

        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None

        return GeoPoint(latitude=lat, longitude=lon)

    def _passes_filter(self, point: GeoPoint) -> bool:
        """Sensor-side distance filter against the last emitted fix."""
        if self.config.distance_filter <= 0 or self._position is None:
            return True
        return distance(self._position, point) >= self.config.distance_filter

    def _fail(self, kind: SensorErrorKind, detail: str) -> SensorError:
        self._state.error_count += 1
        self._state.last_error = kind
        logger.warning("GPS failure (%s): %s", kind.value, detail)
        return SensorError(kind, detail)

    async def stop(self) -> None:
        """Stop streaming and disconnect."""
        self._running = False
        await self.disconnect()


class MockGPSClient(AsyncGPSClient):
    """
    Mock GPS client for testing and simulation.

    Walks a circle around the start position. Optionally fails with a
    given SensorErrorKind after a number of samples.
    """

    def __init__(
        self,
        start_lat: float = 37.5665,
        start_lon: float = 126.9780,
        radius: float = 0.001,  # ~111 meters
        step_degrees: float = 5.0,
        interval: float = 1.0,
        fail_after: int | None = None,
        fail_kind: SensorErrorKind = SensorErrorKind.POSITION_UNAVAILABLE,
    ) -> None:
        super().__init__(GPSClientConfig(distance_filter=0.0))
        self._start_lat = start_lat
        self._start_lon = start_lon
        self._radius = radius
        self._step_degrees = step_degrees
        self._interval = interval
        self._fail_after = fail_after
        self._fail_kind = fail_kind
        self._step = 0

    async def connect(self) -> None:
        """Mock always connects."""
        self._state.connected = True
        logger.info("Mock GPS connected (simulated)")

    async def stream_positions(self) -> AsyncIterator[GeoPoint]:
        """Generate positions in a walking pattern."""
        self._running = True
        await self.connect()

        try:
            while self._running:
                if self._fail_after is not None and self._step >= self._fail_after:
                    raise self._fail(self._fail_kind, "simulated failure")

                angle = math.radians(self._step * self._step_degrees)
                point = GeoPoint(
                    latitude=self._start_lat + self._radius * math.sin(angle),
                    longitude=self._start_lon + self._radius * math.cos(angle),
                )

                self._position = point
                self._state.fix_count += 1
                self._state.last_fix = datetime.now(UTC)
                self._step += 1

                for cb in self._callbacks:
                    try:
                        cb(point)
                    except Exception as e:
                        logger.error("GPS callback error: %s", e)

                yield point
                if self._interval > 0:
                    await asyncio.sleep(self._interval)
        finally:
            self._running = False
            self._state.connected = False
