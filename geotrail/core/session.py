"""
GeoTrail Tracking Session
=========================

One tracking session: path state, the Idle/Tracking state machine, and the
user-facing status banner. Sensor feeds push samples in, a PathRenderer (if
given) redraws on every change.

Usage:
    session = TrackingSession(renderer=PathRenderer(sink, 800, 400))
    await session.run(MockGPSClient(interval=0), max_samples=10)
    print(session.formatted_distance)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from datetime import UTC, datetime
from typing import Any, Protocol

from ..domain.models import (
    GeoPoint,
    MessageType,
    SensorError,
    StatusMessage,
    TrackingStatus,
)
from .path import PathAccumulator
from .renderer import PathRenderer

logger = logging.getLogger(__name__)


class PositionFeed(Protocol):
    """Source of position samples."""

    def stream_positions(self) -> AsyncIterator[GeoPoint]: ...

    async def stop(self) -> None: ...


class TrackingSession:
    """
    Owns a PathAccumulator and the session state machine.

    Transitions:
        IDLE     --start--> TRACKING
        TRACKING --stop---> IDLE      (path kept, further samples rejected)
        any      --clear--> IDLE      (stops first, then resets the path)
        TRACKING --sensor failure--> IDLE (path kept, error banner)
    """

    def __init__(
        self,
        accumulator: PathAccumulator | None = None,
        renderer: PathRenderer | None = None,
        message_display_secs: float = 5.0,
    ) -> None:
        self.accumulator = accumulator or PathAccumulator()
        self.renderer = renderer
        self.message_display_secs = message_display_secs
        self._status = TrackingStatus.IDLE
        self._message: StatusMessage | None = None
        self._last_error: SensorError | None = None

        # Stays closed until start()
        self.accumulator.close()
        if renderer is not None:
            renderer.attach(self.accumulator)

    @property
    def status(self) -> TrackingStatus:
        return self._status

    @property
    def is_tracking(self) -> bool:
        return self._status is TrackingStatus.TRACKING

    @property
    def last_error(self) -> SensorError | None:
        return self._last_error

    @property
    def can_start(self) -> bool:
        return self._status is TrackingStatus.IDLE

    @property
    def can_stop(self) -> bool:
        return self._status is TrackingStatus.TRACKING

    @property
    def can_clear(self) -> bool:
        return self.is_tracking or len(self.accumulator) > 0

    @property
    def formatted_distance(self) -> str:
        return f"{self.accumulator.total_distance:.2f} m"

    def message(self, now: datetime | None = None) -> StatusMessage | None:
        """Current banner, or None once it has expired."""
        if self._message is None:
            return None
        if self._message.is_expired(now, self.message_display_secs):
            self._message = None
        return self._message

    def _set_message(self, text: str, message_type: MessageType) -> None:
        self._message = StatusMessage(text=text, type=message_type)

    def start(self) -> bool:
        """Begin accepting samples. No-op while already tracking."""
        if not self.can_start:
            return False
        self.accumulator.reopen()
        self._status = TrackingStatus.TRACKING
        self._last_error = None
        self._set_message("Tracking started.", MessageType.SUCCESS)
        logger.info("Tracking started")
        return True

    def stop(self) -> bool:
        """Stop accepting samples. The path and distance are kept."""
        if not self.can_stop:
            return False
        self._halt()
        self._set_message("Tracking stopped.", MessageType.INFO)
        logger.info(
            "Tracking stopped: %d points, %.2fm",
            len(self.accumulator), self.accumulator.total_distance,
        )
        return True

    def clear(self) -> None:
        """Stop tracking and discard the path and distance."""
        self.stop()
        self.accumulator.reset()
        self._last_error = None
        self._set_message("Path and distance cleared.", MessageType.INFO)
        logger.info("Path cleared")

    def _halt(self) -> None:
        self._status = TrackingStatus.IDLE
        self.accumulator.close()

    def handle_sample(self, point: GeoPoint) -> bool:
        """
        Integrate one sample from the feed.

        Returns:
            False if the session is not tracking and the sample was dropped.
        """
        if not self.is_tracking:
            logger.debug("Dropping sample %s while %s", point, self._status.value)
            return False

        self.accumulator.add_sample(point)
        self._set_message(
            f"New position: lat {point.latitude:.5f}, lon {point.longitude:.5f}",
            MessageType.INFO,
        )
        return True

    def handle_error(self, error: SensorError) -> None:
        """Halt ingestion after a sensor failure without touching the path."""
        self._last_error = error
        if self.is_tracking:
            self._halt()
        self._set_message(f"Error: {error.user_message}", MessageType.ERROR)
        logger.warning("Tracking halted by sensor failure: %s", error)

    async def run(self, feed: PositionFeed, max_samples: int | None = None) -> int:
        """
        Drive the session from a feed until it ends, fails, or max_samples.

        Each sample is fully integrated (and rendered) before the next one
        is pulled. The feed is always stopped on exit.

        Returns:
            Number of samples integrated.
        """
        self.start()
        count = 0
        try:
            async with aclosing(feed.stream_positions()) as stream:
                async for point in stream:
                    if not self.handle_sample(point):
                        break
                    count += 1
                    if max_samples is not None and count >= max_samples:
                        break
        except SensorError as e:
            self.handle_error(e)
        finally:
            await feed.stop()
            self.stop()
        return count

    def snapshot(self) -> dict[str, Any]:
        """Export session state as dictionary."""
        message = self.message()
        data = self.accumulator.to_dict()
        data.update(
            {
                "status": self._status.value,
                "total_distance": self.formatted_distance,
                "message": message.text if message else None,
                "message_type": message.type.value if message else None,
                "error": self._last_error.kind.value if self._last_error else None,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        return data
