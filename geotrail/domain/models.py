"""GeoTrail Domain Models - positions, sensor errors and session status."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    """A single position sample in degrees.

    Frozen: once a point is appended to a path it never changes.
    Inputs are expected to be finite floats; NaN and infinities are not guarded.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

    @classmethod
    def from_coords(cls, lat: float, lon: float) -> GeoPoint:
        return cls(latitude=lat, longitude=lon)

    def __str__(self) -> str:
        return f"({self.latitude:.5f}, {self.longitude:.5f})"


class SensorErrorKind(str, Enum):
    """Failure kinds reported by a position feed."""

    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        """Message shown to the user for this failure kind."""
        return _SENSOR_ERROR_MESSAGES[self]


_SENSOR_ERROR_MESSAGES: dict[SensorErrorKind, str] = {
    SensorErrorKind.PERMISSION_DENIED: (
        "Location permission denied. Allow location access in the settings."
    ),
    SensorErrorKind.POSITION_UNAVAILABLE: (
        "Position unavailable. Check the GPS signal and restart the device."
    ),
    SensorErrorKind.TIMEOUT: (
        "Timed out acquiring a position. Check the connection and retry "
        "where GPS reception is good."
    ),
    SensorErrorKind.UNKNOWN: "An unknown error occurred. Restart the tracker.",
}


class GeoTrailError(Exception):
    """Base class for GeoTrail errors."""


class SensorError(GeoTrailError):
    """Raised by a position feed when acquisition fails."""

    def __init__(self, kind: SensorErrorKind, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @property
    def user_message(self) -> str:
        return self.kind.user_message


class PathClosedError(GeoTrailError):
    """Raised when a sample is added after tracking was stopped."""


class TrackingStatus(str, Enum):
    """Session state."""

    IDLE = "idle"
    TRACKING = "tracking"


class MessageType(str, Enum):
    """Status banner severity."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class StatusMessage(BaseModel):
    """User-facing banner text with its severity."""

    text: str
    type: MessageType = MessageType.INFO
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def is_expired(self, now: datetime | None = None, display_secs: float = 5.0) -> bool:
        """Check if the banner has been shown for longer than display_secs."""
        now = now or datetime.now(UTC)
        return (now - self.created_at).total_seconds() >= display_secs
