"""GeoTrail Domain Layer - Core models, enums and errors."""

from .models import (
    GeoPoint,
    GeoTrailError,
    MessageType,
    PathClosedError,
    SensorError,
    SensorErrorKind,
    StatusMessage,
    TrackingStatus,
)

__all__ = [
    "GeoPoint",
    "GeoTrailError",
    "MessageType",
    "PathClosedError",
    "SensorError",
    "SensorErrorKind",
    "StatusMessage",
    "TrackingStatus",
]
