"""
GeoTrail drawing sinks.

Provides:
- RecordingSink: in-memory call log
- PillowSink: raster image backed by Pillow
"""

from .image_sink import PillowSink
from .recording import DrawCall, RecordingSink

__all__ = [
    "DrawCall",
    "PillowSink",
    "RecordingSink",
]
