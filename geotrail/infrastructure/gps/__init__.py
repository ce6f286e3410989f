"""GPS infrastructure - gpsd client, replay feed and geodesic distance."""

from .distance import EARTH_RADIUS_METERS, calculate_distance, distance, path_length
from .gpsd_client import AsyncGPSClient, GPSClientConfig, MockGPSClient
from .replay import ReplayGPSClient, load_samples

__all__ = [
    "AsyncGPSClient",
    "EARTH_RADIUS_METERS",
    "GPSClientConfig",
    "MockGPSClient",
    "ReplayGPSClient",
    "calculate_distance",
    "distance",
    "load_samples",
    "path_length",
]
