"""
GeoTrail image sink.

Draws path primitives into a Pillow RGB image that can be saved as PNG.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)


class PillowSink:
    """
    DrawSink backed by a Pillow image.

    Points given to move_to/line_to are buffered as the current sub-path and
    drawn as a polyline on stroke().
    """

    def __init__(self, width: float, height: float, background: str = "#ffffff") -> None:
        self.background = background
        self._current: list[tuple[float, float]] = []
        self._image: Image.Image
        self._draw: ImageDraw.ImageDraw
        self._new_image(width, height)

    @staticmethod
    def _pixel_size(width: float, height: float) -> tuple[int, int]:
        # Pillow needs at least a 1x1 image; non-positive sizes degrade to that
        return max(1, int(round(width))), max(1, int(round(height)))

    def _new_image(self, width: float, height: float) -> None:
        self._image = Image.new("RGB", self._pixel_size(width, height), self.background)
        self._draw = ImageDraw.Draw(self._image)

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def resize(self, width: float, height: float) -> None:
        """Replace the backing image with a blank one of the new size."""
        self._new_image(width, height)
        self._current = []

    def clear_surface(self, width: float, height: float) -> None:
        """Blank the surface, reallocating the image when the size changed."""
        if self._pixel_size(width, height) != self.size:
            logger.debug("Image resized from %s to %sx%s", self.size, width, height)
            self._new_image(width, height)
        else:
            self._draw.rectangle((0, 0, self._image.width, self._image.height), fill=self.background)
        self._current = []

    def begin_shape(self) -> None:
        self._current = []

    def move_to(self, x: float, y: float) -> None:
        self._current = [(x, y)]

    def line_to(self, x: float, y: float) -> None:
        self._current.append((x, y))

    def stroke(self, color: str, width: float) -> None:
        if len(self._current) > 1:
            self._draw.line(self._current, fill=color, width=max(1, int(round(width))), joint="curve")
        self._current = []

    def fill_circle(self, x: float, y: float, radius: float, color: str) -> None:
        self._draw.ellipse((x - radius, y - radius, x + radius, y + radius), fill=color)
        self._current = []

    def save(self, path: Path | str) -> Path:
        """Write the image as PNG, creating parent directories."""
        target = Path(path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        self._image.save(target, format="PNG")
        logger.info("Saved path image to %s", target)
        return target
