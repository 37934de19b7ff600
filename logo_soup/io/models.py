"""Data models shared across the logo analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import numpy as np

CHANNELS = 4


@dataclass(frozen=True, slots=True)
class BackgroundColor:
    """Estimated canvas colour used for colour-difference classification."""

    r: int = 255
    g: int = 255
    b: int = 255

    def as_array(self) -> np.ndarray:
        return np.array([self.r, self.g, self.b], dtype=np.int16)


WHITE = BackgroundColor()


@dataclass(frozen=True, slots=True)
class PixelBuffer:
    """Row-major interleaved RGBA bytes for a ``width`` by ``height`` image."""

    data: bytes
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("Pixel buffer dimensions must not be negative")
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.data)} bytes, expected {expected}"
            )

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "PixelBuffer":
        """Build a buffer from an ``(height, width, 4)`` uint8 array."""
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError("Expected an array shaped (height, width, 4)")
        height, width = pixels.shape[:2]
        data = np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()
        return cls(data=data, width=int(width), height=int(height))

    def array(self) -> np.ndarray:
        """Return a read-only ``(height, width, 4)`` view of the pixel bytes."""
        flat = np.frombuffer(self.data, dtype=np.uint8)
        return flat.reshape(self.height, self.width, CHANNELS)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        i = (y * self.width + x) * CHANNELS
        r, g, b, a = self.data[i : i + CHANNELS]
        return r, g, b, a


@dataclass(frozen=True, slots=True)
class PixelSample:
    """Decoded, downsampled image plus its background estimate."""

    buffer: PixelBuffer
    has_transparency: bool
    background: BackgroundColor = WHITE

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height


@dataclass(frozen=True, slots=True)
class ContentBox:
    """Tight bounding rectangle of content pixels in buffer coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)


@dataclass(frozen=True, slots=True)
class LogoMetrics:
    """Cacheable per-image measurements.

    ``visual_center_x`` and ``visual_center_y`` are the weighted centroid's
    offset from the content box centre, divided by the box width and height.
    """

    content_ratio: float
    pixel_density: float
    visual_center_x: float = 0.0
    visual_center_y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "contentRatio": self.content_ratio,
            "pixelDensity": self.pixel_density,
            "visualCenterX": self.visual_center_x,
            "visualCenterY": self.visual_center_y,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LogoMetrics":
        """Rebuild metrics from the camelCase mapping produced by ``to_dict``."""
        try:
            ratio = float(payload["contentRatio"])
            density = float(payload["pixelDensity"])
            center_x = float(payload.get("visualCenterX", 0.0) or 0.0)
            center_y = float(payload.get("visualCenterY", 0.0) or 0.0)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid metrics payload: {payload!r}") from exc
        if not ratio > 0:
            raise ValueError(f"contentRatio must be positive: {payload!r}")
        return cls(
            content_ratio=ratio,
            pixel_density=density,
            visual_center_x=center_x,
            visual_center_y=center_y,
        )


@dataclass(frozen=True, slots=True)
class NormalizedLayout:
    """Display geometry for one logo at render time."""

    width: int
    height: int
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "width": self.width,
            "height": self.height,
            "offsetX": self.offset_x,
            "offsetY": self.offset_y,
        }
