"""Shared helpers for building synthetic logo images."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import numpy as np
import pytest
from PIL import Image

from logo_soup.io.models import PixelBuffer


def canvas(width: int, height: int, color: tuple[int, int, int, int]) -> np.ndarray:
    """Return an ``(height, width, 4)`` uint8 array filled with *color*."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


def buffer_of(pixels: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_array(pixels)


@pytest.fixture
def save_png(tmp_path: Path) -> Callable[..., Path]:
    """Write an RGBA (or RGB when *opaque*) array to a PNG under tmp_path."""

    def _save(pixels: np.ndarray, name: str = "logo.png", opaque: bool = False) -> Path:
        path = tmp_path / name
        image = Image.fromarray(pixels)
        if opaque:
            image = image.convert("RGB")
        image.save(path, format="PNG")
        return path

    return _save


@pytest.fixture
def black_bar_on_white(save_png: Callable[..., Path]) -> Path:
    """A 100x50 solid black logo inset on an opaque white 160x110 canvas."""
    pixels = canvas(160, 110, (255, 255, 255, 255))
    pixels[30:80, 30:130] = (0, 0, 0, 255)
    return save_png(pixels, "black_bar.png", opaque=True)
