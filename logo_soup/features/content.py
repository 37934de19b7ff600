"""Content-pixel classification and bounding box detection."""

from __future__ import annotations

import numpy as np

from ..io.models import WHITE, BackgroundColor, ContentBox, PixelBuffer


def is_content_pixel(
    r: int,
    g: int,
    b: int,
    a: int,
    threshold: int,
    alpha_only: bool = False,
    bg: BackgroundColor = WHITE,
) -> bool:
    """Return True when a single RGBA pixel counts as logo content.

    In alpha-only mode only opacity matters. Otherwise the pixel must be
    opaque enough and differ from *bg* by more than *threshold* in at least
    one channel.
    """
    if alpha_only:
        return a > threshold

    return a > threshold and (
        abs(r - bg.r) > threshold
        or abs(g - bg.g) > threshold
        or abs(b - bg.b) > threshold
    )


def content_mask(
    pixels: np.ndarray,
    threshold: int,
    alpha_only: bool = False,
    bg: BackgroundColor = WHITE,
) -> np.ndarray:
    """Vectorised ``is_content_pixel`` over an ``(..., 4)`` uint8 array."""
    rgba = pixels.astype(np.int16, copy=False)
    mask = rgba[..., 3] > threshold
    if alpha_only:
        return mask
    deltas = np.abs(rgba[..., :3] - bg.as_array())
    return mask & (deltas > threshold).any(axis=-1)


def detect_content_bounding_box(
    buffer: PixelBuffer,
    threshold: int,
    alpha_only: bool = False,
    bg: BackgroundColor = WHITE,
) -> ContentBox:
    """Return the tight box around content pixels in *buffer*.

    When nothing passes the threshold the full image extent is returned so the
    caller treats the whole image as content.
    """
    full_extent = ContentBox(x=0, y=0, width=buffer.width, height=buffer.height)
    if buffer.width == 0 or buffer.height == 0:
        return full_extent

    mask = content_mask(buffer.array(), threshold, alpha_only, bg)
    rows = np.flatnonzero(mask.any(axis=1))
    cols = np.flatnonzero(mask.any(axis=0))
    if rows.size == 0 or cols.size == 0:
        return full_extent

    min_y, max_y = int(rows[0]), int(rows[-1])
    min_x, max_x = int(cols[0]), int(cols[-1])
    return ContentBox(
        x=min_x,
        y=min_y,
        width=max_x - min_x + 1,
        height=max_y - min_y + 1,
    )
