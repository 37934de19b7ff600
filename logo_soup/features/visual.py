"""Visual centre and density measurements within a content box."""

from __future__ import annotations

import numpy as np

from ..io.models import WHITE, BackgroundColor, ContentBox, PixelBuffer
from .content import content_mask

EMPTY_BOX_DENSITY = 0.5


def _box_region(buffer: PixelBuffer, box: ContentBox) -> np.ndarray:
    pixels = buffer.array()
    return pixels[box.y : box.y + box.height, box.x : box.x + box.width]


def calculate_visual_center(
    buffer: PixelBuffer,
    box: ContentBox,
    threshold: int,
    alpha_only: bool = False,
    bg: BackgroundColor = WHITE,
) -> tuple[float, float]:
    """Return the weighted centroid's ``(offset_x, offset_y)`` from the box centre.

    Offsets are in pixels. Opaque pixels carry more weight, and in colour mode
    so do pixels further from *bg*; the square root of the colour distance
    keeps a few high-contrast pixels from dominating.
    """
    if box.is_empty:
        return 0.0, 0.0

    region = _box_region(buffer, box)
    mask = content_mask(region, threshold, alpha_only, bg)
    opacity = region[..., 3].astype(np.float64) / 255.0

    if alpha_only:
        weights = opacity
    else:
        deltas = region[..., :3].astype(np.float64) - bg.as_array()
        color_distance = np.sqrt((deltas * deltas).sum(axis=-1))
        weights = np.sqrt(color_distance) * opacity
    weights = np.where(mask, weights, 0.0)

    total_weight = float(weights.sum())
    if total_weight == 0.0:
        return 0.0, 0.0

    rows, cols = np.indices(weights.shape, dtype=np.float64)
    weighted_x = float(((cols + 0.5) * weights).sum())
    weighted_y = float(((rows + 0.5) * weights).sum())
    return (
        weighted_x / total_weight - box.width / 2,
        weighted_y / total_weight - box.height / 2,
    )


def measure_pixel_density(
    buffer: PixelBuffer,
    box: ContentBox,
    threshold: int,
    alpha_only: bool = False,
) -> float:
    """Return how solid the logo is within *box*, from 0 (empty) to 1 (solid).

    Colour-mode classification here compares against white rather than the
    sampled background.
    """
    total_pixels = box.area
    if total_pixels == 0:
        return EMPTY_BOX_DENSITY

    region = _box_region(buffer, box)
    mask = content_mask(region, threshold, alpha_only, WHITE)
    filled_pixels = int(mask.sum())
    if filled_pixels == 0:
        return 0.0

    total_opacity = float(region[..., 3][mask].astype(np.float64).sum() / 255.0)
    filled_fraction = filled_pixels / total_pixels
    average_opacity = total_opacity / filled_pixels
    return filled_fraction * average_opacity
