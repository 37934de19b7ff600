"""Turn cached logo metrics into display dimensions and alignment offsets."""

from __future__ import annotations

import math

from ..config import (
    ALIGN_MODES,
    DEFAULT_ALIGN_BY,
    DEFAULT_BASE_SIZE,
    DEFAULT_DENSITY_FACTOR,
    DEFAULT_SCALE_FACTOR,
)
from ..io.models import LogoMetrics, NormalizedLayout

REFERENCE_DENSITY = 0.35
MIN_DENSITY_SCALE = 0.5
MAX_DENSITY_SCALE = 2.0
# offsets at or below this many pixels are not worth a transform
MIN_VISIBLE_OFFSET = 0.5


def normalize(
    metrics: LogoMetrics | None,
    base_size: float = DEFAULT_BASE_SIZE,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
    density_factor: float = DEFAULT_DENSITY_FACTOR,
) -> NormalizedLayout:
    """Return the display size and visual-centre offsets for one logo.

    Width follows ``ratio ** scale_factor * base_size``: a scale factor of 0
    gives every logo the same height, 1 gives every logo the same area. Dense
    logos are then shrunk and airy ones enlarged, within 0.5x to 2x. Missing
    metrics yield a ``base_size`` square.
    """
    if metrics is None or not metrics.content_ratio:
        side = int(base_size)
        return NormalizedLayout(width=side, height=side)

    ratio = metrics.content_ratio
    width = ratio**scale_factor * base_size
    height = width / ratio

    scale = density_scale(metrics.pixel_density, density_factor)
    width *= scale
    height *= scale

    return NormalizedLayout(
        width=int(_round_half_away(width)),
        height=int(_round_half_away(height)),
        offset_x=_round_half_away(-metrics.visual_center_x * width, 1),
        offset_y=_round_half_away(-metrics.visual_center_y * height, 1),
    )


def density_scale(pixel_density: float | None, density_factor: float) -> float:
    """Return the clamped size multiplier compensating for visual weight."""
    if density_factor <= 0 or not pixel_density or pixel_density <= 0:
        return 1.0
    density_ratio = pixel_density / REFERENCE_DENSITY
    scale = (1 / density_ratio) ** (density_factor * 0.5)
    return max(MIN_DENSITY_SCALE, min(MAX_DENSITY_SCALE, scale))


def alignment_offsets(
    layout: NormalizedLayout, align_by: str = DEFAULT_ALIGN_BY
) -> tuple[float, float]:
    """Return the ``(x, y)`` translation to apply for an alignment mode."""
    if align_by not in ALIGN_MODES:
        raise ValueError(f"Unknown alignment mode: {align_by!r}")
    if align_by == "bounds":
        return 0.0, 0.0
    offset_x = layout.offset_x if align_by in {"visual-center", "visual-center-x"} else 0.0
    offset_y = layout.offset_y if align_by in {"visual-center", "visual-center-y"} else 0.0
    return offset_x, offset_y


def css_transform(
    layout: NormalizedLayout, align_by: str = DEFAULT_ALIGN_BY
) -> str | None:
    """Return a CSS ``translate()`` for *layout*, or None when it is negligible."""
    offset_x, offset_y = alignment_offsets(layout, align_by)
    if abs(offset_x) <= MIN_VISIBLE_OFFSET and abs(offset_y) <= MIN_VISIBLE_OFFSET:
        return None
    return f"translate({_format_px(offset_x)}px, {_format_px(offset_y)}px)"


def _round_half_away(value: float, digits: int = 0) -> float:
    factor = 10**digits
    rounded = math.floor(abs(value) * factor + 0.5) / factor
    # adding 0.0 turns -0.0 into 0.0
    return math.copysign(rounded, value) + 0.0


def _format_px(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
