"""Analyse logos and compute harmonised display layouts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable

from tqdm import tqdm

from .cache.store import MetricsCache
from .config import AnalysisConfig, LayoutConfig
from .errors import DecodeFailure, DegenerateContent
from .extract.pixels import ImageRef, extract_pixels
from .features.content import detect_content_bounding_box
from .features.visual import calculate_visual_center, measure_pixel_density
from .io.models import LogoMetrics, NormalizedLayout
from .layout.normalize import normalize

logger = logging.getLogger(__name__)

Identity = Callable[[ImageRef], str]


def file_identity(image: ImageRef) -> str:
    """Return a stable cache key for *image* based on its absolute path."""
    return str(Path(image).resolve())


def compute_metrics(
    image: ImageRef,
    sample_max_size: int = 200,
    contrast_threshold: int = 10,
) -> LogoMetrics:
    """Measure *image*, raising ``DecodeFailure`` or ``DegenerateContent``."""
    sample = extract_pixels(image, sample_max_size)
    alpha_only = sample.has_transparency
    box = detect_content_bounding_box(
        sample.buffer, contrast_threshold, alpha_only, sample.background
    )
    if box.is_empty:
        raise DegenerateContent(f"No measurable content in {image}")

    offset_x, offset_y = calculate_visual_center(
        sample.buffer, box, contrast_threshold, alpha_only, sample.background
    )
    density = measure_pixel_density(sample.buffer, box, contrast_threshold, alpha_only)
    return LogoMetrics(
        content_ratio=box.width / box.height,
        pixel_density=density,
        visual_center_x=offset_x / box.width,
        visual_center_y=offset_y / box.height,
    )


def analyze(
    image: ImageRef,
    config: AnalysisConfig | None = None,
    cache: MetricsCache | None = None,
    identity: Identity = file_identity,
) -> LogoMetrics | None:
    """Return metrics for *image*, or None when it cannot be measured.

    Results are read from and written to *cache* only when
    ``config.cache_metrics`` is enabled.
    """
    config = config or AnalysisConfig()
    key = identity(image) if cache is not None and config.cache_metrics else None
    if key is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    try:
        metrics = compute_metrics(
            image, config.sample_max_size, config.contrast_threshold
        )
    except DecodeFailure as exc:
        logger.debug("Skipping undecodable image %s: %s", image, exc.reason)
        return None
    except DegenerateContent:
        logger.debug("Skipping image without content: %s", image, exc_info=True)
        return None

    if key is not None:
        cache.set(key, metrics)
    return metrics


def invalidate(
    image: ImageRef,
    cache: MetricsCache,
    identity: Identity = file_identity,
) -> None:
    """Drop cached metrics for *image*; call whenever its bytes change."""
    cache.remove(identity(image))


def analyze_many(
    images: Iterable[ImageRef],
    config: AnalysisConfig | None = None,
    cache: MetricsCache | None = None,
    identity: Identity = file_identity,
    progress: bool = False,
) -> Dict[str, LogoMetrics | None]:
    """Analyse each image independently and key the results by identity."""
    results: Dict[str, LogoMetrics | None] = {}
    iterator = tqdm(
        images, desc="Analysing logos", unit="logo", leave=False, disable=not progress
    )
    for image in iterator:
        results[identity(image)] = analyze(image, config, cache, identity)
    return results


def logo_layout(
    image: ImageRef,
    layout: LayoutConfig | None = None,
    config: AnalysisConfig | None = None,
    cache: MetricsCache | None = None,
    identity: Identity = file_identity,
) -> NormalizedLayout:
    """Analyse *image* and return its display layout, defaulting to a square."""
    layout = layout or LayoutConfig()
    metrics = analyze(image, config, cache, identity)
    return normalize(
        metrics,
        base_size=layout.base_size,
        scale_factor=layout.scale_factor,
        density_factor=layout.density_factor,
    )
