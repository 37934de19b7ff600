"""Command-line interface for the logo_soup project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from .cache.store import JsonFileMetricsCache
from .config import (
    ALIGN_MODES,
    DEFAULT_ALIGN_BY,
    DEFAULT_BASE_SIZE,
    DEFAULT_CONTRAST_THRESHOLD,
    DEFAULT_DENSITY_FACTOR,
    DEFAULT_SAMPLE_MAX_SIZE,
    DEFAULT_SCALE_FACTOR,
    AnalysisConfig,
    LayoutConfig,
)
from .errors import ConfigError
from .io.models import NormalizedLayout
from .io.outputs import write_layouts, write_metrics_table
from .layout.normalize import css_transform, normalize
from .soup import analyze_many, file_identity, invalidate

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp", ".tif", ".tiff", ".ico"}


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the logo analysis run."""
    parser = argparse.ArgumentParser(
        description="Measure logos and compute visually balanced display sizes."
    )
    parser.add_argument(
        "--input",
        required=True,
        action="append",
        help="Image file or directory of images; may be given more than once.",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Directory path where metrics and layouts will be written.",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=DEFAULT_SAMPLE_MAX_SIZE,
        help="Largest sample dimension in pixels before analysis (default 200).",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=DEFAULT_CONTRAST_THRESHOLD,
        help="Contrast/alpha threshold for content pixels (default 10).",
    )
    parser.add_argument("--base-size", type=float, default=DEFAULT_BASE_SIZE)
    parser.add_argument("--scale-factor", type=float, default=DEFAULT_SCALE_FACTOR)
    parser.add_argument("--density-factor", type=float, default=DEFAULT_DENSITY_FACTOR)
    parser.add_argument(
        "--align-by",
        choices=ALIGN_MODES,
        default=DEFAULT_ALIGN_BY,
        help="Which visual-centre offsets to turn into CSS transforms.",
    )
    parser.add_argument(
        "--cache",
        default=None,
        help="JSON file used to memoise metrics between runs.",
    )
    parser.add_argument(
        "--invalidate",
        action="store_true",
        help="Drop cached metrics for the given inputs before analysing.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def collect_images(entries: Iterable[str]) -> list[Path]:
    """Expand files and directories in *entries* into a sorted list of images."""
    images: list[Path] = []
    for entry in entries:
        path = Path(entry)
        if not path.exists():
            raise FileNotFoundError(f"Input path does not exist: {path}")
        if path.is_dir():
            images.extend(
                sorted(
                    child
                    for child in path.iterdir()
                    if child.is_file() and child.suffix.lower() in IMAGE_SUFFIXES
                )
            )
        else:
            images.append(path)
    return images


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        layout_config = LayoutConfig(
            base_size=args.base_size,
            scale_factor=args.scale_factor,
            density_factor=args.density_factor,
            align_by=args.align_by,
        )
        analysis_config = AnalysisConfig(
            sample_max_size=args.max_size,
            contrast_threshold=args.threshold,
            cache_metrics=args.cache is not None,
        )
    except ConfigError as exc:
        print(f"[error] {exc}")
        return 2

    images = collect_images(args.input)
    print(len(images))
    if not images:
        print("[warn] no input images found")
        return 1

    cache = JsonFileMetricsCache(args.cache) if args.cache else None
    if args.invalidate and cache is None:
        print("[warn] --invalidate has no effect without --cache")
    elif args.invalidate:
        for image in images:
            invalidate(image, cache)
        print(f"[cache] invalidated {len(images)} entries in {cache.path}")

    metrics = analyze_many(images, analysis_config, cache, progress=True)

    layouts: dict[str, NormalizedLayout] = {}
    transforms: dict[str, str | None] = {}
    for image in images:
        key = file_identity(image)
        entry = metrics.get(key)
        if entry is None:
            print(f"[warn] {image}: no metrics, using default size")
        layout = normalize(
            entry,
            base_size=layout_config.base_size,
            scale_factor=layout_config.scale_factor,
            density_factor=layout_config.density_factor,
        )
        layouts[key] = layout
        transforms[key] = css_transform(layout, layout_config.align_by)

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    metrics_path = write_metrics_table(out_dir / "metrics.parquet", metrics)
    layouts_path = write_layouts(out_dir / "layouts.json", layouts, transforms)

    analyzed = sum(1 for entry in metrics.values() if entry is not None)
    print(f"[metrics] wrote {len(metrics)} rows to {metrics_path}")
    print(f"[layouts] wrote {len(layouts)} layouts to {layouts_path}")
    print(f"Analysed: {analyzed} of {len(images)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
