"""Output helpers for persisting analysis results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

from .models import LogoMetrics, NormalizedLayout

METRIC_COLUMNS = ("contentRatio", "pixelDensity", "visualCenterX", "visualCenterY")


def metrics_frame(metrics: Mapping[str, LogoMetrics | None]) -> pd.DataFrame:
    """Return one row per image; undecodable images get empty metric cells."""
    rows: list[dict[str, Any]] = []
    for image, entry in metrics.items():
        row: dict[str, Any] = {"image": image, "analyzed": entry is not None}
        values = entry.to_dict() if entry is not None else {}
        for column in METRIC_COLUMNS:
            row[column] = values.get(column)
        rows.append(row)
    return pd.DataFrame(rows, columns=["image", "analyzed", *METRIC_COLUMNS])


def write_metrics_table(path: Path, metrics: Mapping[str, LogoMetrics | None]) -> Path:
    """Write *metrics* to *path* as parquet and return the path."""
    df = metrics_frame(metrics)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=False, engine="pyarrow")
    return path


def write_layouts(
    path: Path,
    layouts: Mapping[str, NormalizedLayout],
    transforms: Mapping[str, str | None] | None = None,
) -> Path:
    """Write per-image layouts (and optional CSS transforms) to *path* as JSON."""
    transforms = transforms or {}
    serialised: Sequence[dict[str, Any]] = [
        {"image": image, **layout.to_dict(), "transform": transforms.get(image)}
        for image, layout in layouts.items()
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(serialised, indent=2), encoding="utf-8")
    return path
