"""Analysis and layout settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import ConfigError

DEFAULT_SAMPLE_MAX_SIZE = 200
DEFAULT_CONTRAST_THRESHOLD = 10

DEFAULT_BASE_SIZE = 48.0
DEFAULT_SCALE_FACTOR = 0.5
DEFAULT_DENSITY_FACTOR = 0.5

ALIGN_MODES = ("bounds", "visual-center", "visual-center-x", "visual-center-y")
DEFAULT_ALIGN_BY = "visual-center-y"

# accepted spellings for mapping-based configuration
_ANALYSIS_KEYS = {
    "sample_max_size": "sample_max_size",
    "sampleMaxSize": "sample_max_size",
    "contrast_threshold": "contrast_threshold",
    "contrastThreshold": "contrast_threshold",
    "cache_metrics": "cache_metrics",
    "cache.metrics": "cache_metrics",
}


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    """Settings that influence the cached metrics for an image."""

    sample_max_size: int = DEFAULT_SAMPLE_MAX_SIZE
    contrast_threshold: int = DEFAULT_CONTRAST_THRESHOLD
    cache_metrics: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.sample_max_size, bool) or not isinstance(
            self.sample_max_size, int
        ):
            raise ConfigError("sample_max_size must be an integer")
        if self.sample_max_size <= 0:
            raise ConfigError("sample_max_size must be positive")
        if not 0 <= _as_int(self.contrast_threshold, "contrast_threshold") <= 255:
            raise ConfigError("contrast_threshold must be within 0-255")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> "AnalysisConfig":
        """Build a config from snake_case or plugin-style option names."""
        values: dict[str, Any] = {}
        for key, value in options.items():
            field_name = _ANALYSIS_KEYS.get(key)
            if field_name is None:
                raise ConfigError(f"Unknown analysis option: {key}")
            values[field_name] = value
        if "sample_max_size" in values:
            values["sample_max_size"] = _as_int(values["sample_max_size"], "sample_max_size")
        if "contrast_threshold" in values:
            values["contrast_threshold"] = _as_int(
                values["contrast_threshold"], "contrast_threshold"
            )
        if "cache_metrics" in values:
            values["cache_metrics"] = bool(values["cache_metrics"])
        return cls(**values)


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Per-render settings for turning metrics into display geometry."""

    base_size: float = DEFAULT_BASE_SIZE
    scale_factor: float = DEFAULT_SCALE_FACTOR
    density_factor: float = DEFAULT_DENSITY_FACTOR
    align_by: str = DEFAULT_ALIGN_BY

    def __post_init__(self) -> None:
        if self.base_size <= 0:
            raise ConfigError("base_size must be positive")
        if not 0.0 <= self.scale_factor <= 1.0:
            raise ConfigError("scale_factor must be within 0-1")
        if not 0.0 <= self.density_factor <= 1.0:
            raise ConfigError("density_factor must be within 0-1")
        if self.align_by not in ALIGN_MODES:
            raise ConfigError(
                f"align_by must be one of {', '.join(ALIGN_MODES)}; got {self.align_by!r}"
            )


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer") from exc
