"""Decode logo files into bounded RGBA pixel samples."""

from __future__ import annotations

import logging
from io import BytesIO
from os import PathLike
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageCms, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from ..errors import DecodeFailure
from ..io.models import WHITE, BackgroundColor, PixelBuffer, PixelSample

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

ImageRef = Union[str, PathLike]

SVG_DPI = 96
DEFAULT_MAX_SIZE = 200
# alpha below this marks an image as transparent; unrelated to the content threshold
OPAQUE_ALPHA = 250


def extract_pixels(image: ImageRef, max_size: int = DEFAULT_MAX_SIZE) -> PixelSample:
    """Decode *image* and return an RGBA sample no larger than *max_size*."""
    if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size <= 0:
        raise ValueError("max_size must be a positive integer")

    img = load_rgba(image)
    try:
        img = downscale(img, max_size)
        buffer = PixelBuffer(data=img.tobytes(), width=img.width, height=img.height)
    finally:
        img.close()

    pixels = buffer.array()
    has_transparency = detect_transparency(pixels)
    background = WHITE if has_transparency else estimate_background(pixels)
    return PixelSample(
        buffer=buffer, has_transparency=has_transparency, background=background
    )


def load_rgba(image: ImageRef) -> Image.Image:
    """Return *image* as an sRGB Pillow image in RGBA mode."""
    path = Path(image)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeFailure(path, str(exc)) from exc
    if not data:
        raise DecodeFailure(path, "empty file")

    if path.suffix.lower() == ".svg" or _looks_like_svg(data):
        data = rasterize_svg(data, source=path, base_url=path.resolve().as_uri())

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            return to_srgb_rgba(img)
    except (UnidentifiedImageError, DecompressionBombError, OSError, ValueError) as exc:
        raise DecodeFailure(path, str(exc)) from exc


def rasterize_svg(
    svg_bytes: bytes, source: object = "<svg>", base_url: str | None = None
) -> bytes:
    """Render SVG markup to PNG bytes on a transparent canvas at 96 DPI.

    *base_url* resolves relative references such as ``<image href>``.
    """
    if cairosvg is None:
        raise DecodeFailure(source, "cairosvg is required to rasterize SVG input")
    try:
        return cairosvg.svg2png(  # type: ignore[attr-defined]
            bytestring=svg_bytes, url=base_url, dpi=SVG_DPI
        )
    except Exception as exc:  # noqa: BLE001 - cairosvg raises assorted parser errors
        raise DecodeFailure(source, f"SVG rasterization failed ({exc})") from exc


def to_srgb_rgba(img: Image.Image) -> Image.Image:
    """Convert *img* to sRGB using its embedded ICC profile, then force alpha."""
    img = to_8bit(img)
    icc_profile = img.info.get("icc_profile")
    if icc_profile and img.mode in {"RGB", "RGBA", "CMYK"}:
        output_mode = "RGBA" if img.mode == "RGBA" else "RGB"
        try:
            source_profile = ImageCms.ImageCmsProfile(BytesIO(icc_profile))
            srgb_profile = ImageCms.createProfile("sRGB")
            img = ImageCms.profileToProfile(
                img, source_profile, srgb_profile, outputMode=output_mode
            )
        except (ImageCms.PyCMSError, OSError):
            logger.debug("Ignoring unusable ICC profile", exc_info=True)
    return img.convert("RGBA")


def to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16-bit and 32-bit greyscale modes down to 8-bit ``L``."""
    if img.mode.startswith("I;16") or img.mode == "I":
        samples = np.asarray(img).astype(np.int64)
        scaled = np.clip(samples >> 8, 0, 255)
    elif img.mode == "F":
        scaled = np.clip(np.rint(np.asarray(img, dtype=np.float64)), 0, 255)
    else:
        return img
    return Image.fromarray(scaled.astype(np.uint8))


def downscale(img: Image.Image, max_size: int) -> Image.Image:
    """Shrink *img* so its larger side equals *max_size*, keeping aspect ratio."""
    if img.width <= max_size and img.height <= max_size:
        return img
    img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)
    return img


def detect_transparency(pixels: np.ndarray) -> bool:
    """Return True when any pixel falls below the near-opaque alpha level."""
    if pixels.size == 0:
        return False
    return bool((pixels[..., 3] < OPAQUE_ALPHA).any())


def estimate_background(pixels: np.ndarray) -> BackgroundColor:
    """Average the four corner pixels of an opaque image."""
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        return WHITE
    corners = pixels[[0, 0, height - 1, height - 1], [0, width - 1, 0, width - 1], :3]
    sums = corners.astype(np.int64).sum(axis=0)
    # rounds halves up
    r, g, b = ((int(total) + 2) // 4 for total in sums)
    return BackgroundColor(r=r, g=g, b=b)


def _looks_like_svg(image_bytes: bytes) -> bool:
    snippet = image_bytes[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )
