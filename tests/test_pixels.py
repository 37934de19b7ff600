"""Tests for decoding images into pixel samples."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from types import SimpleNamespace
from typing import Callable

import numpy as np
import pytest
from PIL import Image, ImageCms

from conftest import canvas
from logo_soup.errors import DecodeFailure
from logo_soup.extract import pixels as pixel_source
from logo_soup.extract.pixels import estimate_background, extract_pixels, to_8bit
from logo_soup.features.content import detect_content_bounding_box
from logo_soup.io.models import WHITE, BackgroundColor, ContentBox


def test_opaque_png_samples_corner_background(save_png: Callable[..., Path]) -> None:
    pixels = canvas(40, 20, (10, 120, 240, 255))
    pixels[5:15, 10:30] = (250, 250, 0, 255)
    sample = extract_pixels(save_png(pixels, opaque=True))

    assert (sample.width, sample.height) == (40, 20)
    assert len(sample.buffer.data) == 40 * 20 * 4
    assert not sample.has_transparency
    assert sample.background == BackgroundColor(10, 120, 240)
    # alpha channel is forced for RGB sources
    assert sample.buffer.pixel(0, 0) == (10, 120, 240, 255)


def test_transparent_png_defaults_to_white(save_png: Callable[..., Path]) -> None:
    pixels = canvas(30, 30, (0, 0, 0, 0))
    pixels[10:20, 10:20] = (200, 0, 0, 255)
    sample = extract_pixels(save_png(pixels))

    assert sample.has_transparency
    assert sample.background == WHITE


def test_near_opaque_alpha_still_counts_as_transparency(
    save_png: Callable[..., Path],
) -> None:
    pixels = canvas(10, 10, (0, 0, 0, 255))
    pixels[4, 4, 3] = 249
    assert extract_pixels(save_png(pixels)).has_transparency

    pixels[4, 4, 3] = 250
    assert not extract_pixels(save_png(pixels, "opaque.png")).has_transparency


def test_large_images_are_downscaled(save_png: Callable[..., Path]) -> None:
    pixels = canvas(400, 100, (255, 255, 255, 255))
    sample = extract_pixels(save_png(pixels), max_size=200)
    assert (sample.width, sample.height) == (200, 50)


def test_small_images_keep_their_size(save_png: Callable[..., Path]) -> None:
    sample = extract_pixels(save_png(canvas(120, 80, (0, 0, 0, 255))), max_size=200)
    assert (sample.width, sample.height) == (120, 80)


def test_palette_images_are_expanded(tmp_path: Path) -> None:
    image = Image.new("P", (12, 6), 0)
    image.putpalette([255, 255, 255, 0, 0, 0] + [0] * 762)
    image.paste(1, (2, 1, 10, 5))
    path = tmp_path / "palette.gif"
    image.save(path)

    sample = extract_pixels(path)
    box = detect_content_bounding_box(
        sample.buffer, 10, sample.has_transparency, sample.background
    )
    assert box == ContentBox(2, 1, 8, 4)


def test_background_rounds_halves_up() -> None:
    pixels = canvas(3, 3, (0, 0, 0, 255))
    pixels[0, 0, :3] = (10, 0, 255)
    pixels[0, 2, :3] = (10, 1, 255)
    pixels[2, 0, :3] = (11, 0, 255)
    pixels[2, 2, :3] = (11, 1, 255)
    assert estimate_background(pixels) == BackgroundColor(11, 1, 255)


def test_corrupt_file_raises_decode_failure(tmp_path: Path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not a png")
    with pytest.raises(DecodeFailure):
        extract_pixels(path)


def test_missing_and_empty_files_raise_decode_failure(tmp_path: Path) -> None:
    with pytest.raises(DecodeFailure):
        extract_pixels(tmp_path / "missing.png")
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")
    with pytest.raises(DecodeFailure):
        extract_pixels(empty)


@pytest.mark.parametrize("max_size", [0, -5, 2.5])
def test_invalid_max_size(tmp_path: Path, max_size: object) -> None:
    with pytest.raises(ValueError):
        extract_pixels(tmp_path / "any.png", max_size)  # type: ignore[arg-type]


@pytest.mark.skipif(pixel_source.cairosvg is None, reason="cairosvg unavailable")
def test_svg_is_rasterized_on_transparent_canvas(tmp_path: Path) -> None:
    path = tmp_path / "mark.svg"
    path.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50">'
        '<rect x="10" y="10" width="80" height="30" fill="#000"/></svg>',
        encoding="utf-8",
    )
    sample = extract_pixels(path)
    assert (sample.width, sample.height) == (100, 50)
    assert sample.has_transparency

    box = detect_content_bounding_box(sample.buffer, 10, alpha_only=True)
    assert box == ContentBox(10, 10, 80, 30)


def test_svg_without_cairosvg_is_a_decode_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(pixel_source, "cairosvg", None)
    path = tmp_path / "mark.svg"
    path.write_text('<svg xmlns="http://www.w3.org/2000/svg"/>', encoding="utf-8")
    with pytest.raises(DecodeFailure):
        extract_pixels(path)


def test_sixteen_bit_greyscale_is_scaled_not_clipped(tmp_path: Path) -> None:
    samples = np.full((50, 100), 65535, dtype=np.uint16)
    samples[10:40, 10:90] = 32768
    path = tmp_path / "grey16.png"
    Image.fromarray(samples).save(path)

    sample = extract_pixels(path)
    assert sample.buffer.pixel(50, 25) == (128, 128, 128, 255)
    assert sample.background == WHITE
    box = detect_content_bounding_box(sample.buffer, 10, bg=sample.background)
    assert box == ContentBox(10, 10, 80, 30)


def test_to_8bit_leaves_byte_modes_alone() -> None:
    image = Image.new("RGB", (2, 2), (1, 2, 3))
    assert to_8bit(image) is image
    floats = to_8bit(Image.new("F", (2, 2), 300.0))
    assert floats.mode == "L"
    assert floats.getpixel((0, 0)) == 255


def _srgb_profile_bytes() -> bytes:
    return ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB")).tobytes()


@pytest.mark.parametrize("mode", ["RGB", "RGBA"])
def test_embedded_profile_is_converted_to_srgb(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, mode: str
) -> None:
    calls: list[str | None] = []
    convert = ImageCms.profileToProfile

    def _recording(*args: object, **kwargs: object) -> Image.Image:
        calls.append(kwargs.get("outputMode"))  # type: ignore[arg-type]
        return convert(*args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(ImageCms, "profileToProfile", _recording)
    image = Image.new(mode, (40, 20), (255, 255, 255, 255)[: len(mode)])
    image.paste((0, 0, 0, 255)[: len(mode)], (10, 5, 30, 15))
    path = tmp_path / "profiled.png"
    image.save(path, icc_profile=_srgb_profile_bytes())

    sample = extract_pixels(path)
    assert calls == [mode]
    assert not sample.has_transparency
    assert all(abs(channel - 255) <= 3 for channel in sample.buffer.pixel(0, 0)[:3])
    assert all(channel <= 3 for channel in sample.buffer.pixel(20, 10)[:3])
    box = detect_content_bounding_box(sample.buffer, 10, bg=sample.background)
    assert box == ContentBox(10, 5, 20, 10)


def test_unusable_profile_still_decodes(tmp_path: Path) -> None:
    image = Image.new("RGB", (30, 30), (255, 255, 255))
    image.paste((0, 0, 0), (5, 5, 25, 15))
    path = tmp_path / "bad_profile.png"
    image.save(path, icc_profile=b"this is not an icc profile")

    sample = extract_pixels(path)
    assert sample.buffer.pixel(0, 0) == (255, 255, 255, 255)
    box = detect_content_bounding_box(sample.buffer, 10, bg=sample.background)
    assert box == ContentBox(5, 5, 20, 10)


def test_cmyk_jpeg_decodes_to_rgba(tmp_path: Path) -> None:
    image = Image.new("CMYK", (64, 48), (0, 0, 0, 0))
    image.paste((0, 0, 0, 255), (16, 8, 48, 32))
    path = tmp_path / "print.jpg"
    image.save(path, quality=100, subsampling=0)

    sample = extract_pixels(path)
    assert len(sample.buffer.data) == 64 * 48 * 4
    assert not sample.has_transparency
    box = detect_content_bounding_box(sample.buffer, 10, bg=sample.background)
    assert box == ContentBox(16, 8, 32, 24)


def test_svg_references_resolve_against_file_location(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    received: dict[str, object] = {}

    def _svg2png(**kwargs: object) -> bytes:
        received.update(kwargs)
        out = BytesIO()
        Image.new("RGBA", (4, 2), (0, 0, 0, 255)).save(out, format="PNG")
        return out.getvalue()

    monkeypatch.setattr(pixel_source, "cairosvg", SimpleNamespace(svg2png=_svg2png))
    path = tmp_path / "mark.svg"
    path.write_text(
        '<svg xmlns="http://www.w3.org/2000/svg"><image href="icon.png"/></svg>',
        encoding="utf-8",
    )

    sample = extract_pixels(path)
    assert (sample.width, sample.height) == (4, 2)
    assert received["url"] == path.resolve().as_uri()
    assert received["dpi"] == 96
