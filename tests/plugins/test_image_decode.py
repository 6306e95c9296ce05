"""Tests for decoding and pixel layout normalisation."""

from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

from cl_image_tools.common.errors import ImageDecodeError
from cl_image_tools.plugins.image_conversion.algo.image_decode import (
    decode_image,
    describe_mode,
    normalize_mode,
    stored_layout,
)


@pytest.mark.parametrize("mode", ["L", "LA", "RGB", "RGBA"])
def test_normalize_working_modes_copies(mode: str):
    """Test working modes are kept but never shared."""
    img = Image.new(mode, (4, 4))

    normalized = normalize_mode(img)

    assert normalized.mode == mode
    assert normalized is not img


def test_normalize_sixteen_bit_gray_scales():
    """Test 16-bit gray is scaled, not clipped, into 8 bits."""
    img = Image.new("I;16", (2, 2), color=65535)

    normalized = normalize_mode(img)

    assert normalized.mode == "L"
    assert normalized.getpixel((0, 0)) == 255


def test_normalize_float_gray_clips():
    """Test float gray is clipped into 8 bits."""
    img = Image.new("F", (2, 2), color=300.0)

    assert normalize_mode(img).getpixel((1, 1)) == 255


def test_normalize_palette_with_transparency():
    """Test transparent palettes become RGBA."""
    img = Image.new("P", (4, 4), color=0)
    img.info["transparency"] = 0

    assert normalize_mode(img).mode == "RGBA"


def test_normalize_palette_and_cmyk():
    """Test opaque palettes and CMYK become RGB."""
    assert normalize_mode(Image.new("P", (4, 4))).mode == "RGB"
    assert normalize_mode(Image.new("CMYK", (4, 4))).mode == "RGB"
    assert normalize_mode(Image.new("1", (4, 4))).mode == "L"


def test_describe_mode():
    """Test human-readable pixel layouts."""
    assert describe_mode("RGB") == "8-bit RGB"
    assert describe_mode("LA") == "8-bit grayscale + alpha"
    assert describe_mode("I;16") == "16-bit grayscale"
    assert describe_mode("F") == "32-bit float grayscale"
    assert describe_mode("XYZ") == "unknown format"


def test_decode_image(synthetic_image: Path):
    """Test decoding returns a usable image and its stored mode."""
    image, source_mode = decode_image(synthetic_image)

    assert source_mode == "RGB"
    assert image.size == (800, 600)
    assert image.getpixel((0, 0)) is not None


def test_decode_image_failure(tmp_path: Path):
    """Test non-images raise ImageDecodeError."""
    path = tmp_path / "fake.png"
    _ = path.write_bytes(b"\x00" * 64)

    with pytest.raises(ImageDecodeError):
        _ = decode_image(path)


@pytest.mark.parametrize(
    ("color_type", "layout", "working_mode"),
    [
        (0, "I;16", "L"),
        (2, "RGB;16", "RGB"),
        (4, "LA;16", "LA"),
        (6, "RGBA;16", "RGBA"),
    ],
)
def test_decode_image_reports_sixteen_bit_layouts(
    make_png16: Callable[[str, int, int, int], Path],
    color_type: int,
    layout: str,
    working_mode: str,
):
    """Test 16-bit PNGs keep their stored depth even though Pillow loads 8 bits."""
    path = make_png16(f"deep_{color_type}.png", 4, 3, color_type)

    image, source_layout = decode_image(path)

    assert source_layout == layout
    assert describe_mode(source_layout).startswith("16-bit")
    assert image.mode == working_mode
    assert image.size == (4, 3)


def test_stored_layout_of_eight_bit_png(rgba_png: Path):
    """Test 8-bit sources report their plain mode."""
    with Image.open(rgba_png) as src:
        assert stored_layout(src) == "RGBA"
