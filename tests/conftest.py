"""Test configuration and fixtures for cl_image_tools.

This module provides:
- Settings pointing the converter at a per-test output directory
- Synthetic source images generated with Pillow
- A FastAPI TestClient wired to the conversion router
"""

import struct
import zlib
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageDraw

from cl_image_tools.common.config import ConverterSettings

# ============================================================================
# Function-Scoped Fixtures (Run Per Test)
# ============================================================================


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Provide clean temporary directory for conversion outputs."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def settings(tmp_path: Path, temp_output_dir: Path) -> ConverterSettings:
    """Converter settings writing into temp_output_dir, routes confined to tmp_path."""
    return ConverterSettings(temp_dir=str(temp_output_dir), allowed_root=str(tmp_path))


@pytest.fixture
def synthetic_image(tmp_path: Path) -> Path:
    """Generate synthetic 800x600 JPEG test image using PIL."""
    output_path = tmp_path / "synthetic.jpg"

    img = Image.new("RGB", (800, 600), color=(73, 109, 137))
    draw = ImageDraw.Draw(img)

    for i in range(0, 800, 50):
        draw.line([(i, 0), (i, 600)], fill=(255, 255, 255), width=2)
    for i in range(0, 600, 50):
        draw.line([(0, i), (800, i)], fill=(255, 255, 255), width=2)

    draw.ellipse([300, 200, 500, 400], fill=(200, 100, 100))

    img.save(output_path, "JPEG", quality=85)

    return output_path


@pytest.fixture
def rgba_png(tmp_path: Path) -> Path:
    """Generate a 300x200 PNG with a transparent background."""
    output_path = tmp_path / "logo.png"

    img = Image.new("RGBA", (300, 200), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([50, 50, 250, 150], fill=(20, 160, 90, 255))

    img.save(output_path, "PNG")

    return output_path


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a solid-color image of the given size and format."""

    def _make(
        name: str,
        size: tuple[int, int],
        fmt: str = "PNG",
        mode: str = "RGB",
        color: int | tuple[int, ...] = (120, 80, 200),
    ) -> Path:
        path = tmp_path / name
        Image.new(mode, size, color=color).save(path, fmt)
        return path

    return _make


@pytest.fixture
def make_png16(tmp_path: Path) -> Callable[[str, int, int, int], Path]:
    """Factory writing a PNG with 16-bit samples, which Pillow cannot save itself.

    The color type follows the PNG IHDR codes: 0 gray, 2 RGB, 4 gray + alpha,
    6 RGBA.
    """
    channels_by_color_type = {0: 1, 2: 3, 4: 2, 6: 4}

    def _chunk(tag: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    def _make(name: str, width: int, height: int, color_type: int) -> Path:
        channels = channels_by_color_type[color_type]
        header = struct.pack(">IIBBBBB", width, height, 16, color_type, 0, 0, 0)
        row = b"\x00" + b"\x80\x00" * channels * width
        path = tmp_path / name
        _ = path.write_bytes(
            b"\x89PNG\r\n\x1a\n"
            + _chunk(b"IHDR", header)
            + _chunk(b"IDAT", zlib.compress(row * height))
            + _chunk(b"IEND", b"")
        )
        return path

    return _make


@pytest.fixture
def noise_image() -> Callable[[int, int], Image.Image]:
    """Factory producing RGB images of uniformly random pixels."""

    def _noise(width: int, height: int) -> Image.Image:
        rng = np.random.default_rng(seed=1234)
        pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        return Image.fromarray(pixels)

    return _noise


@pytest.fixture
def api_client(settings: ConverterSettings):
    """Provide FastAPI TestClient for route testing."""
    from fastapi import FastAPI
    from fastapi.testclient import TestClient

    from cl_image_tools import create_router

    app = FastAPI()
    app.include_router(create_router(settings))

    return TestClient(app)
