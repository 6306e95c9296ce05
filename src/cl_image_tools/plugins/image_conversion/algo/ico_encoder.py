"""Single-image ICO encoder.

The container is written field by field from fixed little-endian schemas:

    offset  size  structure
    0       6     ICONDIR           reserved, type (1 = icon), image count
    6       16    ICONDIRENTRY      width, height, colors, reserved, planes,
                                    bit count, DIB length, DIB offset
    22      40    BITMAPINFOHEADER  header size, width, 2 * height, planes,
                                    bit count, compression, image size,
                                    x/y resolution, palette colors, important
    62      w*h*4 pixel rows, bottom row first, BGRA

ICO stores 256 as 0 in the one-byte width and height fields, and the DIB
height covers both the XOR and the (here absent) AND mask, hence the doubling.
"""

import struct
from pathlib import Path
from typing import NamedTuple

import numpy as np
from PIL import Image

from ....common.errors import ImageEncodeError, StorageIOError
from .image_resize import USER_RESAMPLE

ICON_SIZES = (16, 32, 48, 64, 128, 256)
DEFAULT_ICON_SIZE = 32

ICONDIR = struct.Struct("<HHH")
ICONDIRENTRY = struct.Struct("<BBBBHHII")
BITMAPINFOHEADER = struct.Struct("<IiiHHIIiiII")

ICON_TYPE = 1
BIT_COUNT = 32
BYTES_PER_PIXEL = 4
DIB_OFFSET = ICONDIR.size + ICONDIRENTRY.size


class IconDir(NamedTuple):
    reserved: int
    image_type: int
    count: int


class IconDirEntry(NamedTuple):
    width: int
    height: int
    color_count: int
    reserved: int
    planes: int
    bit_count: int
    bytes_in_res: int
    image_offset: int

    @property
    def pixel_width(self) -> int:
        return self.width or 256

    @property
    def pixel_height(self) -> int:
        return self.height or 256


class BitmapInfoHeader(NamedTuple):
    size: int
    width: int
    height: int
    planes: int
    bit_count: int
    compression: int
    size_image: int
    x_pels_per_meter: int
    y_pels_per_meter: int
    clr_used: int
    clr_important: int


def snap_icon_size(size: int) -> int:
    """Smallest standard icon size that is at least ``size`` (256 at most)."""
    for icon_size in ICON_SIZES:
        if size <= icon_size:
            return icon_size
    return ICON_SIZES[-1]


def _dir_byte(side: int) -> int:
    return 0 if side == 256 else side


def encode_dib(image: Image.Image) -> bytes:
    """BITMAPINFOHEADER followed by bottom-up BGRA rows of an RGBA image."""
    if image.mode != "RGBA":
        raise ValueError(f"Expected an RGBA image, got {image.mode}")

    width, height = image.size
    header = BitmapInfoHeader(
        size=BITMAPINFOHEADER.size,
        width=width,
        height=height * 2,
        planes=1,
        bit_count=BIT_COUNT,
        compression=0,
        size_image=width * height * BYTES_PER_PIXEL,
        x_pels_per_meter=0,
        y_pels_per_meter=0,
        clr_used=0,
        clr_important=0,
    )
    pixels = np.asarray(image)[::-1, :, [2, 1, 0, 3]]
    return BITMAPINFOHEADER.pack(*header) + np.ascontiguousarray(pixels).tobytes()


def encode_ico(image: Image.Image) -> bytes:
    """Wrap an RGBA image of at most 256x256 into a single-entry ICO file."""
    width, height = image.size
    if not (0 < width <= 256 and 0 < height <= 256):
        raise ValueError(f"Icon images must be between 1 and 256 pixels, got {width}x{height}")

    dib = encode_dib(image)
    icon_dir = IconDir(reserved=0, image_type=ICON_TYPE, count=1)
    entry = IconDirEntry(
        width=_dir_byte(width),
        height=_dir_byte(height),
        color_count=0,
        reserved=0,
        planes=1,
        bit_count=BIT_COUNT,
        bytes_in_res=len(dib),
        image_offset=DIB_OFFSET,
    )
    return ICONDIR.pack(*icon_dir) + ICONDIRENTRY.pack(*entry) + dib


def parse_ico(data: bytes) -> tuple[IconDir, IconDirEntry, BitmapInfoHeader]:
    """Read back the headers of a single-image ICO produced by ``encode_ico``."""
    icon_dir = IconDir(*ICONDIR.unpack_from(data, 0))
    if icon_dir.image_type != ICON_TYPE or icon_dir.count < 1:
        raise ValueError("Not an icon file")
    entry = IconDirEntry(*ICONDIRENTRY.unpack_from(data, ICONDIR.size))
    dib_header = BitmapInfoHeader(*BITMAPINFOHEADER.unpack_from(data, entry.image_offset))
    return icon_dir, entry, dib_header


def prepare_icon_image(image: Image.Image, requested_size: int | None) -> Image.Image:
    """Exact square resample to the snapped icon size, as 8-bit RGBA."""
    side = snap_icon_size(requested_size if requested_size is not None else DEFAULT_ICON_SIZE)
    return image.resize((side, side), USER_RESAMPLE).convert("RGBA")


def save_ico(image: Image.Image, output_path: str | Path, requested_size: int | None) -> Image.Image:
    """Encode ``image`` as an icon and write it to ``output_path``.

    Returns:
        The RGBA image stored in the icon

    Raises:
        ImageEncodeError: If the icon bytes cannot be produced
        StorageIOError: If the file cannot be written
    """
    try:
        icon_image = prepare_icon_image(image, requested_size)
        data = encode_ico(icon_image)
    except (ValueError, OSError) as exc:
        raise ImageEncodeError("ICO", str(exc)) from exc

    try:
        _ = Path(output_path).write_bytes(data)
    except OSError as exc:
        raise StorageIOError(output_path, str(exc)) from exc

    return icon_image
