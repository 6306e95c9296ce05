"""Decode source files into one of the four working pixel layouts."""

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from ....common.errors import ImageDecodeError

WORKING_MODES = ("L", "LA", "RGB", "RGBA")

COLOR_TYPE_DESCRIPTIONS: dict[str, str] = {
    "1": "1-bit bilevel",
    "L": "8-bit grayscale",
    "LA": "8-bit grayscale + alpha",
    "La": "8-bit grayscale + premultiplied alpha",
    "P": "8-bit palette",
    "PA": "8-bit palette + alpha",
    "RGB": "8-bit RGB",
    "RGBA": "8-bit RGBA",
    "LA;16": "16-bit grayscale + alpha",
    "RGB;16": "16-bit RGB",
    "RGBA;16": "16-bit RGBA",
    "RGBa": "8-bit premultiplied RGBA",
    "CMYK": "8-bit CMYK",
    "YCbCr": "8-bit YCbCr",
    "LAB": "8-bit L*a*b*",
    "HSV": "8-bit HSV",
    "I;16": "16-bit grayscale",
    "I;16L": "16-bit grayscale",
    "I;16B": "16-bit grayscale",
    "I;16N": "16-bit grayscale",
    "I": "32-bit integer grayscale",
    "F": "32-bit float grayscale",
}


def describe_mode(mode: str) -> str:
    return COLOR_TYPE_DESCRIPTIONS.get(mode, "unknown format")


def _has_wide_samples(src: Image.Image) -> bool:
    # Pillow reports 16-bit RGB(A) and LA with their 8-bit mode; only the raw
    # decoder mode (e.g. "RGB;16B") keeps the stored depth.
    for tile in getattr(src, "tile", None) or ():
        args = tile[3]
        rawmode = args if isinstance(args, str) else None
        if isinstance(args, tuple) and args and isinstance(args[0], str):
            rawmode = args[0]
        if rawmode is not None and ";16" in rawmode:
            return True
    return False


def stored_layout(src: Image.Image) -> str:
    """Pillow mode of ``src`` with a ";16" suffix for 16-bit RGB(A) and LA data.

    Must be called before ``load()``, which discards the tile list.
    """
    if src.mode not in ("I", "LA", "RGB", "RGBA") or not _has_wide_samples(src):
        return src.mode
    if src.mode == "I":
        return "I;16"
    return f"{src.mode};16"


def _wide_gray_to_l(image: Image.Image) -> Image.Image:
    # Pillow clips rather than scales when converting 16/32-bit gray to L
    pixels = np.asarray(image, dtype=np.float64)
    if image.mode != "F":
        pixels = pixels / 257.0
    return Image.fromarray(np.clip(np.rint(pixels), 0, 255).astype(np.uint8))


def normalize_mode(image: Image.Image) -> Image.Image:
    """Return a copy of ``image`` in L, LA, RGB or RGBA."""
    mode = image.mode
    if mode in WORKING_MODES:
        return image.copy()
    if mode.startswith("I") or mode == "F":
        return _wide_gray_to_l(image)
    if mode == "1":
        return image.convert("L")
    if mode in ("P", "PA"):
        if mode == "PA" or "transparency" in image.info:
            return image.convert("RGBA")
        return image.convert("RGB")
    if mode in ("La", "RGBa"):
        return image.convert("RGBA")
    return image.convert("RGB")


def decode_image(path: str | Path) -> tuple[Image.Image, str]:
    """Decode ``path`` fully into memory.

    Returns:
        The image in a working mode and the layout it was stored in
        (see ``stored_layout``).

    Raises:
        ImageDecodeError: If Pillow cannot identify or decode the file
    """
    try:
        with Image.open(path) as src:
            layout = stored_layout(src)
            src.load()
            return normalize_mode(src), layout
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageDecodeError(path, str(exc)) from exc
