"""Embed raster data in a minimal SVG document."""

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image

from ....common.errors import ImageEncodeError, StorageIOError

SVG_TITLE = "Converted image"
SVG_DESCRIPTION = "Raster image embedded by cl_image_tools"

SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<svg width="{width}" height="{height}" viewBox="0 0 {width} {height}"
     xmlns="http://www.w3.org/2000/svg"
     xmlns:xlink="http://www.w3.org/1999/xlink">
  <title>{title}</title>
  <desc>{description}</desc>
  <image width="{width}" height="{height}" x="0" y="0"
         xlink:href="data:image/png;base64,{payload}"/>
</svg>
"""


def encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def wrap_png_in_svg(png_data: bytes, width: int, height: int) -> str:
    return SVG_TEMPLATE.format(
        width=width,
        height=height,
        title=SVG_TITLE,
        description=SVG_DESCRIPTION,
        payload=base64.b64encode(png_data).decode("ascii"),
    )


def save_svg(image: Image.Image, output_path: str | Path) -> Image.Image:
    """Write ``image`` as an SVG document embedding its PNG encoding.

    Raises:
        ImageEncodeError: If PNG encoding fails
        StorageIOError: If the document cannot be written
    """
    try:
        png_data = encode_png(image)
    except (ValueError, OSError) as exc:
        raise ImageEncodeError("SVG", str(exc)) from exc

    document = wrap_png_in_svg(png_data, image.width, image.height)
    try:
        _ = Path(output_path).write_text(document, encoding="utf-8")
    except OSError as exc:
        raise StorageIOError(output_path, str(exc)) from exc

    return image
