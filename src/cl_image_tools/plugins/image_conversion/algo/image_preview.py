"""Bounded-size previews rendered as data URIs.

Two entry points exist. ``build_conversion_preview`` runs after a
conversion and sizes the preview from the pixel count of the saved image.
``build_file_preview`` serves existing files and sizes the preview from the
file's byte size instead.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from loguru import logger
from PIL import Image

from ....common.errors import MIB, PreviewError
from ....common.schemas import OutputFormat
from ....utils.media_types import mime_from_path, to_data_uri
from .image_resize import fit_image, scale_image

HUGE_PIXEL_COUNT = 10_000_000
LARGE_PIXEL_COUNT = 4_000_000
MAX_PREVIEW_SIDE = 1200

LOW_QUALITY_PIXEL_COUNT = 2_000_000
PNG_PREVIEW_MAX_PIXELS = 1_000_000
PREVIEW_QUALITY = 75
PREVIEW_LOW_QUALITY = 60

FILE_LARGE_BYTES = 5 * MIB
FILE_HUGE_BYTES = 20 * MIB


@dataclass(frozen=True)
class PreviewEncoding:
    pil_format: str
    mime_type: str
    quality: int | None = None


def downscale_for_preview(image: Image.Image) -> Image.Image:
    """Apply the pixel-count tiers. The input image is never modified."""
    pixel_count = image.width * image.height
    if pixel_count > HUGE_PIXEL_COUNT:
        return scale_image(image, 0.2)
    if pixel_count > LARGE_PIXEL_COUNT:
        return scale_image(image, 0.3)
    if image.width > MAX_PREVIEW_SIDE or image.height > MAX_PREVIEW_SIDE:
        return fit_image(image, MAX_PREVIEW_SIDE)
    return image


def select_preview_encoding(image: Image.Image, fmt: OutputFormat) -> PreviewEncoding:
    pixel_count = image.width * image.height
    quality = PREVIEW_LOW_QUALITY if pixel_count > LOW_QUALITY_PIXEL_COUNT else PREVIEW_QUALITY
    jpeg = PreviewEncoding("JPEG", "image/jpeg", quality)
    png = PreviewEncoding("PNG", "image/png")

    match fmt:
        case OutputFormat.JPEG | OutputFormat.BMP:
            return jpeg
        case OutputFormat.PNG:
            return png if pixel_count <= PNG_PREVIEW_MAX_PIXELS else jpeg
        case OutputFormat.ICO | OutputFormat.SVG:
            return png
        case OutputFormat.GIF:
            return PreviewEncoding("GIF", "image/gif")
        case OutputFormat.WEBP:
            return PreviewEncoding("WEBP", "image/webp", quality)


def _prepare_for(image: Image.Image, pil_format: str) -> Image.Image:
    if pil_format == "JPEG" and image.mode not in ("L", "RGB"):
        return image.convert("L" if image.mode == "LA" else "RGB")
    if pil_format in ("GIF", "WEBP", "BMP") and image.mode == "LA":
        return image.convert("RGBA")
    return image


def encode_preview(image: Image.Image, encoding: PreviewEncoding) -> str:
    buffer = BytesIO()
    save_kwargs: dict[str, object] = {}
    if encoding.quality is not None:
        save_kwargs["quality"] = encoding.quality
    _prepare_for(image, encoding.pil_format).save(buffer, format=encoding.pil_format, **save_kwargs)
    return to_data_uri(buffer.getvalue(), encoding.mime_type)


def build_conversion_preview(image: Image.Image, fmt: OutputFormat) -> str:
    """Render the preview shown after converting to ``fmt``.

    Args:
        image: The image that was written to the output file
        fmt: Target format of the conversion

    Raises:
        PreviewError: If the preview cannot be encoded
    """
    encoding = select_preview_encoding(image, fmt)
    try:
        preview = downscale_for_preview(image)
        logger.debug(
            f"Preview {image.width}x{image.height} -> {preview.width}x{preview.height} "
            + f"as {encoding.pil_format} (quality={encoding.quality})"
        )
        return encode_preview(preview, encoding)
    except (ValueError, OSError) as exc:
        raise PreviewError(str(exc)) from exc


def file_preview_tier(file_size: int) -> tuple[float | None, int]:
    """Scale factor (None = keep size) and quality for a file of ``file_size`` bytes."""
    if file_size > FILE_HUGE_BYTES:
        return 0.2, 60
    if file_size > FILE_LARGE_BYTES:
        return 0.3, 70
    return None, 85


def select_file_encoding(path: str | Path, quality: int) -> PreviewEncoding:
    mime_type = mime_from_path(path)
    match mime_type:
        case "image/png" | "image/x-icon" | "image/svg+xml":
            return PreviewEncoding("PNG", "image/png")
        case "image/gif":
            return PreviewEncoding("GIF", "image/gif")
        case "image/webp":
            return PreviewEncoding("WEBP", "image/webp", quality)
        case "image/bmp":
            return PreviewEncoding("BMP", "image/bmp")
        case _:
            return PreviewEncoding("JPEG", "image/jpeg", quality)


def build_file_preview(path: str | Path, image: Image.Image, file_size: int) -> str:
    """Render a preview of an existing file.

    Raises:
        PreviewError: If the preview cannot be encoded
    """
    factor, quality = file_preview_tier(file_size)
    encoding = select_file_encoding(path, quality)
    try:
        preview = scale_image(image, factor) if factor is not None else image
        return encode_preview(preview, encoding)
    except (ValueError, OSError) as exc:
        raise PreviewError(str(exc)) from exc
