"""Single-file image conversion: validate, decode, resize, encode, preview."""

import contextlib
from io import BytesIO
from pathlib import Path
from uuid import uuid4

from loguru import logger
from PIL import Image

from ....common.config import ConverterSettings
from ....common.errors import (
    ImageConversionError,
    ImageEncodeError,
    OversizeError,
    SourceNotFoundError,
    StorageIOError,
    UnsupportedInputError,
)
from ....common.schemas import ConversionRequest, ConversionResult, OutputFormat, ResizeSpec
from ....utils.media_types import is_svg_path
from ....utils.profiling import timed
from .color_complexity import advise_jpeg_quality, clamp_quality
from .ico_encoder import save_ico
from .image_decode import decode_image
from .image_preview import build_conversion_preview
from .image_resize import resize_image
from .svg_wrapper import save_svg

WEBP_ADAPTIVE_PIXEL_THRESHOLD = 1_000_000
WEBP_HIGH_PIXEL_THRESHOLD = 4_000_000
WEBP_HIGH_QUALITY = 90
WEBP_MIN_QUALITY = 85


def get_pil_format(fmt: OutputFormat) -> str:
    """Pillow encoder name for the formats Pillow writes directly."""
    match fmt:
        case OutputFormat.JPEG:
            return "JPEG"
        case OutputFormat.PNG | OutputFormat.SVG:
            return "PNG"
        case OutputFormat.GIF:
            return "GIF"
        case OutputFormat.WEBP:
            return "WEBP"
        case OutputFormat.BMP:
            return "BMP"
        case OutputFormat.ICO:
            return "ICO"


def prepare_for_format(image: Image.Image, fmt: OutputFormat) -> Image.Image:
    """Convert ``image`` to a mode the target encoder accepts."""
    mode = image.mode
    match fmt:
        case OutputFormat.JPEG:
            # JPEG does not support alpha channel
            if mode == "LA":
                return image.convert("L")
            if mode == "RGBA":
                return image.convert("RGB")
        case OutputFormat.WEBP:
            if mode == "L":
                return image.convert("RGB")
            if mode == "LA":
                return image.convert("RGBA")
        case OutputFormat.GIF | OutputFormat.BMP:
            if mode == "LA":
                return image.convert("RGBA")
        case _:
            pass
    return image


def select_jpeg_quality(image: Image.Image, requested: int | None, default: int) -> int:
    return advise_jpeg_quality(image, requested if requested is not None else default)


def select_webp_quality(pixel_count: int, requested: int | None, default: int) -> int:
    quality = clamp_quality(requested if requested is not None else default)
    if pixel_count > WEBP_HIGH_PIXEL_THRESHOLD:
        return WEBP_HIGH_QUALITY
    if pixel_count > WEBP_ADAPTIVE_PIXEL_THRESHOLD:
        return max(quality, WEBP_MIN_QUALITY)
    return quality


def write_image(
    image: Image.Image,
    output_path: str | Path,
    pil_format: str,
    **save_kwargs: object,
) -> None:
    """Encode ``image`` in memory, then write the bytes to ``output_path``.

    Raises:
        ImageEncodeError: If Pillow fails to encode the image
        StorageIOError: If the file cannot be written
    """
    buffer = BytesIO()
    try:
        image.save(buffer, format=pil_format, **save_kwargs)
    except (ValueError, OSError, KeyError) as exc:
        raise ImageEncodeError(pil_format, str(exc)) from exc

    try:
        _ = Path(output_path).write_bytes(buffer.getbuffer())
    except OSError as exc:
        raise StorageIOError(output_path, str(exc)) from exc


def save_converted(
    image: Image.Image,
    output_path: Path,
    fmt: OutputFormat,
    quality: int | None,
    resize: ResizeSpec | None,
    default_quality: int,
) -> Image.Image:
    """Write ``image`` in ``fmt`` and return the image that was encoded."""
    pixel_count = image.width * image.height
    prepared = prepare_for_format(image, fmt)

    match fmt:
        case OutputFormat.JPEG:
            jpeg_quality = select_jpeg_quality(prepared, quality, default_quality)
            logger.info(f"Encoding JPEG {image.width}x{image.height} at quality {jpeg_quality}")
            write_image(prepared, output_path, "JPEG", quality=jpeg_quality)
        case OutputFormat.WEBP:
            webp_quality = select_webp_quality(pixel_count, quality, default_quality)
            logger.info(f"Encoding WEBP {image.width}x{image.height} at quality {webp_quality}")
            write_image(prepared, output_path, "WEBP", quality=webp_quality)
        case OutputFormat.PNG | OutputFormat.GIF | OutputFormat.BMP:
            write_image(prepared, output_path, get_pil_format(fmt))
        case OutputFormat.ICO:
            prepared = save_ico(image, output_path, resize.width if resize is not None else None)
        case OutputFormat.SVG:
            prepared = save_svg(image, output_path)

    return prepared


def check_source(source_path: str | Path, max_source_bytes: int) -> int:
    """Validate the source before decoding and return its size in bytes.

    Raises:
        SourceNotFoundError: If the path is not an existing file
        OversizeError: If the file is larger than ``max_source_bytes``
        UnsupportedInputError: For SVG sources
    """
    path = Path(source_path)
    if not path.is_file():
        raise SourceNotFoundError(path)

    try:
        size = path.stat().st_size
    except OSError as exc:
        raise SourceNotFoundError(path) from exc

    if size > max_source_bytes:
        raise OversizeError(path, size, max_source_bytes)
    if is_svg_path(path):
        raise UnsupportedInputError(path)
    return size


def build_output_path(source_path: str | Path, fmt: OutputFormat, output_dir: str | Path) -> Path:
    stem = Path(source_path).stem or "converted"
    return Path(output_dir) / f"{stem}-{uuid4()}.{fmt.extension}"


def compose_message(
    fmt: OutputFormat,
    input_size: int,
    output_size: int,
    large_source_bytes: int,
) -> str:
    message = f"Image converted to {fmt.value}"
    if input_size > large_source_bytes:
        reduction = 100 * (1 - output_size / input_size)
        if reduction > 0:
            return f"{message}, file size reduced by {reduction:.1f}%"
    return message


@timed
def convert_image(request: ConversionRequest, settings: ConverterSettings) -> ConversionResult:
    """
    Convert a single image file to ``request.format``.

    The output lands in ``settings.temp_dir`` as ``{stem}-{uuid}.{ext}``.
    Failures are returned as an unsuccessful result; a failed preview only
    degrades the message of an otherwise successful one.

    Args:
        request: What to convert and how
        settings: Size limits, default quality and output directory

    Returns:
        ConversionResult describing the saved file and its preview
    """
    fmt = request.format
    logger.info(f"Converting {request.source_path} to {fmt.value}")

    output_path: Path | None = None
    try:
        input_size = check_source(request.source_path, settings.max_source_bytes)
        image, source_mode = decode_image(request.source_path)
        logger.debug(f"Decoded {image.width}x{image.height} ({source_mode})")

        # ICO only takes its side from resize.width, resampled once in save_ico
        if request.resize is not None and fmt is not OutputFormat.ICO:
            image = resize_image(image, request.resize)

        output_path = build_output_path(request.source_path, fmt, settings.temp_dir)
        saved = save_converted(
            image,
            output_path,
            fmt,
            request.quality,
            request.resize,
            settings.default_quality,
        )

        try:
            output_size = output_path.stat().st_size
        except OSError as exc:
            raise StorageIOError(output_path, str(exc)) from exc

    except ImageConversionError as exc:
        if output_path is not None:
            with contextlib.suppress(OSError):
                output_path.unlink(missing_ok=True)
        logger.warning(f"Conversion of {request.source_path} failed: {exc}")
        return ConversionResult.failure(str(exc))

    message = compose_message(fmt, input_size, output_size, settings.large_source_bytes)

    preview: str | None = None
    try:
        preview = build_conversion_preview(saved, fmt)
    except Exception as exc:
        logger.warning(f"Preview for {output_path} failed: {exc}")
        message = f"{message}; preview unavailable ({exc})"

    logger.info(f"Wrote {output_path} ({output_size} bytes)")
    return ConversionResult(
        success=True,
        message=message,
        file_path=str(output_path),
        file_name=output_path.name,
        preview=preview,
        output_size=output_size,
    )
