"""Boundary operations of the image conversion plugin.

Every function here catches the pipeline's errors and reports them as data:
``convert`` as an unsuccessful ``ConversionResult``, the read-only
operations as a plain error message.
"""

import shutil
from pathlib import Path

from loguru import logger

from ...common.config import ConverterSettings, get_settings
from ...common.errors import ImageConversionError
from ...common.schemas import ConversionRequest, ConversionResult, ImageInfo, OutputFormat
from ...utils.profiling import timed
from .algo.image_convert import check_source, convert_image
from .algo.image_decode import decode_image, describe_mode
from .algo.image_preview import build_file_preview


def convert(request: ConversionRequest, settings: ConverterSettings | None = None) -> ConversionResult:
    try:
        return convert_image(request, settings or get_settings())
    except Exception as exc:
        logger.exception(f"Unexpected failure converting {request.source_path}")
        return ConversionResult.failure(f"Conversion failed: {exc}")


def list_supported_formats() -> list[str]:
    return [fmt.value for fmt in OutputFormat]


def inspect(path: str | Path, settings: ConverterSettings | None = None) -> ImageInfo | str:
    """Dimensions, pixel layout and size of an image file, or an error message."""
    settings = settings or get_settings()
    try:
        file_size = check_source(path, settings.max_source_bytes)
        image, source_mode = decode_image(path)
    except ImageConversionError as exc:
        return str(exc)
    except Exception as exc:
        logger.exception(f"Unexpected failure inspecting {path}")
        return f"Failed to open image: {exc}"

    return ImageInfo(
        width=image.width,
        height=image.height,
        color_type=describe_mode(source_mode),
        file_size=file_size,
        file_path=str(path),
    )


@timed
def preview_base64(path: str | Path, settings: ConverterSettings | None = None) -> str:
    """Data URI preview of an existing image file, or an error message."""
    settings = settings or get_settings()
    try:
        file_size = check_source(path, settings.max_source_bytes)
        image, _ = decode_image(path)
        return build_file_preview(path, image, file_size)
    except ImageConversionError as exc:
        return str(exc)
    except Exception as exc:
        logger.exception(f"Unexpected failure previewing {path}")
        return f"Failed to create preview: {exc}"


def copy(source_path: str | Path, dest_path: str | Path) -> bool | str:
    if not Path(source_path).is_file():
        return "Source file does not exist"
    try:
        _ = shutil.copy(source_path, dest_path)
    except OSError as exc:
        return f"Failed to copy file: {exc}"
    logger.info(f"Copied {source_path} to {dest_path}")
    return True
