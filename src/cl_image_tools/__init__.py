"""cl_image_tools - Adaptive raster image conversion with previews."""

from .common.config import ConverterSettings, get_settings
from .common.errors import (
    ImageConversionError,
    ImageDecodeError,
    ImageEncodeError,
    OversizeError,
    PreviewError,
    SourceNotFoundError,
    StorageIOError,
    UnsupportedInputError,
)
from .common.schemas import (
    ConversionRequest,
    ConversionResult,
    ImageInfo,
    OutputFormat,
    ResizeSpec,
)
from .plugins.image_conversion.routes import create_router
from .plugins.image_conversion.service import (
    convert,
    copy,
    inspect,
    list_supported_formats,
    preview_base64,
)

__version__ = "0.1.0"

__all__ = [
    "ConversionRequest",
    "ConversionResult",
    "ConverterSettings",
    "ImageConversionError",
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageInfo",
    "OutputFormat",
    "OversizeError",
    "PreviewError",
    "ResizeSpec",
    "SourceNotFoundError",
    "StorageIOError",
    "UnsupportedInputError",
    "__version__",
    "convert",
    "copy",
    "create_router",
    "get_settings",
    "inspect",
    "list_supported_formats",
    "preview_base64",
]
