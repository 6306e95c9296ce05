"""Error kinds raised by the conversion pipeline.

All of them are caught at the service boundary and turned into a failed
result or an error message; nothing here is meant to reach the caller.
"""

from pathlib import Path

MIB = 1024 * 1024


class ImageConversionError(Exception):
    """Base class for conversion pipeline errors."""


class SourceNotFoundError(ImageConversionError):
    def __init__(self, path: str | Path):
        self.path: str = str(path)
        super().__init__(f"Source file does not exist or is not accessible: {self.path}")


class OversizeError(ImageConversionError):
    def __init__(self, path: str | Path, size_bytes: int, limit_bytes: int):
        self.path: str = str(path)
        self.size_bytes: int = size_bytes
        self.limit_bytes: int = limit_bytes
        super().__init__(
            f"File too large ({size_bytes / MIB:.2f} MB); "
            + f"the maximum supported size is {limit_bytes / MIB:.0f} MB"
        )


class UnsupportedInputError(ImageConversionError):
    def __init__(self, path: str | Path, input_format: str = "SVG"):
        self.path: str = str(path)
        self.input_format: str = input_format
        super().__init__(
            f"{input_format} input is not supported, please choose an image in another format"
        )


class ImageDecodeError(ImageConversionError):
    def __init__(self, path: str | Path, reason: str):
        self.path: str = str(path)
        super().__init__(f"Failed to open image: {reason}")


class ImageEncodeError(ImageConversionError):
    def __init__(self, target: str, reason: str):
        self.target: str = target
        super().__init__(f"Failed to encode {target} image: {reason}")


class StorageIOError(ImageConversionError):
    def __init__(self, path: str | Path, reason: str):
        self.path: str = str(path)
        super().__init__(f"Failed to write {self.path}: {reason}")


class PreviewError(ImageConversionError):
    """Preview rendering failed. Never fatal for a conversion."""

    def __init__(self, reason: str):
        super().__init__(f"Failed to create preview: {reason}")
