"""Pydantic schemas for conversion requests, results and image metadata."""

from enum import StrEnum
from typing import ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ─────────────────────────────────────────────────────────────
# Output formats
# ─────────────────────────────────────────────────────────────


class OutputFormat(StrEnum):
    PNG = "PNG"
    JPEG = "JPEG"
    GIF = "GIF"
    WEBP = "WEBP"
    BMP = "BMP"
    ICO = "ICO"
    SVG = "SVG"

    @classmethod
    def _missing_(cls, value: object) -> "OutputFormat | None":
        if isinstance(value, str):
            name = value.strip().upper()
            if name == "JPG":
                return cls.JPEG
            for member in cls:
                if member.value == name:
                    return member
        return None

    @property
    def extension(self) -> str:
        match self:
            case OutputFormat.PNG:
                return "png"
            case OutputFormat.JPEG:
                return "jpg"
            case OutputFormat.GIF:
                return "gif"
            case OutputFormat.WEBP:
                return "webp"
            case OutputFormat.BMP:
                return "bmp"
            case OutputFormat.ICO:
                return "ico"
            case OutputFormat.SVG:
                return "svg"

    @property
    def mime_type(self) -> str:
        match self:
            case OutputFormat.ICO:
                return "image/x-icon"
            case OutputFormat.SVG:
                return "image/svg+xml"
            case _:
                return f"image/{self.value.lower()}"


# ─────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────


class ResizeSpec(BaseModel):
    """Target geometry. Leaving both sides unset means "no resize"."""

    width: int | None = Field(default=None, ge=0, description="Target width in pixels")
    height: int | None = Field(default=None, ge=0, description="Target height in pixels")
    keep_aspect_ratio: bool = Field(default=True, description="Preserve source aspect ratio")

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def is_noop(self) -> bool:
        return self.width is None and self.height is None


class ConversionRequest(BaseModel):
    source_path: str = Field(description="Path to the image to convert")
    format: OutputFormat = Field(description="Target format")
    quality: int | None = Field(
        default=None,
        description="Encoder quality override, clamped to 1-100 before use",
    )
    resize: ResizeSpec | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────


class ConversionResult(BaseModel):
    """Outcome of a conversion. Never carries artifacts when unsuccessful."""

    success: bool
    message: str
    file_path: str | None = None
    file_name: str | None = None
    preview: str | None = Field(
        default=None,
        description="Data URI (data:<mime>;base64,...) of a bounded-size preview",
    )
    output_size: int | None = Field(default=None, ge=0, description="Output size in bytes")

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_failure_has_no_artifacts(self) -> Self:
        if not self.success and (
            self.file_path is not None
            or self.file_name is not None
            or self.preview is not None
            or self.output_size is not None
        ):
            raise ValueError("A failed conversion cannot carry output artifacts")
        return self

    @classmethod
    def failure(cls, message: str) -> "ConversionResult":
        return cls(success=False, message=message)


class ImageInfo(BaseModel):
    width: int
    height: int
    color_type: str = Field(description="Human-readable pixel layout")
    file_size: int = Field(ge=0, description="File size in bytes")
    file_path: str


class CopyRequest(BaseModel):
    source_path: str
    dest_path: str


class PathRequest(BaseModel):
    path: str


class PreviewResponse(BaseModel):
    data_uri: str
