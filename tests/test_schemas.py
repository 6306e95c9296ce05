"""Tests for request/result schemas and settings."""

import tempfile

import pytest
from pydantic import ValidationError

from cl_image_tools.common.config import (
    ALLOWED_ROOT_ENV,
    TEMP_DIR_ENV,
    ConverterSettings,
    get_settings,
)
from cl_image_tools.common.errors import MIB
from cl_image_tools.common.schemas import (
    ConversionRequest,
    ConversionResult,
    OutputFormat,
    ResizeSpec,
)

# ============================================================================
# OUTPUT FORMAT
# ============================================================================


def test_output_format_extensions():
    """Test file extensions per format."""
    assert [fmt.extension for fmt in OutputFormat] == [
        "png",
        "jpg",
        "gif",
        "webp",
        "bmp",
        "ico",
        "svg",
    ]


def test_output_format_mime_types():
    """Test MIME types per format."""
    assert OutputFormat.JPEG.mime_type == "image/jpeg"
    assert OutputFormat.ICO.mime_type == "image/x-icon"
    assert OutputFormat.SVG.mime_type == "image/svg+xml"
    assert OutputFormat.WEBP.mime_type == "image/webp"


def test_output_format_lookup_is_lenient():
    """Test lowercase names and the jpg alias resolve."""
    assert OutputFormat("png") is OutputFormat.PNG
    assert OutputFormat("jpg") is OutputFormat.JPEG
    with pytest.raises(ValueError):
        _ = OutputFormat("tiff")


# ============================================================================
# REQUESTS
# ============================================================================


def test_resize_spec_defaults():
    """Test ResizeSpec keeps aspect ratio and is a no-op by default."""
    spec = ResizeSpec()

    assert spec.keep_aspect_ratio is True
    assert spec.is_noop is True
    assert ResizeSpec(height=10).is_noop is False


def test_resize_spec_rejects_negative_sizes():
    """Test negative sizes are invalid."""
    with pytest.raises(ValidationError):
        _ = ResizeSpec(width=-1)
    with pytest.raises(ValidationError):
        _ = ResizeSpec(height=-4)


def test_resize_spec_accepts_zero():
    """Test a zero side is accepted and is not a no-op."""
    spec = ResizeSpec(width=0)

    assert spec.width == 0
    assert spec.is_noop is False


def test_conversion_request_is_immutable():
    """Test requests cannot be changed once built."""
    request = ConversionRequest(source_path="/tmp/a.png", format=OutputFormat.PNG)

    with pytest.raises(ValidationError):
        request.quality = 50  # type: ignore[misc]


def test_conversion_request_accepts_out_of_range_quality():
    """Test quality is stored as given and clamped later."""
    request = ConversionRequest(source_path="/tmp/a.png", format=OutputFormat.JPEG, quality=255)

    assert request.quality == 255


# ============================================================================
# RESULTS
# ============================================================================


def test_failed_result_cannot_carry_artifacts():
    """Test success=False forbids output path and preview."""
    with pytest.raises(ValidationError):
        _ = ConversionResult(success=False, message="failed", file_path="/tmp/x.png")
    with pytest.raises(ValidationError):
        _ = ConversionResult(success=False, message="failed", preview="data:image/png;base64,")


def test_failure_factory():
    """Test ConversionResult.failure builds an artifact-free result."""
    result = ConversionResult.failure("nope")

    assert result.success is False
    assert result.message == "nope"
    assert result.file_path is None
    assert result.file_name is None
    assert result.preview is None
    assert result.output_size is None


def test_successful_result_without_preview():
    """Test a successful result may lack a preview."""
    result = ConversionResult(success=True, message="ok", file_path="/tmp/x.png", file_name="x.png")

    assert result.preview is None


# ============================================================================
# SETTINGS
# ============================================================================


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    """Test default limits and the platform temp directory."""
    monkeypatch.delenv(TEMP_DIR_ENV, raising=False)
    monkeypatch.delenv(ALLOWED_ROOT_ENV, raising=False)

    settings = get_settings()

    assert settings.temp_dir == tempfile.gettempdir()
    assert settings.max_source_bytes == 100 * MIB
    assert settings.large_source_bytes == 5 * MIB
    assert settings.default_quality == 90
    assert settings.allowed_root is None


def test_settings_temp_dir_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Test the output directory can be set through the environment."""
    monkeypatch.setenv(TEMP_DIR_ENV, str(tmp_path))

    assert get_settings().temp_dir == str(tmp_path)


def test_settings_allowed_root_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Test the HTTP route root can be set through the environment."""
    monkeypatch.setenv(ALLOWED_ROOT_ENV, str(tmp_path))

    settings = get_settings()

    assert settings.allowed_root == str(tmp_path)
    assert settings.route_root == tmp_path.resolve()


def test_settings_validate_quality():
    """Test the default quality must be within 1-100."""
    with pytest.raises(ValidationError):
        _ = ConverterSettings(default_quality=0)
