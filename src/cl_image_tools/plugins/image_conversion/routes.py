"""Image conversion route factory."""

from pathlib import Path

from fastapi import APIRouter, HTTPException

from ...common.config import ConverterSettings, get_settings
from ...common.schemas import (
    ConversionRequest,
    ConversionResult,
    CopyRequest,
    ImageInfo,
    PathRequest,
    PreviewResponse,
)
from . import service


def confine_path(path: str, root: Path) -> Path:
    """Resolve ``path`` and require it to lie under ``root``.

    Raises:
        HTTPException: 400 if the resolved path escapes ``root``
    """
    resolved = Path(path).resolve()
    if not resolved.is_relative_to(root):
        raise HTTPException(status_code=400, detail=f"Path is outside the allowed directory: {path}")
    return resolved


def create_router(settings: ConverterSettings | None = None) -> APIRouter:
    """Create the image conversion router.

    Endpoints are synchronous so FastAPI runs each conversion on its worker
    thread pool instead of the event loop. Every client supplied path must
    resolve under ``settings.route_root``.

    Args:
        settings: Conversion settings. Read from the environment if None.

    Returns:
        APIRouter exposing /images/* endpoints
    """
    router = APIRouter()
    resolved = settings or get_settings()
    root = resolved.route_root

    @router.get("/images/formats", response_model=list[str])
    def get_formats() -> list[str]:
        return service.list_supported_formats()

    @router.post("/images/convert", response_model=ConversionResult)
    def convert_image(request: ConversionRequest) -> ConversionResult:
        _ = confine_path(request.source_path, root)
        return service.convert(request, resolved)

    @router.post("/images/inspect", response_model=ImageInfo)
    def inspect_image(request: PathRequest) -> ImageInfo:
        info = service.inspect(confine_path(request.path, root), resolved)
        if isinstance(info, str):
            raise HTTPException(status_code=400, detail=info)
        return info

    @router.post("/images/preview", response_model=PreviewResponse)
    def preview_image(request: PathRequest) -> PreviewResponse:
        data_uri = service.preview_base64(confine_path(request.path, root), resolved)
        if not data_uri.startswith("data:"):
            raise HTTPException(status_code=400, detail=data_uri)
        return PreviewResponse(data_uri=data_uri)

    @router.post("/images/copy")
    def copy_file(request: CopyRequest) -> dict[str, bool]:
        copied = service.copy(
            confine_path(request.source_path, root),
            confine_path(request.dest_path, root),
        )
        if isinstance(copied, str):
            raise HTTPException(status_code=400, detail=copied)
        return {"copied": copied}

    # Mark functions as used (accessed via FastAPI decorators)
    _ = (get_formats, convert_image, inspect_image, preview_image, copy_file)

    return router
