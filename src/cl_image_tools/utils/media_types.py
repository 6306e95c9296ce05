import base64
from pathlib import Path

DATA_URI_PREFIX = "data:"

EXTENSION_MIME_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "ico": "image/x-icon",
    "svg": "image/svg+xml",
}

DEFAULT_MIME_TYPE = "image/jpeg"


def mime_from_path(path: str | Path) -> str:
    """Guess an image MIME type from the file extension, JPEG when unknown."""
    suffix = Path(path).suffix.lower().lstrip(".")
    return EXTENSION_MIME_TYPES.get(suffix, DEFAULT_MIME_TYPE)


def is_svg_path(path: str | Path) -> bool:
    return Path(path).suffix.lower() == ".svg"


def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"{DATA_URI_PREFIX}{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def from_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Split a base64 data URI into its MIME type and decoded payload."""
    if not data_uri.startswith(DATA_URI_PREFIX):
        raise ValueError("Not a data URI")
    header, sep, payload = data_uri.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported")
    mime_type = header[len(DATA_URI_PREFIX) : -len(";base64")]
    return mime_type, base64.b64decode(payload)
