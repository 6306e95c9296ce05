"""Runtime settings for the conversion pipeline."""

import os
import tempfile
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .errors import MIB

TEMP_DIR_ENV = "CL_IMAGE_TOOLS_TEMP_DIR"
ALLOWED_ROOT_ENV = "CL_IMAGE_TOOLS_ALLOWED_ROOT"


class ConverterSettings(BaseModel):
    temp_dir: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory receiving converted files",
    )
    max_source_bytes: int = Field(
        default=100 * MIB,
        gt=0,
        description="Sources above this size are rejected before decoding",
    )
    large_source_bytes: int = Field(
        default=5 * MIB,
        gt=0,
        description="Sources above this size report their compression ratio",
    )
    default_quality: int = Field(default=90, ge=1, le=100)
    allowed_root: str | None = Field(
        default=None,
        description="Only paths under this directory are accepted over HTTP (temp_dir if unset)",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def route_root(self) -> Path:
        """Resolved directory the HTTP routes are confined to."""
        return Path(self.allowed_root or self.temp_dir).resolve()


def get_settings() -> ConverterSettings:
    overrides: dict[str, str] = {}
    temp_dir = os.environ.get(TEMP_DIR_ENV, "").strip()
    if temp_dir:
        overrides["temp_dir"] = temp_dir
    allowed_root = os.environ.get(ALLOWED_ROOT_ENV, "").strip()
    if allowed_root:
        overrides["allowed_root"] = allowed_root
    return ConverterSettings(**overrides)
