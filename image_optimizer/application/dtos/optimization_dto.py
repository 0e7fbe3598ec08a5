"""DTOs for optimize/revert calls: configuration in, result records out."""
from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from image_optimizer.domain.exceptions import ErrorKind, ImageOptimizerError

MIN_IMAGE_WIDTH = 300
MAX_IMAGE_WIDTH = 4096

_ENV_PREFIX = "IMAGE_OPTIMIZER_"
_ENV_FIELDS = {
    "auto_optimize": "AUTO_OPTIMIZE",
    "enable_webp": "ENABLE_WEBP",
    "compression_level": "COMPRESSION_LEVEL",
    "jpeg_quality": "JPEG_QUALITY",
    "png_compression": "PNG_COMPRESSION",
    "webp_quality": "WEBP_QUALITY",
    "max_image_width": "MAX_IMAGE_WIDTH",
}


class OptimizationConfig(BaseModel):
    """Immutable per-call optimization settings.

    ``compression_level`` is deliberately free text: a level outside
    low/medium/high makes each format fall back to its own default field
    (``jpeg_quality`` / ``png_compression``).
    """

    model_config = ConfigDict(frozen=True)

    auto_optimize: bool = Field(
        False,
        description="Optimize new uploads automatically (informational for callers)",
        validation_alias=AliasChoices("auto_optimize", "autoOptimize"),
    )
    enable_webp: bool = Field(
        False,
        description="Create a WebP sibling at {path}.webp for JPEG/PNG sources",
        validation_alias=AliasChoices("enable_webp", "enableWebp"),
    )
    compression_level: str = Field(
        "medium",
        description="Compression level: low, medium or high",
        examples=["medium"],
        validation_alias=AliasChoices("compression_level", "compressionLevel"),
    )
    jpeg_quality: int = Field(
        70,
        ge=1,
        le=100,
        description="JPEG quality used when the level is not recognized",
        validation_alias=AliasChoices("jpeg_quality", "jpegQuality"),
    )
    png_compression: int = Field(
        8,
        ge=0,
        le=9,
        description="PNG compression effort used when the level is not recognized",
        validation_alias=AliasChoices(
            "png_compression", "pngCompression", "png_compression_level", "pngCompressionLevel"
        ),
    )
    webp_quality: int = Field(
        60,
        ge=1,
        le=100,
        description="Quality for WebP re-encoding and WebP sibling creation",
        validation_alias=AliasChoices("webp_quality", "webpQuality"),
    )
    max_image_width: Optional[int] = Field(
        None,
        description="Downscale wider images to this width before compressing (300-4096)",
        validation_alias=AliasChoices("max_image_width", "maxImageWidth"),
    )

    @field_validator("compression_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        return str(value).strip().lower()

    @field_validator("max_image_width")
    @classmethod
    def _clamp_width(cls, value: Optional[int]) -> Optional[int]:
        if value is None:
            return None
        return max(MIN_IMAGE_WIDTH, min(MAX_IMAGE_WIDTH, value))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OptimizationConfig:
        """Build from a settings dict; snake_case and camelCase keys are both accepted."""
        return cls.model_validate(dict(data))

    @classmethod
    def from_env(cls) -> OptimizationConfig:
        data: dict[str, Any] = {}
        for field_name, suffix in _ENV_FIELDS.items():
            value = os.getenv(_ENV_PREFIX + suffix)
            if value not in (None, ""):
                data[field_name] = value
        return cls.model_validate(data)


class OptimizationResult(BaseModel):
    """Outcome of one successful ``optimize`` call."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path of the optimized file")
    identifier: str = Field(..., description="Logical image identifier", examples=["42"])
    mime_type: str = Field(..., description="MIME type of the processor used", examples=["image/jpeg"])
    quality: int = Field(..., description="Quality/compression parameter passed to the processor")
    original_size: int = Field(..., description="Size before optimization in bytes", ge=0)
    optimized_size: int = Field(..., description="Size after optimization in bytes", ge=0)
    savings: int = Field(..., description="original_size - optimized_size; negative when the file grew")
    compression_ratio: float = Field(..., description="Percent saved, 0 when the file grew", ge=0)
    webp_available: bool = Field(False, description="Whether a WebP sibling exists")
    webp_path: Optional[str] = Field(None, description="Path of the WebP sibling")
    backup_path: str = Field(..., description="Path of the pristine backup")
    resized: bool = Field(False, description="Whether the image was downscaled first")


class RevertResult(BaseModel):
    """Outcome of one successful ``revert`` call."""

    model_config = ConfigDict(frozen=True)

    path: str
    identifier: str
    restored_size: int = Field(..., description="Size of the restored file in bytes", ge=0)
    freed_space: int = Field(..., description="Previous size - restored size; negative when the original was larger")
    webp_removed: bool = Field(False, description="Whether a stale WebP sibling was deleted")


class OptimizationFailure(BaseModel):
    """Failure marker with a machine-readable kind."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind = Field(..., description="Failure category", examples=[ErrorKind.NOT_FOUND])
    message: str = Field(..., description="Error message describing what went wrong")

    @property
    def is_fatal(self) -> bool:
        return self.kind.is_fatal

    @classmethod
    def from_exception(cls, exc: ImageOptimizerError) -> OptimizationFailure:
        return cls(kind=exc.kind, message=exc.message)
