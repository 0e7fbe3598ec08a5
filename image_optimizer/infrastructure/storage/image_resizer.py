from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from image_optimizer.domain.exceptions import (
    CodecFailureError,
    IOFailureError,
    NotFoundError,
)
from image_optimizer.infrastructure.storage.atomic import atomic_target

logger = logging.getLogger(__name__)

# Intermediate encode quality; the format processor recompresses right after.
_INTERMEDIATE_QUALITY = 95


@dataclass(frozen=True)
class ResizeResult:
    resized: bool
    original_width: int
    original_height: int
    new_width: int
    new_height: int


class ImageResizer:
    """Downscales oversized originals so they are never served far wider than the layout."""

    @staticmethod
    def target_size(width: int, height: int, max_width: int) -> tuple[int, int]:
        if width <= max_width:
            return width, height
        return max_width, max(1, int(max_width * height / width))

    def scale_to_max_width(self, path: str | Path, max_width: int) -> ResizeResult:
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            with Image.open(path) as img:
                width, height = img.size
                new_width, new_height = self.target_size(width, height, max_width)
                if (new_width, new_height) == (width, height):
                    return ResizeResult(False, width, height, width, height)
                fmt = img.format
                img.load()
                resized = img.resize((new_width, new_height), Image.Resampling.LANCZOS)
                try:
                    with atomic_target(path) as tmp:
                        resized.save(tmp, format=fmt, **self._save_options(img, fmt))
                finally:
                    resized.close()
        except UnidentifiedImageError as exc:
            raise CodecFailureError(f"Failed to load image for resizing: {exc}") from exc
        except OSError as exc:
            if exc.errno is not None:
                raise IOFailureError(f"Failed to write resized image {path}: {exc}") from exc
            raise CodecFailureError(f"Resizing failed for {path}: {exc}") from exc
        except (ValueError, Image.DecompressionBombError) as exc:
            raise CodecFailureError(f"Resizing failed for {path}: {exc}") from exc

        logger.info("Resized %s from %dx%d to %dx%d", path, width, height, new_width, new_height)
        return ResizeResult(True, width, height, new_width, new_height)

    @staticmethod
    def _save_options(img: Image.Image, fmt: str | None) -> dict[str, Any]:
        options: dict[str, Any] = {}
        for key in ("icc_profile", "exif"):
            if img.info.get(key):
                options[key] = img.info[key]
        if fmt in ("JPEG", "WEBP"):
            options["quality"] = _INTERMEDIATE_QUALITY
        return options
