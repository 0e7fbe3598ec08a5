from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError, features

from image_optimizer.domain.exceptions import (
    CodecFailureError,
    CodecUnavailableError,
    IOFailureError,
    NotFoundError,
    UnsupportedTypeError,
)
from image_optimizer.infrastructure.storage.atomic import atomic_target

logger = logging.getLogger(__name__)

_FORMAT_BY_EXTENSION = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG"}
CONVERTIBLE_EXTENSIONS = frozenset(_FORMAT_BY_EXTENSION)


def _drop_unused_alpha(img: Image.Image) -> Image.Image:
    """Return an RGB(A) image; the alpha band is kept only if any pixel uses it."""
    if img.mode not in ("RGB", "RGBA"):
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        img = img.convert("RGBA" if has_alpha else "RGB")
    if img.mode == "RGBA":
        alpha = np.asarray(img.getchannel("A"))
        if alpha.size and int(alpha.min()) == 255:
            return img.convert("RGB")
    return img


class WebpConverter:
    """Creates and removes the ``{path}.webp`` sibling of JPEG/PNG sources."""

    def __init__(self, quality: int = 60) -> None:
        self.quality = quality

    def is_supported(self) -> bool:
        return bool(features.check("webp"))

    @staticmethod
    def can_convert_file(path: str | Path) -> bool:
        return Path(path).suffix.lower().lstrip(".") in CONVERTIBLE_EXTENSIONS

    @staticmethod
    def webp_path(path: str | Path) -> Path:
        return Path(f"{path}.webp")

    def convert(self, path: str | Path, quality: int | None = None, overwrite: bool = False) -> Path:
        """Write the WebP sibling and return its path.

        An existing sibling is kept unless ``overwrite`` is set.
        """
        path = Path(path)
        quality = self.quality if quality is None else quality
        if not path.is_file():
            raise NotFoundError(f"Source file not found: {path}")
        if not self.is_supported():
            raise CodecUnavailableError("WebP support is not available in this Pillow build")
        if not self.can_convert_file(path):
            raise UnsupportedTypeError(f"Cannot convert file to WebP: {path}")

        target = self.webp_path(path)
        if target.exists() and not overwrite:
            return target

        try:
            source_format = _FORMAT_BY_EXTENSION[path.suffix.lower().lstrip(".")]
            with Image.open(path, formats=[source_format]) as img:
                img.load()
                prepared = _drop_unused_alpha(img)
                try:
                    with atomic_target(target) as tmp:
                        prepared.save(tmp, format="WEBP", quality=max(0, min(100, int(quality))))
                finally:
                    if prepared is not img:
                        prepared.close()
        except UnidentifiedImageError as exc:
            raise CodecFailureError(f"Failed to load image for WebP conversion: {exc}") from exc
        except OSError as exc:
            if exc.errno is not None:
                raise IOFailureError(f"Failed to create WebP file {target}: {exc}") from exc
            raise CodecFailureError(f"WebP conversion failed for {path}: {exc}") from exc
        except (ValueError, Image.DecompressionBombError) as exc:
            raise CodecFailureError(f"WebP conversion failed for {path}: {exc}") from exc
        logger.debug("Created WebP sibling %s (quality=%s)", target, quality)
        return target

    def delete_webp_version(self, path: str | Path) -> bool:
        """Remove the sibling; returns True if one existed."""
        target = self.webp_path(path)
        if not target.exists():
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise IOFailureError(f"Failed to delete WebP sibling {target}: {exc}") from exc
        return True
