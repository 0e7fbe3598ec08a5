from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError, features

from image_optimizer.domain.exceptions import (
    CodecFailureError,
    CodecUnavailableError,
    ImageOptimizerError,
    IOFailureError,
    NotFoundError,
)
from image_optimizer.infrastructure.storage.atomic import atomic_target

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Recompresses one image format in place.

    Subclasses declare the MIME type, the extensions they accept, the Pillow
    format name and the Pillow feature that must be compiled in. ``process``
    decodes the file, re-encodes it to a temp file next to it and renames the
    temp file over the original, so a failed call leaves the file untouched.
    """

    mime_type: str = ""
    extensions: frozenset[str] = frozenset()
    pil_format: str = ""
    codec_feature: str = ""
    min_quality: int = 0
    max_quality: int = 100

    def supports(self, path: str | Path) -> bool:
        return Path(path).suffix.lower().lstrip(".") in self.extensions

    def is_available(self) -> bool:
        return bool(features.check(self.codec_feature))

    def clamp(self, quality: int) -> int:
        return max(self.min_quality, min(self.max_quality, int(quality)))

    def process(self, path: str | Path, quality: int) -> None:
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")
        if not self.is_available():
            raise CodecUnavailableError(
                f"{self.pil_format} support is not available in this Pillow build"
            )
        quality = self.clamp(quality)
        name = self.pil_format
        try:
            # only the declared format is decoded; mislabeled files are rejected
            with Image.open(path, formats=[self.pil_format]) as img:
                img.load()
                prepared = self._prepare(img)
                try:
                    with atomic_target(path) as tmp:
                        prepared.save(tmp, format=self.pil_format, **self._save_options(img, quality))
                finally:
                    if prepared is not img:
                        prepared.close()
        except ImageOptimizerError:
            raise
        except UnidentifiedImageError as exc:
            raise CodecFailureError(f"Failed to load {name} image {path}: {exc}") from exc
        except OSError as exc:
            # Pillow reports decode errors as OSError without an errno
            if exc.errno is not None:
                raise IOFailureError(f"{name} optimization failed for {path}: {exc}") from exc
            raise CodecFailureError(f"{name} optimization failed for {path}: {exc}") from exc
        except (ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise CodecFailureError(f"{name} optimization failed for {path}: {exc}") from exc
        logger.debug("Re-encoded %s as %s (quality=%s)", path, name, quality)

    # --------- hooks ---------
    def _prepare(self, img: Image.Image) -> Image.Image:
        return img

    def _save_options(self, img: Image.Image, quality: int) -> dict[str, Any]:
        options: dict[str, Any] = {}
        icc = img.info.get("icc_profile")
        if icc:
            options["icc_profile"] = icc
        return options


class JpegProcessor(ImageProcessor):
    mime_type = "image/jpeg"
    extensions = frozenset({"jpg", "jpeg"})
    pil_format = "JPEG"
    codec_feature = "jpg"

    def _prepare(self, img: Image.Image) -> Image.Image:
        if img.mode in ("RGB", "L", "CMYK"):
            return img
        return img.convert("RGB")

    def _save_options(self, img: Image.Image, quality: int) -> dict[str, Any]:
        options = super()._save_options(img, quality)
        exif = img.info.get("exif")
        if exif:
            options["exif"] = exif
        # progressive scans compress better and render earlier
        options.update(quality=quality, optimize=True, progressive=True)
        return options


class PngProcessor(ImageProcessor):
    """``quality`` is the zlib compression effort, clamped to 0-9."""

    mime_type = "image/png"
    extensions = frozenset({"png"})
    pil_format = "PNG"
    codec_feature = "zlib"
    max_quality = 9

    def _save_options(self, img: Image.Image, quality: int) -> dict[str, Any]:
        options = super()._save_options(img, quality)
        # optimize=True would force level 9 and ignore the requested effort
        options.update(compress_level=quality, optimize=False)
        return options


class WebpProcessor(ImageProcessor):
    mime_type = "image/webp"
    extensions = frozenset({"webp"})
    pil_format = "WEBP"
    codec_feature = "webp"

    def _prepare(self, img: Image.Image) -> Image.Image:
        if img.mode in ("RGB", "RGBA"):
            return img
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")

    def _save_options(self, img: Image.Image, quality: int) -> dict[str, Any]:
        options = super()._save_options(img, quality)
        options["quality"] = quality
        if getattr(img, "is_animated", False):
            options["save_all"] = True
        return options
