from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from image_optimizer.domain.exceptions import CodecFailureError, NotFoundError

_MIME_BY_FORMAT = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


@dataclass(frozen=True)
class SourceImage:
    path: Path
    identifier: str  # logical id, e.g. the attachment id
    byte_size: int
    mime_type: str
    width: int
    height: int

    @classmethod
    def from_path(cls, path: str | Path, identifier: str) -> SourceImage:
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")
        try:
            with Image.open(path) as img:
                fmt = (img.format or "").upper()
                width, height = img.size
        except (UnidentifiedImageError, OSError) as exc:
            raise CodecFailureError(f"Cannot read image {path}: {exc}") from exc
        mime = _MIME_BY_FORMAT.get(fmt, Image.MIME.get(fmt, "application/octet-stream"))
        return cls(
            path=path,
            identifier=str(identifier),
            byte_size=path.stat().st_size,
            mime_type=mime,
            width=width,
            height=height,
        )


@dataclass(frozen=True)
class SizeVariant:
    width: int
    height: int
    file_reference: str  # path or URL of the pre-generated raster
    webp_reference: str | None = None  # sibling WebP if one was generated

    @property
    def has_webp(self) -> bool:
        return bool(self.webp_reference)
