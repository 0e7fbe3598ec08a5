from __future__ import annotations

from typing import Protocol


class QualitySettings(Protocol):
    compression_level: str
    jpeg_quality: int
    png_compression: int
    webp_quality: int


class QualityPolicy:
    """Maps a compression level to the numeric parameter each format expects.

    The JPEG table is inverted on purpose: the "high" compression setting
    produces the lowest quality number.
    """

    JPEG_QUALITY = {"low": 80, "medium": 70, "high": 60}
    PNG_COMPRESSION = {"low": 7, "medium": 8, "high": 9}
    FALLBACK_QUALITY = 80

    @classmethod
    def jpeg_quality(cls, level: str, default: int) -> int:
        return cls.JPEG_QUALITY.get(level, default)

    @classmethod
    def png_compression(cls, level: str, default: int) -> int:
        return max(0, min(9, cls.PNG_COMPRESSION.get(level, default)))

    @classmethod
    def for_mime_type(cls, mime_type: str, settings: QualitySettings) -> int:
        if mime_type == "image/jpeg":
            return cls.jpeg_quality(settings.compression_level, settings.jpeg_quality)
        if mime_type == "image/png":
            return cls.png_compression(settings.compression_level, settings.png_compression)
        if mime_type == "image/webp":
            return settings.webp_quality
        return cls.FALLBACK_QUALITY
