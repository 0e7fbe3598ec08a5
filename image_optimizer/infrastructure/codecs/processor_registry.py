from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from image_optimizer.infrastructure.codecs.format_processors import (
    ImageProcessor,
    JpegProcessor,
    PngProcessor,
    WebpProcessor,
)


class ProcessorRegistry:
    """Static MIME type -> processor dispatch table.

    Registries are immutable: ``register`` returns a new registry so a shared
    default can never be changed under a running pipeline.
    """

    def __init__(self, processors: dict[str, ImageProcessor]) -> None:
        self._processors = dict(processors)

    @classmethod
    def from_processors(cls, *processors: ImageProcessor) -> ProcessorRegistry:
        return cls({p.mime_type: p for p in processors})

    @classmethod
    def default(cls) -> ProcessorRegistry:
        return cls.from_processors(JpegProcessor(), PngProcessor(), WebpProcessor())

    def find_by_file(self, path: str | Path) -> ImageProcessor | None:
        for processor in self._processors.values():
            if processor.supports(path):
                return processor
        return None

    def find_by_mime_type(self, mime_type: str) -> ImageProcessor | None:
        return self._processors.get(mime_type)

    def supports(self, mime_type: str) -> bool:
        return mime_type in self._processors

    def supported_mime_types(self) -> list[str]:
        return list(self._processors)

    def register(self, processor: ImageProcessor) -> ProcessorRegistry:
        processors = dict(self._processors)
        processors[processor.mime_type] = processor
        return ProcessorRegistry(processors)

    def __iter__(self) -> Iterator[ImageProcessor]:
        return iter(self._processors.values())

    def __len__(self) -> int:
        return len(self._processors)
