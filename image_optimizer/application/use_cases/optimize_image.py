from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from image_optimizer.application.dtos.optimization_dto import (
    OptimizationConfig,
    OptimizationResult,
)
from image_optimizer.domain.exceptions import (
    ImageOptimizerError,
    IOFailureError,
    NotFoundError,
    UnsupportedTypeError,
)
from image_optimizer.domain.services.quality_policy import QualityPolicy
from image_optimizer.infrastructure.codecs.processor_registry import ProcessorRegistry
from image_optimizer.infrastructure.concurrency.keyed_lock import KeyedLock, image_key
from image_optimizer.infrastructure.storage.atomic import atomic_target
from image_optimizer.infrastructure.storage.backup_manager import BackupManager
from image_optimizer.infrastructure.storage.image_resizer import ImageResizer
from image_optimizer.infrastructure.storage.webp_converter import WebpConverter

logger = logging.getLogger(__name__)


def file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except FileNotFoundError as exc:
        raise NotFoundError(f"File not found: {path}") from exc
    except OSError as exc:
        raise IOFailureError(f"Cannot determine file size of {path}: {exc}") from exc


@dataclass
class OptimizeImageUseCase:
    """
    Recompress one image in place and report the size delta.

    WORKFLOW:
    1. Check the file and pick the processor for its extension
    2. Back it up (only the first time for a given identifier)
    3. Optionally downscale, then recompress a working copy and swap it in
    4. Optionally write the WebP sibling (best effort, never fails the call);
       when no fresh sibling is written, any older one is removed

    The file is either fully optimized or left exactly as it was. Calls for
    the same (path, identifier) are serialized through ``locks``.
    """

    backups: BackupManager
    processors: ProcessorRegistry
    webp_converter: WebpConverter
    resizer: ImageResizer
    locks: KeyedLock

    def execute(
        self, path: str | Path, identifier: str, config: OptimizationConfig
    ) -> OptimizationResult:
        """
        Args:
            path: Image file to optimize
            identifier: Logical image id (e.g. attachment id), keys the backup
            config: Quality and WebP settings for this call

        Returns:
            OptimizationResult with sizes, ratio and backup/WebP paths

        Raises:
            NotFoundError: the file does not exist
            UnsupportedTypeError: no processor handles the extension
            CodecUnavailableError / CodecFailureError / IOFailureError: from the
                backup, resize or processor steps
        """
        path = Path(path)
        identifier = str(identifier)
        with self.locks.hold(image_key(path, identifier)):
            return self._optimize(path, identifier, config)

    def _optimize(self, path: Path, identifier: str, config: OptimizationConfig) -> OptimizationResult:
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")
        original_size = file_size(path)

        processor = self.processors.find_by_file(path)
        if processor is None:
            raise UnsupportedTypeError(f"No processor available for file type: {path}")

        backup_path = self.backups.create_backup(path, identifier)
        quality = QualityPolicy.for_mime_type(processor.mime_type, config)

        # All mutations happen on a working copy that replaces the file at the end
        resized = False
        try:
            with atomic_target(path) as work:
                shutil.copyfile(path, work)
                if config.max_image_width:
                    resized = self.resizer.scale_to_max_width(work, config.max_image_width).resized
                processor.process(work, quality)
        except ImageOptimizerError:
            raise
        except OSError as exc:
            raise IOFailureError(f"Failed to write optimized {path}: {exc}") from exc

        optimized_size = file_size(path)
        savings = original_size - optimized_size
        compression_ratio = (savings / original_size) * 100 if savings > 0 else 0.0

        webp_path = None
        if config.enable_webp and self.webp_converter.can_convert_file(path):
            webp_path = self._create_webp(path, config.webp_quality)
        if webp_path is None:
            self._drop_stale_webp(path)

        logger.info(
            "Optimized %s (%s): %d -> %d bytes (%.1f%%)",
            path,
            identifier,
            original_size,
            optimized_size,
            compression_ratio,
        )
        return OptimizationResult(
            path=str(path),
            identifier=identifier,
            mime_type=processor.mime_type,
            quality=quality,
            original_size=original_size,
            optimized_size=optimized_size,
            savings=savings,
            compression_ratio=compression_ratio,
            webp_available=webp_path is not None,
            webp_path=str(webp_path) if webp_path is not None else None,
            backup_path=str(backup_path),
            resized=resized,
        )

    def _create_webp(self, path: Path, quality: int) -> Path | None:
        # the sibling must match the freshly optimized content
        try:
            return self.webp_converter.convert(path, quality, overwrite=True)
        except ImageOptimizerError as exc:
            logger.warning("Skipping WebP sibling for %s: [%s] %s", path, exc.kind.value, exc.message)
            return None

    def _drop_stale_webp(self, path: Path) -> None:
        # a sibling from earlier content must not outlive webp_available=False
        try:
            if self.webp_converter.delete_webp_version(path):
                logger.info("Removed stale WebP sibling of %s", path)
        except IOFailureError as exc:
            logger.warning("Could not remove stale WebP sibling of %s: %s", path, exc.message)
