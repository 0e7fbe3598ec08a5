from __future__ import annotations

from image_optimizer.application.use_cases.batch_optimize_images import BatchOptimizeImagesUseCase
from image_optimizer.application.use_cases.optimize_image import OptimizeImageUseCase
from image_optimizer.application.use_cases.revert_image import RevertImageUseCase
from image_optimizer.application.use_cases.select_responsive_variant import (
    SelectResponsiveVariantUseCase,
)
from image_optimizer.domain.services.layout_policy import LayoutPolicy
from image_optimizer.infrastructure.codecs.processor_registry import ProcessorRegistry
from image_optimizer.infrastructure.concurrency.keyed_lock import KeyedLock
from image_optimizer.infrastructure.storage.backup_manager import BackupManager
from image_optimizer.infrastructure.storage.image_resizer import ImageResizer
from image_optimizer.infrastructure.storage.webp_converter import WebpConverter

# One lock table per process so every use case serializes on the same keys
_LOCKS_SINGLETON: KeyedLock | None = None


def get_keyed_lock() -> KeyedLock:
    global _LOCKS_SINGLETON
    if _LOCKS_SINGLETON is None:
        _LOCKS_SINGLETON = KeyedLock()
    return _LOCKS_SINGLETON


def get_backup_manager(backup_dir: str | None = None) -> BackupManager:
    return BackupManager(backup_dir, get_webp_converter())


def get_processor_registry() -> ProcessorRegistry:
    return ProcessorRegistry.default()


def get_webp_converter() -> WebpConverter:
    return WebpConverter()


def get_optimize_use_case(backups: BackupManager | None = None) -> OptimizeImageUseCase:
    return OptimizeImageUseCase(
        backups=backups or get_backup_manager(),
        processors=get_processor_registry(),
        webp_converter=get_webp_converter(),
        resizer=ImageResizer(),
        locks=get_keyed_lock(),
    )


def get_revert_use_case(backups: BackupManager | None = None) -> RevertImageUseCase:
    return RevertImageUseCase(backups=backups or get_backup_manager(), locks=get_keyed_lock())


def get_batch_use_case(
    optimize: OptimizeImageUseCase | None = None, max_workers: int | None = None
) -> BatchOptimizeImagesUseCase:
    return BatchOptimizeImagesUseCase(optimize=optimize or get_optimize_use_case(), max_workers=max_workers)


def get_delivery_use_case(content_width: int | None = None) -> SelectResponsiveVariantUseCase:
    return SelectResponsiveVariantUseCase(layout=LayoutPolicy(content_width))
