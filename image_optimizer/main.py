from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from image_optimizer.application.dtos.batch_dto import BatchOptimizeResponse
from image_optimizer.application.dtos.delivery_dto import ResponsiveSelection
from image_optimizer.application.dtos.optimization_dto import (
    OptimizationConfig,
    OptimizationResult,
    RevertResult,
)
from image_optimizer.application.use_cases.batch_optimize_images import BatchOptimizeImagesUseCase
from image_optimizer.application.use_cases.optimize_image import OptimizeImageUseCase
from image_optimizer.application.use_cases.revert_image import RevertImageUseCase
from image_optimizer.application.use_cases.select_responsive_variant import (
    SelectResponsiveVariantUseCase,
)
from image_optimizer.domain.entities.backup import BackupEntity
from image_optimizer.domain.entities.source_image import SizeVariant, SourceImage
from image_optimizer.domain.services.priority_service import RenderContext
from image_optimizer.domain.services.size_selector import SizeSelector
from image_optimizer.infrastructure.dependencies import (
    get_backup_manager,
    get_batch_use_case,
    get_delivery_use_case,
    get_optimize_use_case,
    get_revert_use_case,
)
from image_optimizer.infrastructure.storage.backup_manager import BackupManager


@dataclass
class ImagePipeline:
    """Function-call surface of the pipeline.

    ### Optimization
    - ``optimize`` / ``revert`` mutate one file, guarded per (path, identifier)
    - ``optimize_many`` runs ``optimize`` on a worker pool

    ### Delivery
    - ``select_variant`` / ``build_sizes_hint`` / ``build_srcset`` are pure
    - ``select_responsive`` bundles them with loading and preload hints

    ### Errors
    Every failure is an ``ImageOptimizerError`` carrying an ``ErrorKind``.
    """

    backups: BackupManager
    optimizer: OptimizeImageUseCase
    reverter: RevertImageUseCase
    batch: BatchOptimizeImagesUseCase
    delivery: SelectResponsiveVariantUseCase

    def optimize(
        self, path: str | Path, identifier: str, config: OptimizationConfig | None = None
    ) -> OptimizationResult:
        return self.optimizer.execute(path, identifier, config or OptimizationConfig())

    def revert(self, path: str | Path, identifier: str) -> RevertResult:
        return self.reverter.execute(path, identifier)

    def optimize_many(
        self, items: Iterable[Any], config: OptimizationConfig | None = None
    ) -> BatchOptimizeResponse:
        return self.batch.execute(items, config or OptimizationConfig())

    @staticmethod
    def inspect(path: str | Path, identifier: str) -> SourceImage:
        return SourceImage.from_path(path, identifier)

    def backup_info(self, path: str | Path, identifier: str) -> BackupEntity:
        return self.backups.describe(path, identifier)

    def has_backup(self, path: str | Path, identifier: str) -> bool:
        return self.backups.has_backup(path, identifier)

    def delete_backup(self, path: str | Path, identifier: str) -> bool:
        return self.backups.delete_backup(path, identifier)

    @staticmethod
    def select_variant(target_width: int, variants: Iterable[SizeVariant]) -> SizeVariant | None:
        return SizeSelector.select_variant(target_width, variants)

    @staticmethod
    def build_sizes_hint(target_width: int) -> str:
        return SizeSelector.build_sizes_hint(target_width)

    @staticmethod
    def build_srcset(variants: Iterable[SizeVariant], prefer_webp: bool = False) -> str:
        return SizeSelector.build_srcset(variants, prefer_webp=prefer_webp)

    def select_responsive(
        self,
        variants: Iterable[SizeVariant],
        target_width: int | None = None,
        context: RenderContext | None = None,
        identifier: str | None = None,
        prefer_webp: bool = False,
    ) -> ResponsiveSelection:
        return self.delivery.execute(
            variants,
            target_width=target_width,
            context=context,
            identifier=identifier,
            prefer_webp=prefer_webp,
        )


def create_pipeline(
    backup_dir: str | None = None,
    max_workers: int | None = None,
    content_width: int | None = None,
) -> ImagePipeline:
    backups = get_backup_manager(backup_dir)
    optimizer = get_optimize_use_case(backups)
    return ImagePipeline(
        backups=backups,
        optimizer=optimizer,
        reverter=get_revert_use_case(backups),
        batch=get_batch_use_case(optimizer, max_workers),
        delivery=get_delivery_use_case(content_width),
    )


pipeline = create_pipeline()


def optimize(path: str | Path, identifier: str, config: OptimizationConfig | None = None) -> OptimizationResult:
    return pipeline.optimize(path, identifier, config)


def revert(path: str | Path, identifier: str) -> RevertResult:
    return pipeline.revert(path, identifier)


def select_variant(target_width: int, variants: Iterable[SizeVariant]) -> SizeVariant | None:
    return pipeline.select_variant(target_width, variants)


def build_sizes_hint(target_width: int) -> str:
    return pipeline.build_sizes_hint(target_width)
