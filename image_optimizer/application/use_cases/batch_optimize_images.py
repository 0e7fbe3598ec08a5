from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from image_optimizer.application.dtos.batch_dto import (
    BatchItem,
    BatchItemResult,
    BatchOptimizeResponse,
)
from image_optimizer.application.dtos.optimization_dto import (
    OptimizationConfig,
    OptimizationFailure,
)
from image_optimizer.application.use_cases.optimize_image import OptimizeImageUseCase
from image_optimizer.domain.exceptions import ImageOptimizerError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class BatchOptimizeImagesUseCase:
    """
    Optimize many images on a worker pool.

    Bad inputs (missing file, unsupported type, corrupt image) are recorded
    and the batch moves on. A broken environment (codec missing, disk or
    permission errors) is recorded too, and items that have not started yet
    are skipped instead of failing the same way.
    """

    optimize: OptimizeImageUseCase
    max_workers: int | None = None

    def execute(
        self,
        items: Iterable[BatchItem | dict[str, Any] | tuple[str, str]],
        config: OptimizationConfig,
    ) -> BatchOptimizeResponse:
        batch = [self._coerce(item) for item in items]
        if not batch:
            return BatchOptimizeResponse()

        abort = threading.Event()

        def run(item: BatchItem) -> BatchItemResult | None:
            if abort.is_set():
                return None
            try:
                result = self.optimize.execute(item.path, item.identifier, config)
            except ImageOptimizerError as exc:
                failure = OptimizationFailure.from_exception(exc)
                if failure.is_fatal:
                    abort.set()
                    logger.error("Stopping batch after %s on %s: %s", exc.kind.value, item.path, exc.message)
                else:
                    logger.warning("Skipping %s: [%s] %s", item.path, exc.kind.value, exc.message)
                return BatchItemResult(path=item.path, identifier=item.identifier, error=failure)
            return BatchItemResult(path=item.path, identifier=item.identifier, result=result)

        with ThreadPoolExecutor(max_workers=self._worker_count()) as executor:
            futures = [executor.submit(run, item) for item in batch]
            outcomes = [future.result() for future in futures]

        response = BatchOptimizeResponse(
            items=[outcome for outcome in outcomes if outcome is not None],
            aborted=abort.is_set(),
            skipped=[item for item, outcome in zip(batch, outcomes) if outcome is None],
        )
        logger.info(
            "Batch finished: %d optimized, %d failed, %d skipped, %d bytes saved",
            response.succeeded,
            response.failed,
            len(response.skipped),
            response.total_savings,
        )
        return response

    def _worker_count(self) -> int:
        if self.max_workers:
            return self.max_workers
        raw = os.getenv("IMAGE_OPTIMIZER_MAX_WORKERS")
        if not raw:
            return DEFAULT_MAX_WORKERS
        try:
            return max(1, int(raw))
        except ValueError:
            logger.warning(
                "Ignoring invalid IMAGE_OPTIMIZER_MAX_WORKERS=%r, using %d", raw, DEFAULT_MAX_WORKERS
            )
            return DEFAULT_MAX_WORKERS

    @staticmethod
    def _coerce(item: BatchItem | dict[str, Any] | tuple[str, str]) -> BatchItem:
        if isinstance(item, BatchItem):
            return item
        if isinstance(item, dict):
            return BatchItem.model_validate(item)
        path, identifier = item
        return BatchItem(path=str(path), identifier=str(identifier))
