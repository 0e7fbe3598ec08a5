from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from image_optimizer.application.dtos.optimization_dto import RevertResult
from image_optimizer.application.use_cases.optimize_image import file_size
from image_optimizer.domain.exceptions import NotFoundError
from image_optimizer.infrastructure.concurrency.keyed_lock import KeyedLock, image_key
from image_optimizer.infrastructure.storage.backup_manager import BackupManager
from image_optimizer.infrastructure.storage.webp_converter import WebpConverter

logger = logging.getLogger(__name__)


@dataclass
class RevertImageUseCase:
    """
    Use case for restoring an optimized image from its backup.

    The backup is kept after the restore, so reverting twice is harmless and
    a later optimize starts from the same pristine copy.
    """

    backups: BackupManager
    locks: KeyedLock

    def execute(self, path: str | Path, identifier: str) -> RevertResult:
        """
        Restore ``path`` from the backup taken for ``identifier``.

        Returns:
            RevertResult with the restored size and the space freed

        Raises:
            NotFoundError: the live file does not exist
            BackupNotFoundError: there is nothing to revert
            IOFailureError: the backup cannot be read or the file written
        """
        path = Path(path)
        identifier = str(identifier)
        with self.locks.hold(image_key(path, identifier)):
            if not path.is_file():
                raise NotFoundError(f"File not found: {path}")
            previous_size = file_size(path)
            had_webp = WebpConverter.webp_path(path).exists()

            self.backups.restore(path, identifier)

            restored_size = file_size(path)

        logger.info("Reverted %s (%s) to %d bytes", path, identifier, restored_size)
        return RevertResult(
            path=str(path),
            identifier=identifier,
            restored_size=restored_size,
            freed_space=previous_size - restored_size,
            webp_removed=had_webp,
        )
