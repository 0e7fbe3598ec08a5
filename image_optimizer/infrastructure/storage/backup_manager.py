from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import quote

from image_optimizer.domain.entities.backup import BackupEntity
from image_optimizer.domain.exceptions import (
    BackupNotFoundError,
    IOFailureError,
    NotFoundError,
)
from image_optimizer.infrastructure.storage.atomic import copy_atomic
from image_optimizer.infrastructure.storage.webp_converter import WebpConverter

logger = logging.getLogger(__name__)


class BackupManager:
    """Keeps one pristine copy per ``(path, identifier)`` next to the source.

    Backups live in ``{dir}/{backup_dir}/{stem}-backup-{identifier}{ext}``.
    The identifier is percent-encoded into the file name.
    An existing backup is never overwritten, so it always holds the content
    captured before the first optimization. Restoring does not delete it.
    """

    BACKUP_SUFFIX = "-backup"

    def __init__(self, backup_dir: str | None = None, webp_converter: WebpConverter | None = None) -> None:
        self.backup_dir = backup_dir or os.getenv("IMAGE_OPTIMIZER_BACKUP_DIR", ".backups")
        self.webp_converter = webp_converter or WebpConverter()

    def backup_path_for(self, path: str | Path, identifier: str) -> Path:
        path = Path(path)
        # distinct identifiers map to distinct file names
        safe_id = quote(str(identifier), safe="")
        filename = f"{path.stem}{self.BACKUP_SUFFIX}-{safe_id}{path.suffix}"
        return path.parent / self.backup_dir / filename

    def create_backup(self, path: str | Path, identifier: str) -> Path:
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"Source file not found: {path}")

        backup_path = self.backup_path_for(path, identifier)
        try:
            backup_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise IOFailureError(f"Failed to create backup directory {backup_path.parent}: {exc}") from exc

        if backup_path.exists():
            logger.debug("Backup already present for %s (%s)", path, identifier)
            return backup_path

        try:
            copy_atomic(path, backup_path)
        except OSError as exc:
            raise IOFailureError(f"Failed to copy {path} to backup: {exc}") from exc
        logger.info("Backed up %s to %s", path, backup_path)
        return backup_path

    def restore(self, path: str | Path, identifier: str) -> None:
        """Overwrite ``path`` with its backup and drop the stale WebP sibling.

        Raises:
            BackupNotFoundError: nothing to revert
            IOFailureError: the backup cannot be read or the target written
        """
        path = Path(path)
        backup_path = self.backup_path_for(path, identifier)
        if not backup_path.is_file():
            raise BackupNotFoundError(f"Backup not found: {backup_path}")

        # the sibling was derived from the optimized content
        self.webp_converter.delete_webp_version(path)

        try:
            copy_atomic(backup_path, path)
        except OSError as exc:
            raise IOFailureError(f"Failed to restore {path} from backup: {exc}") from exc
        logger.info("Restored %s from %s", path, backup_path)

    def has_backup(self, path: str | Path, identifier: str) -> bool:
        return self.backup_path_for(path, identifier).is_file()

    def delete_backup(self, path: str | Path, identifier: str) -> bool:
        backup_path = self.backup_path_for(path, identifier)
        try:
            backup_path.unlink(missing_ok=True)
        except OSError as exc:
            raise IOFailureError(f"Failed to delete backup {backup_path}: {exc}") from exc
        return True

    def describe(self, path: str | Path, identifier: str) -> BackupEntity:
        backup_path = self.backup_path_for(path, identifier)
        size = backup_path.stat().st_size if backup_path.is_file() else None
        return BackupEntity(
            original_path=Path(path),
            identifier=str(identifier),
            backup_path=backup_path,
            size=size,
        )
