from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class BackupEntity:
    original_path: Path
    identifier: str
    backup_path: Path
    size: int | None = None  # bytes, None when the backup is not on disk yet

    @property
    def exists(self) -> bool:
        return self.backup_path.is_file()
