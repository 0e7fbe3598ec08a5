import os
from unittest.mock import MagicMock

import pytest

from image_optimizer.domain.exceptions import (
    BackupNotFoundError,
    ErrorKind,
    IOFailureError,
    NotFoundError,
)
from image_optimizer.infrastructure.storage.backup_manager import BackupManager


@pytest.fixture()
def manager():
    return BackupManager(".backups")


def test_backup_path_layout(manager, tmp_path):
    path = tmp_path / "photo.jpg"
    assert manager.backup_path_for(path, "42") == tmp_path / ".backups" / "photo-backup-42.jpg"
    # identifiers never escape the backup directory
    assert manager.backup_path_for(path, "../x").name == "photo-backup-..%2Fx.jpg"


def test_similar_identifiers_get_separate_backups(manager, tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"original")
    names = {manager.backup_path_for(path, ident).name for ident in ("1/2", "1_2", "1%2F2", "1 2")}
    assert len(names) == 4

    manager.create_backup(path, "1/2")
    path.write_bytes(b"optimized")
    manager.create_backup(path, "1_2")

    manager.restore(path, "1/2")
    assert path.read_bytes() == b"original"
    manager.restore(path, "1_2")
    assert path.read_bytes() == b"optimized"


def test_backup_dir_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("IMAGE_OPTIMIZER_BACKUP_DIR", ".originals")
    assert BackupManager().backup_path_for(tmp_path / "a.png", "1").parent.name == ".originals"


def test_create_backup_is_idempotent(manager, tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"first")

    first = manager.create_backup(path, "7")
    path.write_bytes(b"second")
    second = manager.create_backup(path, "7")

    assert first == second
    assert first.read_bytes() == b"first"
    assert manager.has_backup(path, "7")


def test_create_backup_missing_source(manager, tmp_path):
    with pytest.raises(NotFoundError):
        manager.create_backup(tmp_path / "missing.jpg", "1")


def test_restore_overwrites_and_removes_webp_sibling(manager, tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"pristine")
    manager.create_backup(path, "3")
    path.write_bytes(b"optimized")
    sibling = tmp_path / "photo.jpg.webp"
    sibling.write_bytes(b"webp")

    manager.restore(path, "3")

    assert path.read_bytes() == b"pristine"
    assert not sibling.exists()
    # backup survives so a second revert works too
    assert manager.has_backup(path, "3")
    manager.restore(path, "3")
    assert path.read_bytes() == b"pristine"


def test_restore_without_backup_is_distinct_not_found(manager, tmp_path):
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"data")

    with pytest.raises(BackupNotFoundError) as exc_info:
        manager.restore(path, "9")

    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert not exc_info.value.kind.is_fatal
    assert path.read_bytes() == b"data"


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions")
def test_unwritable_directory_is_io_failure(manager, tmp_path):
    folder = tmp_path / "locked"
    folder.mkdir()
    path = folder / "photo.jpg"
    path.write_bytes(b"data")
    folder.chmod(0o500)
    try:
        with pytest.raises(IOFailureError) as exc_info:
            manager.create_backup(path, "1")
        assert exc_info.value.kind.is_fatal
    finally:
        folder.chmod(0o700)


def test_delete_backup_and_describe(manager, tmp_path):
    path = tmp_path / "icon.png"
    path.write_bytes(b"12345")
    manager.create_backup(path, "5")

    info = manager.describe(path, "5")
    assert info.exists
    assert info.size == 5
    assert info.identifier == "5"

    assert manager.delete_backup(path, "5") is True
    assert not manager.has_backup(path, "5")
    assert manager.describe(path, "5").size is None
    # deleting twice is fine
    assert manager.delete_backup(path, "5") is True


def test_restore_delegates_sibling_removal(tmp_path):
    converter = MagicMock()
    manager = BackupManager(".backups", webp_converter=converter)
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"data")
    manager.create_backup(path, "1")

    manager.restore(path, "1")

    converter.delete_webp_version.assert_called_once_with(path)
