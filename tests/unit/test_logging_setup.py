import logging

import pytest

from image_optimizer.infrastructure.logging import ProjectOnlyFilter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_console_only(restore_root_logger):
    setup_logging("warning")

    assert len(restore_root_logger.handlers) == 1
    assert restore_root_logger.handlers[0].level == logging.WARNING


def test_level_from_env(monkeypatch, restore_root_logger):
    monkeypatch.setenv("IMAGE_OPTIMIZER_LOG_LEVEL", "debug")
    setup_logging()
    assert restore_root_logger.handlers[0].level == logging.DEBUG


def test_unknown_level(restore_root_logger):
    with pytest.raises(ValueError):
        setup_logging("chatty")


def test_file_handlers(tmp_path, restore_root_logger):
    setup_logging("INFO", tmp_path / "logs")

    logging.getLogger("image_optimizer.tests").debug("kept")
    logging.getLogger("thirdparty").debug("dropped")
    for handler in restore_root_logger.handlers:
        handler.flush()

    debug_log = (tmp_path / "logs" / "debug.log").read_text(encoding="utf-8")
    assert "kept" in debug_log
    assert "dropped" not in debug_log
    assert (tmp_path / "logs" / "error.log").exists()


def test_project_filter():
    keep = logging.LogRecord("image_optimizer.main", logging.INFO, __file__, 1, "m", None, None)
    drop = logging.LogRecord("PIL.Image", logging.INFO, __file__, 1, "m", None, None)
    assert ProjectOnlyFilter().filter(keep)
    assert not ProjectOnlyFilter().filter(drop)
