"""Logging configuration for the image optimizer"""

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ProjectOnlyFilter(logging.Filter):
    """Filter to only allow logs from image_optimizer.* modules"""

    def filter(self, record):
        return record.name.startswith('image_optimizer.')


def setup_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Setup logging for applications embedding the pipeline

    Console output always gets records at ``level`` and above. When ``log_dir``
    is given, two files are added, rotated daily at midnight with 30 days of
    history:
    - debug.log: DEBUG+ logs from image_optimizer.* modules only
    - error.log: ERROR+ logs from all modules

    Args:
        level: Console level name; defaults to IMAGE_OPTIMIZER_LOG_LEVEL or INFO
        log_dir: Directory for rotated log files, created if missing
    """
    level_name = (level or os.getenv('IMAGE_OPTIMIZER_LOG_LEVEL', 'INFO')).upper()
    console_level = logging.getLevelName(level_name)
    if not isinstance(console_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear existing handlers to avoid duplicate logs
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        debug_handler = TimedRotatingFileHandler(
            filename=log_dir / "debug.log",
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8'
        )
        debug_handler.setLevel(logging.DEBUG)
        debug_handler.setFormatter(formatter)
        debug_handler.addFilter(ProjectOnlyFilter())
        root_logger.addHandler(debug_handler)

        error_handler = TimedRotatingFileHandler(
            filename=log_dir / "error.log",
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

    logging.getLogger(__name__).info("Logging initialized at level %s", level_name)
