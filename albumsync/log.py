"""Logging initialization using loguru."""

import sys
from pathlib import Path

from loguru import logger

from albumsync.config import LOG_DIR


def init_logging(log_dir: Path = LOG_DIR, level: str = "INFO") -> None:
    """Send log records to stderr and to a rotating file under log_dir."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        str(log_dir / "albumsync_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        backtrace=False,
        diagnose=False,
        level=level,
    )
