from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import LOG_DIR, LOG_LEVEL, LOG_RETENTION, LOG_ROTATION


def configure_logging(level: str = LOG_LEVEL, log_dir: Optional[Path] = LOG_DIR) -> None:
    """
    Route loguru to stderr and, when ``log_dir`` is set, a rotating file.

    Safe to call more than once; previous sinks are dropped.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper())
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_dir / "nearby.log",
            level=level.upper(),
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            enqueue=True,
        )
