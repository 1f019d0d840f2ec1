"""
logger.py — Period 00: Core
-----------------------------
Provides the project's structured loggers.
Streams to stdout and, when a log directory is given, appends to
{log_dir}/periods.log.
"""

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "periods.log"


def get_logger(name: str, log_dir: str | Path | None = None, level: str = "INFO") -> logging.Logger:
    """
    Returns a configured Logger instance.

    Args:
        name:     Logger name, e.g. 'periods' or 'periods.controller'.
        log_dir:  Directory for periods.log; no file handler when None.
        level:    Console level name.

    Returns:
        logging.Logger: Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    # Avoid adding duplicate handlers on re-runs within the same process
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(getattr(logging, level.upper(), logging.INFO))
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        # File handler: append so restarts accumulate a history
        fh = logging.FileHandler(log_path / LOG_FILE_NAME, mode="a", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger
