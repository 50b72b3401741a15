"""Logging helpers."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    log_dir: str = "logs",
    level: int = logging.INFO,
    console: bool = False,
) -> tuple[logging.Logger, str]:
    """Attach the rotating session log (and optionally stderr) to ``edulog``.

    Calling it again keeps existing handlers, so the CLI and GUI can both
    call it without duplicating output.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "edulog.log")

    logger = logging.getLogger("edulog")
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        handler = RotatingFileHandler(
            log_path, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    has_console = any(
        type(h) is logging.StreamHandler for h in logger.handlers
    )
    if console and not has_console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(fmt)
        logger.addHandler(stream)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger, log_path
