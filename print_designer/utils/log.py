# print_designer/utils/log.py
"""
Logging setup shared by the CLI and the tests.

The core modules only ever call ``get_logger(__name__)``; handlers are
installed once by whoever owns the process (the CLI, a server, a test).
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int | str = logging.INFO, log_file: Optional[str | os.PathLike] = None) -> None:
    """
    Install a console handler (and optionally a file handler) on the
    ``print_designer`` logger. Calling it again is a no-op.

    A file handler that cannot be opened is reported and skipped; console
    logging keeps working.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("print_designer")
    logger.setLevel(level)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)
    logger.addHandler(console)

    if log_file:
        try:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(path, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(fmt)
            logger.addHandler(fh)
        except OSError as e:
            logger.warning("Could not open log file %s: %s", log_file, e)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
