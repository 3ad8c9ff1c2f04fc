# mirrorget/logger.py
"""Logging setup for mirrorget.

Every module logs through the ``mirrorget`` logger::

    logger = logging.getLogger("mirrorget")

The CLI calls :func:`init_logging` once per invocation; records go to stdout
and, optionally, to a size-rotated file.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "mirrorget"

_ROTATE_BYTES: Final[int] = 5 * 1024 * 1024
_ROTATE_BACKUPS: Final[int] = 3


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Reset the project logger: stdout always, *log_file* when given."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file), maxBytes=_ROTATE_BYTES, backupCount=_ROTATE_BACKUPS, encoding="utf-8"
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)

    # records must not reach the root logger
    lg.propagate = False
    return lg


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["DEFAULT_FORMAT", "LOGGER_NAME", "init_logging", "logger"]
