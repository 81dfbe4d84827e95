"""Logging setup for ServiceScout.

All diagnostics go to *stderr*; stdout is reserved for reports, so
``service-scout audit --json > links.json`` always yields valid JSON.
Everything logs through one named logger::

    from service_scout.logger import logger
    logger.info("Checking %d services...", len(services))

The CLI calls :func:`init_logging` once per invocation with the level, file
and format given on the command line.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "ServiceScout"

# Rotation for --log-file: five files of 5 MiB each at most.
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

Level = Union[int, str]


def _handlers(log_file: Optional[Union[str, Path]], fmt: str) -> list[logging.Handler]:
    # sys.stderr is read at call time so a click invocation gets its own stream.
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                Path(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the ServiceScout logger.

    With *replace_handlers* the previous handlers are closed first, which is
    what repeated CLI invocations in one process need.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    if replace_handlers:
        while lg.handlers:
            old = lg.handlers[0]
            lg.removeHandler(old)
            old.close()
    for handler in _handlers(log_file, log_format):
        lg.addHandler(handler)
    lg.propagate = False
    return lg


def init_logging(
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
