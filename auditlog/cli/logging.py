from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LOGGER_NAME = "auditlog"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    handlers: list[logging.Handler]
    propagate: bool


def _stderr_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(
    *,
    verbosity: int,
    log_file: Path | None,
    enable_file: bool,
) -> LoggingState:
    """
    Route `auditlog.*` loggers to stderr and, optionally, a rotating file.

    Returns the previous logger state for `restore_logging`.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    previous = LoggingState(
        level=logger.level,
        handlers=list(logger.handlers),
        propagate=logger.propagate,
    )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(_stderr_level(verbosity))
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(stderr_handler)

    if enable_file and log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
            )
        except OSError as exc:
            logger.warning("File logging disabled: %s", exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return previous


def restore_logging(state: LoggingState) -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in state.handlers:
        logger.addHandler(handler)
    logger.setLevel(state.level)
    logger.propagate = state.propagate
