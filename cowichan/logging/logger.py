# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for cowichan.

Every log entry is one JSON object per line, with a UTC timestamp, the level,
the emitting module and the message. Stage timings, matrix shapes, residuals
and iteration counts travel as extra fields so a benchmark log can be
filtered with jq instead of regular expressions.

How this works:
  - Python's standard ``logging`` does the routing; JsonFormatter turns each
    record into a single JSON line.
  - ``get_logger`` is the only way modules obtain a logger. It attaches a
    stdout handler (plus an optional file handler) once per logger name.
  - Kernel modules create their loggers at import time with the default
    level. ``set_log_level`` re-levels every cowichan logger afterwards,
    which is how ``--log-level`` and ``global.log_level`` reach them.

Example line:
  {"ts": "2026-...", "level": "INFO", "module": "cowichan.pipeline.chain", "msg": "Chain complete", "residual": 1.2e-13}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER_PREFIX = "cowichan"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory fields are ``ts``, ``level``, ``module`` and ``msg``. Fields
    passed through ``extra`` are merged in. The thread name is added for
    records emitted off the main thread, which is how the two solver
    branches can be told apart in a log.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        if record.threadName and record.threadName != "MainThread":
            entry["thread"] = record.threadName

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _build_handlers(level: int, log_file: Optional[Path]) -> list[logging.Handler]:
    formatter = JsonFormatter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stdout_handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # get_logger runs once per module import and again from the CLI; only
    # the first call attaches handlers.
    if logger.handlers:
        return logger

    for handler in _build_handlers(level, log_file):
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def set_log_level(log_level: str, log_file: Optional[Path] = None) -> None:
    """
    Re-level every cowichan logger created so far.

    When ``log_file`` is given, a file handler is attached to loggers that
    don't have one yet, so a single file collects the whole run.
    """
    level = _resolve_log_level(log_level)
    shared_file_handler: Optional[logging.Handler] = None

    for name in list(logging.Logger.manager.loggerDict):
        if name != PACKAGE_LOGGER_PREFIX and not name.startswith(PACKAGE_LOGGER_PREFIX + "."):
            continue
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

        if log_file is None or not logger.handlers:
            continue
        if any(isinstance(handler, logging.FileHandler) for handler in logger.handlers):
            continue
        if shared_file_handler is None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            shared_file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
            shared_file_handler.setLevel(level)
            shared_file_handler.setFormatter(JsonFormatter())
        logger.addHandler(shared_file_handler)
