"""Logging setup for perch applications.

Perch logs through stdlib ``logging`` on named loggers:

- ``perch.server``  request errors, lifecycle
- ``perch.routing`` registration warnings
- ``perch.access``  access log lines

``configure_logging()`` sends DEBUG and INFO records to stdout and
WARNING and above to stderr. Levels listed in ``disabled`` are dropped.
"""

import json
import logging
import sys
from collections.abc import Iterable
from typing import TextIO

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def level_of(level: str | int) -> int:
    """Resolve a level name (``"info"``) or number to a logging level."""
    if isinstance(level, int):
        return level
    try:
        return _LEVELS[level.lower()]
    except KeyError:
        msg = f"Unknown log level {level!r}"
        raise ValueError(msg) from None


class JSONFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message[, exc]."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class _LevelFilter(logging.Filter):
    def __init__(self, low: int, high: int, disabled: frozenset[int]) -> None:
        super().__init__()
        self.low = low
        self.high = high
        self.disabled = disabled

    def filter(self, record: logging.LogRecord) -> bool:
        return self.low <= record.levelno < self.high and record.levelno not in self.disabled


def configure_logging(
    level: str | int = "info",
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    disabled: Iterable[str | int] = (),
    log_format: str = "text",
) -> logging.Logger:
    """Install stdout/stderr handlers on the ``perch`` logger.

    Calling it again replaces the handlers installed by a previous call.
    Returns the ``perch`` logger.
    """
    logger = logging.getLogger("perch")
    for handler in [h for h in logger.handlers if getattr(h, "_perch", False)]:
        logger.removeHandler(handler)

    dropped = frozenset(level_of(lvl) for lvl in disabled)
    formatter: logging.Formatter = (
        JSONFormatter() if log_format == "json" else logging.Formatter(_TEXT_FORMAT)
    )

    out = logging.StreamHandler(stdout if stdout is not None else sys.stdout)
    out.addFilter(_LevelFilter(logging.NOTSET, logging.WARNING, dropped))
    err = logging.StreamHandler(stderr if stderr is not None else sys.stderr)
    err.addFilter(_LevelFilter(logging.WARNING, logging.CRITICAL + 1, dropped))
    for handler in (out, err):
        handler.setFormatter(formatter)
        handler._perch = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(level_of(level))
    logger.propagate = False
    return logger
