"""Logging for ``budget_report``.

Library modules log through ``get_logger("budget_report.<module>")`` and never
attach handlers, so the package stays silent when imported by another
program. The CLI calls :func:`configure_logging` once at startup; from then on
package records (skipped rows, load counts, run failures) go to stderr.

The level comes from the caller: the CLI passes ``--log-level`` or, failing
that, ``BUDGET_REPORT_LOG_LEVEL`` (see :func:`budget_report.config.log_level_from_env`).
An unrecognized level falls back to INFO with a warning instead of failing
the run.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

PACKAGE_LOGGER = "budget_report"
DEFAULT_LEVEL = logging.INFO
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_handler: logging.Handler | None = None


def parse_level(value: int | str) -> int | None:
    """Return the numeric level for ``value``, or ``None`` if it names no level.

    Accepts ints, digit strings and level names in any case (``"debug"``,
    ``"WARN"``).
    """

    if isinstance(value, int):
        return value
    text = value.strip().upper()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text)
    return level if isinstance(level, int) else None


def configure_logging(
    level: int | str | None = None, *, stream: IO[str] | None = None
) -> logging.Logger:
    """Send package records to ``stream`` (default: the current ``sys.stderr``).

    Only the first call installs a handler; later calls return the package
    logger unchanged.
    """

    global _handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _handler is not None:
        return logger

    resolved = DEFAULT_LEVEL if level is None else parse_level(level)

    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)
    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(DEFAULT_LEVEL if resolved is None else resolved)
    logger.propagate = False

    if resolved is None:
        logger.warning(
            "Unknown log level %r; using %s", level, logging.getLevelName(DEFAULT_LEVEL)
        )
    return logger


def get_logger(name: str) -> logging.Logger:
    package = logging.getLogger(PACKAGE_LOGGER)
    if not package.handlers:
        package.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "parse_level"]
