"""Shared logging helpers and error types for the region filter.

The ``vcf_region_filter`` logger writes timestamped records to stderr so that
stdout stays reserved for the VCF text produced by the run. Importing the
module applies the default configuration (console only, INFO level).

:func:`configure_logging` is an idempotent entry point for customising that
behaviour: call it with ``log_level`` to adjust verbosity, ``log_file`` to add
a persistent file trail, or ``enable_console=False`` to silence stderr.
Repeated invocations clear previous handlers so no duplicate outputs are
accumulated.

Fatal conditions are modelled by :class:`RegionFilterError` and its
subclasses. :func:`handle_critical_error` logs a failure at ``ERROR`` and
``CRITICAL`` level and raises the requested exception type so the caller (a
worker thread or the CLI) can decide how to unwind.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import Iterable

LOG_FORMAT = "%(asctime)s : %(levelname)s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("vcf_region_filter")
# Handlers live on this logger only; records never reach a root handler as well.
logger.propagate = False


def _normalize_level(level: int | str) -> int:
    """Return a numeric logging level for *level*."""
    if isinstance(level, str):
        name = level.upper()
        numeric = logging.getLevelName(name)
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        return numeric
    return int(level)


def _clear_handlers(existing: Iterable[logging.Handler]) -> None:
    for h in list(existing):
        try:
            h.close()
        finally:
            logger.removeHandler(h)


def configure_logging(
    *,
    log_level: int | str = logging.INFO,
    log_file: str | os.PathLike[str] | None = None,
    enable_console: bool = True,
    create_dirs: bool = True,
) -> None:
    """Idempotent logger setup for the region filter."""
    level = _normalize_level(log_level)
    _clear_handlers(logger.handlers)
    logger.setLevel(level)

    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_file:
        path = os.fspath(log_file)
        if create_dirs:
            d = os.path.dirname(path)
            if d:
                os.makedirs(d, exist_ok=True)
        fh = logging.FileHandler(path)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    if enable_console:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(fmt)
        logger.addHandler(sh)


class RegionFilterError(RuntimeError):
    """Base exception for unrecoverable errors in the filter run."""


class ConfigurationError(RegionFilterError):
    """Raised when required inputs are missing, unreadable or match nothing."""


class IntervalFormatError(RegionFilterError):
    """Raised when the interval file contains a malformed row."""


class VCFFormatError(RegionFilterError):
    """Raised when a variant file cannot be trusted (bad version, header or field)."""


def log_message(
    message: str,
    verbose: bool = False,
    level: int = logging.INFO,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log *message* at the requested level and optionally echo it to stderr."""

    logger.log(level, message, exc_info=exc_info)
    if verbose:
        print(message, file=sys.stderr)


def handle_critical_error(
    message: str,
    exc_cls=None,
    *,
    exc_info: BaseException | bool | None = None,
) -> None:
    """Log and raise a fatal error."""

    log_message(message, level=logging.ERROR)
    logger.critical(message, exc_info=exc_info)
    exception_class = exc_cls or RegionFilterError
    if isinstance(exc_info, BaseException):
        raise exception_class(message) from exc_info
    raise exception_class(message)


__all__ = [
    "configure_logging",
    "logger",
    "log_message",
    "handle_critical_error",
    "RegionFilterError",
    "ConfigurationError",
    "IntervalFormatError",
    "VCFFormatError",
]

# Default configuration: console at INFO level.
configure_logging()
