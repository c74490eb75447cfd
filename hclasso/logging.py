"""Logging utilities for hclasso.

Every module obtains its logger through :func:`get_logger`, so records share
the ``hclasso.`` namespace and one handler per logger. Loggers do not
propagate to the root logger.

Column solves run on pool threads named ``hclasso-worker_<n>``. At DEBUG level
the default format includes the thread name, so per-column records can be
attributed to a worker.

Example:
    >>> from hclasso.logging import log_level
    >>> with log_level("DEBUG", "hclasso.spg.solver"):
    ...     pass  # solve_column(...) now reports its stopping reason
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

PACKAGE = "hclasso"

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_DEBUG_FORMAT = "[%(levelname)s] %(threadName)s %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _format_for(level: int) -> str:
    return _DEBUG_FORMAT if level <= logging.DEBUG else _DEFAULT_FORMAT


def _attach_handler(logger: logging.Logger, level: int, fmt: str, stream: object) -> None:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def _package_loggers(prefix: str) -> List[logging.Logger]:
    return [
        logger
        for name, logger in _loggers.items()
        if name == prefix or name.startswith(prefix + ".")
    ]


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the cached package logger for ``name``.

    Names outside the package (anything not starting with ``hclasso``) are
    prefixed with ``hclasso.``; ``None`` gives the package logger itself.
    """
    if name is None:
        name = PACKAGE
    if name != PACKAGE and not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"

    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        _attach_handler(logger, _DEFAULT_LEVEL, _DEFAULT_FORMAT, sys.stderr)
        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every package logger and of loggers created later.

    Args:
        level: A ``logging`` level or its name, e.g. ``"DEBUG"``.
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Replace the handlers of every package logger.

    Args:
        level: Logging level (default: WARNING).
        format_string: Record format. Defaults to ``[LEVEL] name: message``,
            with the worker thread name added at DEBUG level.
        stream: Output stream (default: ``sys.stderr``).
    """
    global _DEFAULT_LEVEL
    level = _coerce_level(level)
    fmt = format_string or _format_for(level)
    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        _attach_handler(logger, level, fmt, sys.stderr if stream is None else stream)
    _DEFAULT_LEVEL = level


@contextmanager
def log_level(level: int | str, prefix: str = PACKAGE) -> Iterator[List[logging.Logger]]:
    """Temporarily set the level of the package loggers under ``prefix``.

    ``prefix`` selects a namespace, e.g. ``"hclasso.spg"`` covers the solver,
    step-length and dispatcher loggers. Previous levels are restored on exit,
    so a single batch can be traced without touching global configuration.

    Yields:
        The loggers whose level was changed.
    """
    level = _coerce_level(level)
    prefix = get_logger(prefix).name
    affected = _package_loggers(prefix)
    saved = [(obj, obj.level) for logger in affected for obj in (logger, *logger.handlers)]
    for obj, _ in saved:
        obj.setLevel(level)
    try:
        yield affected
    finally:
        for obj, previous in saved:
            obj.setLevel(previous)


__all__ = ["get_logger", "set_log_level", "configure_logging", "log_level"]
