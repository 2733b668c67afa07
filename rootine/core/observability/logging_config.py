"""
Logging configuration — central setup for the entry point.

Called once per process by main.py after the common flags are bound.
Every module that does ``logger = logging.getLogger(__name__)``
inherits this config. Diagnostics always go to stderr so they never
mix with command output.

Levels are resolved in precedence order:
    -d/--debug, -q/--quiet  >  ROOTINE_LOG_LEVEL  >  WARNING (default)
"""

from __future__ import annotations

import logging
import sys

import click

# ── Format strings ──────────────────────────────────────────────

# WARNING level — label and message only
_FMT_MINIMAL = "%(label)s %(message)s"

# INFO level — timestamped
_FMT_VERBOSE = "%(asctime)s %(label)s %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level — full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(label)s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output — always full detail, never colored
_FMT_FILE = "%(asctime)s %(levelname)-7s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_LABEL_WIDTH = 7

_LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "white",
    logging.INFO: "cyan",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


def centered_label(level_name: str) -> str:
    """Bracketed, centered level label (``[ ERROR ]``, ``[WARNING]``)."""
    text = level_name.upper()[:_LABEL_WIDTH]
    pad = _LABEL_WIDTH - len(text)
    left = pad // 2
    return "[" + " " * left + text + " " * (pad - left) + "]"


class LabelFormatter(logging.Formatter):
    """Formatter that exposes ``%(label)s``, colored on a terminal."""

    def __init__(self, fmt: str, datefmt: str | None = None, color: bool = False):
        super().__init__(fmt, datefmt=datefmt)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        label = centered_label(record.levelname)
        if self._color:
            color = _LEVEL_COLORS.get(record.levelno, "white")
            label = click.style(label, fg=color, bold=record.levelno >= logging.ERROR)
        record.label = label
        return super().format(record)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file (``-l/--log``).
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(LabelFormatter(fmt, datefmt=datefmt, color=_isatty(sys.stderr)))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric


def _isatty(stream) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False
