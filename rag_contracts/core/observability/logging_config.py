"""
Logging configuration — one setup call for the CLI and for synthesis scripts.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
whatever is configured here.  Graph construction logs wiring progress at
INFO, fallback resolution at INFO (bootstrap) or WARNING (masking), so
the console level decides how much of a synthesis run is visible.

Levels are resolved in precedence order:
    CLI flag  >  RAG_CONTRACTS_LOG_LEVEL env var  >  WARNING (default)

Optional file output via RAG_CONTRACTS_LOG_FILE / RAG_CONTRACTS_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "RAG_CONTRACTS_LOG_LEVEL"
ENV_LOG_FILE = "RAG_CONTRACTS_LOG_FILE"
ENV_LOG_FILE_LEVEL = "RAG_CONTRACTS_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# (format, datefmt) per console level, most detailed first
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    # DEBUG: which module and line logged, e.g. consumer registration
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    # INFO: wiring order and bootstrap fallbacks, timestamped
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)

# WARNING and above: the message alone
_FMT_MINIMAL = "%(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that get chatty below WARNING
_NOISY_LOGGERS = ("yaml", "pydantic")


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Pick the console level from CLI flags, falling back to the env var."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> int:
    """Configure Python logging for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the file handler.
            Defaults to ``level``.
        quiet_third_party: Keep third-party loggers at WARNING unless
            the console runs at DEBUG.

    Returns:
        The root logger's effective level.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)

    # Root must pass everything the most verbose handler wants
    effective_level = min(h.level for h in handlers)
    root.setLevel(effective_level)

    # ── Third-party noise control ───────────────────────────────
    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return effective_level


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _FMT_MINIMAL, None
    for threshold, tier_fmt, tier_datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            fmt, datefmt = tier_fmt, tier_datefmt
            break

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
    return handler


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING when unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
