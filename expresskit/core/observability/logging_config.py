"""
Logging configuration for the expresskit CLI.

    level = resolve_level(debug=..., verbose=..., quiet=...)
    setup_logging(level, **log_file_settings())

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  EXPRESSKIT_LOG_LEVEL  >  WARNING

A log file (EXPRESSKIT_LOG_FILE) always gets the full format. Its level
comes from EXPRESSKIT_LOG_FILE_LEVEL and defaults to the console level.
Rollback messages are emitted at WARNING/ERROR, so they reach the
terminal even without --verbose.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LEVEL_ENV = "EXPRESSKIT_LOG_LEVEL"
FILE_ENV = "EXPRESSKIT_LOG_FILE"
FILE_LEVEL_ENV = "EXPRESSKIT_LOG_FILE_LEVEL"

_DETAILED = "%(asctime)s %(levelname)-5s %(threadName)s %(name)s:%(lineno)d  %(message)s"

# level → (format, datefmt); first entry at or above the numeric level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)

# Thread-pool internals chatter at DEBUG during version lookups.
_QUIET_LOGGERS = ("concurrent.futures",)


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(LEVEL_ENV, "WARNING")


def log_file_settings(environ: Mapping[str, str] | None = None) -> dict[str, str | None]:
    env = os.environ if environ is None else environ
    return {
        "log_file": env.get(FILE_ENV) or None,
        "log_file_level": env.get(FILE_LEVEL_ENV) or None,
    }


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root handlers with a stderr handler (and optional file handler).

    Args:
        level: Console level name; unknown names fall back to WARNING.
        log_file: Optional path to append full-detail records to.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(root_level)

    if console_level > logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next((f, d) for lvl, f, d in _CONSOLE_FORMATS if level <= lvl)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DETAILED, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _parse_level(level: str | None) -> int:
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
