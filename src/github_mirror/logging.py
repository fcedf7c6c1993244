"""Logging for GitHub Mirror, built on loguru.

Provides:
- ``setup_logging``: sinks for the console (and optionally a rotated file)
- ``get_logger`` / ``bind_owner`` / ``bind_repo``: loggers carrying context
- Routing of stdlib loggers (SQLAlchemy, httpx, uvicorn) into loguru

Console lines show the owner and repository a record was bound to, so the
interleaved output of a sync run can be followed per account:

    12:00:01 | INFO     | sync [1001 acme/widget] - Stage 'pulls' failed: ...
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_configured = False

# Third-party stdlib loggers: (quiet level, level when running with DEBUG)
_LIBRARY_LEVELS: dict[str, tuple[int, int]] = {
    "sqlalchemy.engine": (logging.WARNING, logging.INFO),
    "httpx": (logging.WARNING, logging.DEBUG),
    "httpcore": (logging.WARNING, logging.DEBUG),
}

# uvicorn attaches its own handlers to these
_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _context_label(record: Record) -> str:
    """``[owner repo]`` for records bound to a sync, empty otherwise."""
    extra = record["extra"]
    parts = [str(extra[key]) for key in ("owner", "repo") if key in extra]
    return f" [{' '.join(parts)}]" if parts else ""


def _console_format(record: Record) -> str:
    # Intercepted stdlib records carry no bound name; fall back to the module
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    label = _context_label(record).replace("{", "{{").replace("}", "}}")
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{source}{label}</cyan> - <level>{{message}}</level>\n{{exception}}"
    )


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure loguru sinks and stdlib interception.

    ``verbose`` (DEBUG) wins over ``quiet`` (WARNING); both override ``level``.
    The file sink, when enabled, always records DEBUG and above.
    """
    global _configured

    if verbose:
        effective_level: LogLevel = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )
    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {extra} | {message}",
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _route_stdlib_logging(debug=effective_level in ("TRACE", "DEBUG"))

    _configured = True
    return logger


def _route_stdlib_logging(*, debug: bool) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name, (quiet_level, debug_level) in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(debug_level if debug else quiet_level)

    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False


def get_logger(name: str) -> Logger:
    """Logger with ``name`` bound, for module-level use.

    Usage:
        logger = get_logger(__name__)
    """
    return logger.bind(name=name)


def bind_owner(owner_id: str) -> Logger:
    """Logger for sync work on behalf of ``owner_id``."""
    return logger.bind(name="sync", owner=owner_id)


def bind_repo(owner_id: str, full_name: str) -> Logger:
    """Logger for sync work on one repository of ``owner_id``."""
    return logger.bind(name="sync", owner=owner_id, repo=full_name)


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Remove every sink (used by tests)."""
    global _configured
    logger.remove()
    _configured = False
