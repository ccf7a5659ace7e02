"""Logging setup for smo_reporting.

structlog sits on top of the standard ``logging`` module. Console output is
the default; JSON lines are used when ``SMO_JSON_LOGS`` is set. Records are
also written to a rotating file (``SMO_LOG_FILE``) outside of pytest runs.

Service code binds the operation being worked on with
:func:`operation_context` so every event of a detail load carries the
project and simulation codes.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

_configured: bool = False

_MAX_LOG_BYTES = 5 * 1024 * 1024
_LOG_BACKUPS = 3


def _build_handlers(log_file: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if not log_file or os.environ.get("PYTEST_CURRENT_TEST"):
        return handlers

    path = Path(log_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                path, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
            )
        )
    except OSError as e:
        # Read-only checkout: console only
        sys.stderr.write(f"log file disabled ({path}): {e}\n")
    return handlers


def _renderer(json_output: bool) -> Any:
    if json_output:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | None = None,
) -> structlog.BoundLogger:
    """Configure structured logging once per process.

    Arguments left to None are read from the application settings.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Render JSON lines instead of console text
        log_file: Rotating log file path; empty string disables it

    Returns:
        Root structlog logger
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    from src.core.settings import get_settings

    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.json_logs
    if log_file is None:
        log_file = settings.log_file

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level_name, logging.INFO),
        handlers=_build_handlers(log_file),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(json_output),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a logger bound to ``name``, configuring logging on first use."""
    if not _configured:
        configure_logging()

    logger = structlog.get_logger()
    return logger.bind(logger_name=name) if name else logger


@contextmanager
def operation_context(project: str, simulation: str | None = None) -> Iterator[None]:
    """Bind the operation and simulation codes to every event logged inside the block.

    Only the calling thread sees the binding; worker threads log without it.
    """
    with structlog.contextvars.bound_contextvars(project=project, simulation=simulation):
        yield
