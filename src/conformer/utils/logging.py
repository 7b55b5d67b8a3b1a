"""Structured logging configuration using structlog."""

import atexit
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog


class _RunLog:
    """
    Stable file target for run logs.

    Loggers cached on first use keep the file object they were created
    with, so they all write here and the underlying file is swapped or
    closed on reconfiguration. With no file open, output goes to stdout.
    """

    def __init__(self) -> None:
        self.path: Path | None = None
        self._stream: TextIO | None = None

    def open(self, path: Path) -> None:
        if self._stream is not None and self.path == path:
            return
        self.close()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._stream = path.open("a", encoding="utf-8")
        self.path = path

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
        self._stream = None
        self.path = None

    def write(self, message: str) -> int:
        return (self._stream or sys.stdout).write(message)

    def flush(self) -> None:
        (self._stream or sys.stdout).flush()


_run_log = _RunLog()
atexit.register(_run_log.close)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
) -> None:
    """
    Configure structured logging for a pipeline run.

    Console output is human readable unless ``json_output`` is set. When a
    ``log_file`` is given, every event is appended to it as a JSON line
    instead of being printed, so a run leaves an auditable trail of every
    record outcome. A previously opened run log is closed.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render console events as JSON.
        log_file: Optional path receiving JSON lines.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    logger_factory: Any
    if log_file is not None:
        _run_log.open(log_file)
        run_log: Any = _run_log
        logger_factory = structlog.WriteLoggerFactory(file=run_log)
        json_output = True
    else:
        _run_log.close()
        logger_factory = structlog.PrintLoggerFactory()

    if json_output:
        processors: list[structlog.types.Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False, default=str),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )


def close_run_log() -> None:
    """Close the run log file, if one is open."""
    _run_log.close()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, typically for ``__name__``."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key-value context to every log event inside the block.

    Example:
        with log_context(entity_type="customer"):
            log.info("Validating batch")  # carries entity_type
    """
    return structlog.contextvars.bound_contextvars(**kwargs)
