"""Structured logging configuration for the convrbm library.

Logging goes through structlog. Models and trainers get a bound logger via
:class:`LoggerMixin`; timing and epoch context are attached with
:func:`log_duration` and :func:`log_context`.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger


def add_timestamp(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


class MetricProcessor:
    """Processor that groups metric-like fields of an event under ``metrics``."""

    suffixes = ("_error", "_energy", "_gap", "_norm")
    counters = frozenset({"epoch", "step", "batch"})

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        """Extract metrics from event dict."""
        metrics = {}

        for key, value in list(event_dict.items()):
            if key.endswith(self.suffixes) and isinstance(value, int | float):
                metrics[key] = event_dict.pop(key)
            elif key in self.counters:
                metrics[key] = value

        if metrics:
            event_dict["metrics"] = metrics

        return event_dict


class LogConfig:
    """Configuration for logging system."""

    def __init__(
        self,
        level: str | int = "INFO",
        console: bool = True,
        file: str | Path | None = None,
        structured: bool = True,
        colors: bool = True,
        metrics: bool = True,
    ):
        self.level = (
            level if isinstance(level, int) else getattr(logging, level.upper())
        )
        self.console = console
        self.file = Path(file) if file else None
        self.structured = structured
        self.colors = colors
        self.metrics = metrics

    def processors(self) -> list[Any]:
        """Build the structlog processor chain."""
        processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            add_timestamp,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]

        if self.metrics:
            processors.append(MetricProcessor())

        if self.structured:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=self.colors))

        return processors

    def setup(self) -> structlog.stdlib.BoundLogger:
        """Configure and return logger instance."""
        structlog.configure(
            processors=self.processors(),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        handlers: list[logging.Handler] = []
        if self.console:
            handlers.append(logging.StreamHandler(sys.stderr))
        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=self.level,
            handlers=handlers,
            format="%(message)s",
            force=True,
        )

        return structlog.get_logger("convrbm")


class LoggerMixin:
    """Mixin class that provides logging functionality."""

    _logger: Any = None

    @property
    def logger(self) -> Any:
        """Get logger instance for this class."""
        if self._logger is None:
            self._logger = structlog.get_logger(self.__class__.__name__)
        return self._logger

    def log_debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(message, **kwargs)

    def log_info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(message, **kwargs)

    def log_warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(message, **kwargs)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind context to all logs emitted within the block.

    Example:
        with log_context(epoch=1):
            logger.info("Batch done", batch=0)
            # Logs: {"event": "Batch done", "epoch": 1, "batch": 0}
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


@contextmanager
def log_duration(logger: Any, message: str, **kwargs: Any) -> Iterator[None]:
    """Log the wall-clock duration (seconds) of a block.

    The event is only emitted if the block completes.

    Example:
        with log_duration(logger, "Reconstruction completed"):
            model.reconstruct(sample)
            # Logs: {"event": "Reconstruction completed", "duration": 0.0012}
    """
    start_time = time.perf_counter()
    yield
    logger.info(message, duration=time.perf_counter() - start_time, **kwargs)


def setup_logging(
    level: str | int = "INFO",
    console: bool = True,
    file: str | Path | None = None,
    structured: bool = False,
    colors: bool = True,
    metrics: bool = True,
) -> structlog.stdlib.BoundLogger:
    """Configure logging for the application.

    Args:
        level: Logging level
        console: Whether to log to stderr
        file: File path for logging (if any)
        structured: Whether to use structured (JSON) logging
        colors: Whether to use colored console output
        metrics: Whether to group metric fields

    Returns
    -------
        Configured logger instance
    """
    return LogConfig(
        level=level,
        console=console,
        file=file,
        structured=structured,
        colors=colors,
        metrics=metrics,
    ).setup()


# Create default logger
logger = structlog.get_logger("convrbm")
