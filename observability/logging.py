"""
KJV OSIS Importer - Structured Logging

structlog over the standard library `logging` module. Every event carries
the service name and, inside a traced import, the OpenTelemetry trace_id
and span_id of the active span.

Usage:
    from observability.logging import setup_logging, get_logger

    setup_logging(LoggingConfig(level="INFO", json_format=True))

    logger = get_logger(__name__)
    logger.info("Verse saved", verse_id="Gen.1.1")
"""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Optional, Tuple

import structlog
from opentelemetry import trace
from structlog.types import EventDict, Processor, WrappedLogger

_configured: bool = False

# Third-party loggers kept at WARNING regardless of our level
QUIET_LOGGERS = ("urllib3", "requests", "opentelemetry")


@dataclass
class LoggingConfig:
    """Logging settings, read from LOG_* environment variables."""

    service_name: str = "kjv-osis-import"
    level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )
    json_format: bool = field(
        default_factory=lambda: os.getenv("LOG_FORMAT", "json").lower() == "json"
    )
    log_to_file: bool = field(
        default_factory=lambda: os.getenv("LOG_TO_FILE", "false").lower() == "true"
    )
    log_file_path: Path = field(
        default_factory=lambda: Path(os.getenv("LOG_FILE", "./logs/kjv-import.log"))
    )
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 3
    environment: str = field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "development")
    )


def add_trace_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp the event with the ids of the active span, if any."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def add_service_context(service_name: str, environment: str) -> Processor:
    """Processor adding fixed service fields to every event."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("environment", environment)
        return event_dict

    return processor


def build_processors(config: LoggingConfig) -> List[Processor]:
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_context(config.service_name, config.environment),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_trace_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.json_format:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the root stdlib logger. Runs once; call
    shutdown_logging() first to apply a different configuration.
    """
    global _configured

    if _configured:
        return

    config = config or LoggingConfig()

    structlog.configure(
        processors=build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configure_handlers(config)

    _configured = True


def _configure_handlers(config: LoggingConfig) -> None:
    level = getattr(logging, config.level, logging.INFO)
    # structlog renders the final line, stdlib only writes it out
    formatter = logging.Formatter("%(message)s")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_to_file:
        config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            config.log_file_path,
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding="utf-8",
        ))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger, configuring defaults on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Parse started", source="kjvfull.xml")
    """
    if not _configured:
        setup_logging()

    return structlog.get_logger(name)


def shutdown_logging() -> None:
    """Flush and detach handlers so setup_logging can run again."""
    global _configured

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)

    structlog.reset_defaults()
    _configured = False


class LogContext:
    """
    Bind key/values to every event logged inside the block.

    Example:
        >>> with LogContext(source="kjvfull.xml", edition="crosswire-KJV"):
        ...     logger.info("Import started")
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)


class ImportLogger:
    """Events emitted over the course of one import run."""

    def __init__(self):
        self._logger = get_logger("kjv.import")

    def parse_started(self, source: str) -> None:
        self._logger.info("Parse started", source=source, component="parser")

    def parse_completed(
        self,
        verse_count: int,
        colophon_count: int,
        diagnostic_count: int,
        duration: float,
    ) -> None:
        self._logger.info(
            "Parse completed",
            verses=verse_count,
            colophons=colophon_count,
            diagnostics=diagnostic_count,
            duration_seconds=round(duration, 3),
            component="parser",
        )

    def colophon_attached(self, book: str, verse_id: str, word_range: Tuple[int, int]) -> None:
        self._logger.debug(
            "Colophon attached",
            book=book,
            verse_id=verse_id,
            word_range=list(word_range),
            component="assembler",
        )

    def colophon_dropped(self, book: str) -> None:
        self._logger.warning(
            "Colophon dropped, no verse parsed for its book",
            book=book,
            component="assembler",
        )

    def verses_saved(self, saved: int, total: int) -> None:
        self._logger.info("Verses saved", saved=saved, total=total, component="store")
