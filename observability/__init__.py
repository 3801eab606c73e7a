"""
KJV OSIS Importer - Observability Package

Structlog logging with OpenTelemetry trace context.

Usage:
    from observability import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
"""
from observability.logging import (
    ImportLogger,
    LogContext,
    LoggingConfig,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "ImportLogger",
    "LogContext",
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "shutdown_logging",
]
