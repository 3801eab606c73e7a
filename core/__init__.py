"""
KJV OSIS Importer - Core Module

Foundational components shared by the whole importer:
- Unified error handling
- Resilience patterns (retry with backoff)
"""
from core.errors import (
    ErrorContext,
    ErrorSeverity,
    KjvConfigError,
    KjvEmptyImportError,
    KjvError,
    KjvFetchError,
    KjvMilestoneError,
    KjvParseError,
    KjvStoreError,
)
from core.resilience import RetryConfig, RetryPolicy

__all__ = [
    "ErrorContext",
    "ErrorSeverity",
    "KjvConfigError",
    "KjvEmptyImportError",
    "KjvError",
    "KjvFetchError",
    "KjvMilestoneError",
    "KjvParseError",
    "KjvStoreError",
    "RetryConfig",
    "RetryPolicy",
]
