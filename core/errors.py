"""
KJV OSIS Importer - Error Hierarchy

Every failure the importer raises derives from KjvError, which carries:
- a severity (FATAL aborts the whole conversion pass)
- an optional ErrorContext locating the failure in the source document
- the underlying cause and operator-facing suggestions

Errors are recorded on the active OpenTelemetry span when one is recording.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode


class ErrorSeverity(Enum):
    """How far a failure reaches."""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    FATAL = "fatal"      # Aborts the whole import pass


@dataclass
class ErrorContext:
    """Where in the pipeline, and where in the document, an error happened."""

    operation: str
    component: str
    source: Optional[str] = None
    verse_id: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    trace_id: Optional[str] = None
    span_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def location(self) -> Optional[str]:
        """"source:line:column" when a document position is known."""
        if self.line is None:
            return None
        position = f"{self.line}:{self.column}" if self.column is not None else str(self.line)
        return f"{self.source}:{position}" if self.source else position

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form; unset fields are left out."""
        data: Dict[str, Any] = {
            "operation": self.operation,
            "component": self.component,
            "occurred_at": self.occurred_at.isoformat(),
        }
        for key in ("source", "verse_id", "line", "column", "trace_id", "span_id", "stack_trace"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_current_span(cls, operation: str, component: str, **kwargs: Any) -> "ErrorContext":
        """Build a context stamped with the active trace and the exception being handled."""
        trace_id = span_id = None
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            trace_id = format(span_context.trace_id, "032x")
            span_id = format(span_context.span_id, "016x")

        return cls(
            operation=operation,
            component=component,
            trace_id=trace_id,
            span_id=span_id,
            stack_trace=traceback.format_exc(),
            **kwargs,
        )


class KjvError(Exception):
    """Base exception for all importer errors."""

    default_severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: str = "KJV_ERROR"

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        severity: Optional[ErrorSeverity] = None,
        cause: Optional[Exception] = None,
        recoverable: bool = False,
        suggestions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context
        self.severity = severity or self.default_severity
        self.cause = cause
        self.recoverable = recoverable
        self.suggestions = list(suggestions or [])
        self.raised_at = datetime.now(timezone.utc)

        self._record_on_span()

    def _record_on_span(self) -> None:
        span = trace.get_current_span()
        if not span.is_recording():
            return
        span.record_exception(self)
        span.set_status(Status(StatusCode.ERROR, self.message))
        span.set_attributes({
            "kjv.error.code": self.error_code,
            "kjv.error.severity": self.severity.value,
            "kjv.error.recoverable": self.recoverable,
        })
        if self.context:
            span.set_attribute("kjv.error.component", self.context.component)
            if self.context.verse_id:
                span.set_attribute("kjv.verse_id", self.context.verse_id)

    @property
    def is_fatal(self) -> bool:
        return self.severity == ErrorSeverity.FATAL

    def to_dict(self) -> Dict[str, Any]:
        """Structured form for logs and CLI output."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "raised_at": self.raised_at.isoformat(),
            "context": self.context.to_dict() if self.context else None,
            "cause": str(self.cause) if self.cause else None,
        }

    def __str__(self) -> str:
        text = f"[{self.error_code}] {self.message}"
        if self.context:
            where = self.context.location or self.context.verse_id
            text += f" ({self.context.component}" + (f" at {where})" if where else ")")
        if self.cause:
            text += f" [caused by: {self.cause}]"
        return text

    def with_context(self, **metadata: Any) -> "KjvError":
        """Attach extra key/values, creating a context when there is none."""
        if self.context is None:
            self.context = ErrorContext(operation="unknown", component="unknown")
        self.context.metadata.update(metadata)
        return self


class KjvConfigError(KjvError):
    """Invalid or missing configuration."""

    error_code = "CONFIG_ERROR"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[Type] = None,
        actual_value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.config_key = config_key
        self.expected_type = expected_type
        self.actual_value = actual_value


class KjvParseError(KjvError):
    """Malformed OSIS input. Fatal to the whole pass."""

    error_code = "PARSE_ERROR"
    default_severity = ErrorSeverity.FATAL

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        verse_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.line = line
        self.column = column
        self.verse_id = verse_id


class KjvMilestoneError(KjvParseError):
    """Verse start/end markers that do not pair up."""

    error_code = "MILESTONE_ERROR"

    def __init__(
        self,
        message: str,
        start_id: Optional[str] = None,
        end_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.start_id = start_id
        self.end_id = end_id


class KjvFetchError(KjvError):
    """The source document could not be downloaded."""

    error_code = "FETCH_ERROR"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, recoverable=True, **kwargs)
        self.url = url
        self.status_code = status_code


class KjvStoreError(KjvError):
    """A verse record or the edition metadata could not be written."""

    error_code = "STORE_ERROR"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        verse_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.path = path
        self.verse_id = verse_id


class KjvEmptyImportError(KjvError):
    """The source parsed cleanly but produced no verses."""

    error_code = "EMPTY_IMPORT"
    default_severity = ErrorSeverity.CRITICAL
