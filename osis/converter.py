"""
KJV OSIS Importer - Conversion Entry Point

One pass over an OSIS document: stream tag events through the segmentation
machine, attach colophons, and return the ParseResult. Nothing is persisted
here; a failed pass raises before any record reaches a store.
"""
import os
import time
from typing import Optional

from opentelemetry import trace

from data.schemas import DiagnosticKind, ParseResult
from observability.logging import ImportLogger, LogContext
from osis.reader import DEFAULT_CHUNK_SIZE, Source, iter_events
from osis.references import HEBREW_DEFAULT, ReferencePolicy
from osis.segmentation import SegmentationMachine

tracer = trace.get_tracer(__name__)


def describe_source(source: Source) -> str:
    if isinstance(source, os.PathLike):
        return os.fspath(source)
    if isinstance(source, (str, bytes)):
        return f"<inline {len(source)} chars>"
    return getattr(source, "name", "<stream>")


def convert(
    source: Source,
    policy: Optional[ReferencePolicy] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ParseResult:
    """
    Convert an OSIS document into verse records.

    Args:
        source: XML text, a path (os.PathLike) or a binary stream
        policy: labelling of unprefixed Strong's numbers (Hebrew by default)
        chunk_size: parser feed size

    Raises:
        KjvParseError: malformed XML or verse markup
    """
    policy = policy or HEBREW_DEFAULT
    description = describe_source(source)
    import_logger = ImportLogger()

    with tracer.start_as_current_span("osis.convert") as span, LogContext(source=description):
        span.set_attribute("osis.source", description)
        span.set_attribute("osis.default_strongs_prefix", policy.default_prefix)
        import_logger.parse_started(description)
        started = time.perf_counter()

        machine = SegmentationMachine(policy)
        for event in iter_events(source, chunk_size=chunk_size):
            machine.feed(event)
        result = machine.finish()

        for verse in result.verses:
            if verse.has_colophon:
                import_logger.colophon_attached(verse.book, verse.verse_id, verse.colophon_range)
        for diagnostic in result.diagnostics_of(DiagnosticKind.UNATTACHED_COLOPHON):
            import_logger.colophon_dropped(diagnostic.book)

        span.set_attribute("osis.verses", len(result.verses))
        span.set_attribute("osis.words", result.word_count)
        span.set_attribute("osis.diagnostics", len(result.diagnostics))
        import_logger.parse_completed(
            verse_count=len(result.verses),
            colophon_count=result.attached_colophon_count,
            diagnostic_count=len(result.diagnostics),
            duration=time.perf_counter() - started,
        )

    return result
