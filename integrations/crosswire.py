"""
KJV OSIS Importer - CrossWire KJV Integration

Fetch-and-cache of the CrossWire `kjvfull.xml` OSIS document and the full
import run: fetch, convert, persist.

Usage:
    importer = CrosswireImporter(get_config())
    summary = importer.run()
"""
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from opentelemetry import trace

from config import Config, EDITION_METADATA, SourceConfig, get_config
from core.errors import ErrorContext, KjvEmptyImportError, KjvFetchError
from core.resilience import RetryConfig, RetryPolicy
from data.schemas import Diagnostic, ParseResult
from observability.logging import ImportLogger, LogContext, get_logger
from osis.converter import convert
from osis.references import ReferencePolicy
from store.verse_store import JsonVerseStore

logger = get_logger(__name__)
tracer = trace.get_tracer(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024

TRANSIENT_ERRORS = {requests.ConnectionError, requests.Timeout, requests.HTTPError}


# =============================================================================
# FETCH
# =============================================================================

def _download(config: SourceConfig, destination: Path) -> None:
    partial = destination.with_name(destination.name + ".part")
    with requests.get(
        config.osis_url,
        headers={"User-Agent": config.user_agent},
        timeout=config.timeout,
        stream=True,
    ) as response:
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            if response.status_code < 500:
                raise KjvFetchError(
                    f"Source download refused: HTTP {response.status_code}",
                    url=config.osis_url,
                    status_code=response.status_code,
                    context=ErrorContext(operation="download", component="crosswire"),
                    cause=e,
                ) from e
            raise

        with open(partial, "wb") as f:
            for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                f.write(chunk)
    partial.replace(destination)


def fetch_source(config: Optional[SourceConfig] = None) -> Path:
    """
    Return the path of the cached source document, downloading it first
    when it is not cached yet.

    Raises:
        KjvFetchError: the download failed after all retry attempts
    """
    config = config or get_config().source
    destination = config.cache_path
    if destination.exists():
        logger.info("Using cached source", path=str(destination))
        return destination

    destination.parent.mkdir(parents=True, exist_ok=True)
    policy = RetryPolicy(RetryConfig(
        max_attempts=config.max_attempts,
        base_delay=config.base_delay,
        retryable_exceptions=set(TRANSIENT_ERRORS),
    ))

    logger.info("Downloading source", url=config.osis_url, path=str(destination))
    with tracer.start_as_current_span("crosswire.fetch") as span:
        span.set_attribute("fetch.url", config.osis_url)
        try:
            policy.wrap(_download)(config, destination)
        except requests.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise KjvFetchError(
                f"Source download failed after {config.max_attempts} attempts: {e}",
                url=config.osis_url,
                status_code=status_code,
                context=ErrorContext.from_current_span("fetch_source", "crosswire", source=config.osis_url),
                cause=e,
                suggestions=["Check network access", "Set KJV_OSIS_URL or pass a local --source file"],
            ) from e

    logger.info("Source downloaded", path=str(destination), bytes=destination.stat().st_size)
    return destination


# =============================================================================
# IMPORT
# =============================================================================

@dataclass
class ImportSummary:
    """Outcome of one import run."""
    source: Path
    output_dir: Path
    verses: int = 0
    words: int = 0
    colophons_attached: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)
    duration: float = 0.0

    @classmethod
    def from_result(cls, result: ParseResult, source: Path, output_dir: Path, duration: float) -> "ImportSummary":
        return cls(
            source=source,
            output_dir=output_dir,
            verses=len(result.verses),
            words=result.word_count,
            colophons_attached=result.attached_colophon_count,
            diagnostics=list(result.diagnostics),
            duration=duration,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": str(self.source),
            "output_dir": str(self.output_dir),
            "verses": self.verses,
            "words": self.words,
            "colophons_attached": self.colophons_attached,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "duration_seconds": round(self.duration, 3),
        }


class CrosswireImporter:
    """Fetches, converts and stores the CrossWire KJV."""

    def __init__(self, config: Optional[Config] = None, store: Optional[JsonVerseStore] = None):
        self.config = config or get_config()
        self.store = store or JsonVerseStore(self.config.store.data_dir, self.config.store.edition)
        self.import_logger = ImportLogger()

    def run(self, source: Optional[Path] = None) -> ImportSummary:
        """
        Run a full import.

        Args:
            source: local OSIS file; fetched (or taken from cache) when None

        Raises:
            KjvFetchError, KjvParseError, KjvEmptyImportError, KjvStoreError
        """
        self.config.ensure_valid()
        started = time.perf_counter()

        with tracer.start_as_current_span("crosswire.import") as span:
            path = Path(source) if source is not None else fetch_source(self.config.source)
            span.set_attribute("import.source", str(path))

            with LogContext(edition=self.config.store.edition):
                result = convert(
                    path,
                    policy=ReferencePolicy(self.config.parser.default_strongs_prefix),
                    chunk_size=self.config.parser.chunk_size,
                )
                if not result.verses:
                    raise KjvEmptyImportError(
                        f"No verses parsed from {path}",
                        context=ErrorContext(operation="run", component="crosswire", source=str(path)),
                        suggestions=["Check that the file is an OSIS document with <verse> markup"],
                    )

                total = len(result.verses)
                self.store.save_all(result.verses, total=total, on_progress=self.import_logger.verses_saved)
                self.store.save_metadata(EDITION_METADATA)

            summary = ImportSummary.from_result(result, path, self.store.root, time.perf_counter() - started)
            span.set_attribute("import.verses", summary.verses)
            logger.info("Import finished", **{k: v for k, v in summary.to_dict().items() if k != "diagnostics"})
            return summary
