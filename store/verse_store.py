"""
KJV OSIS Importer - Verse Store

Minimal key-value file store: one JSON document per verse at
<data_dir>/<edition>/<Book>/<chapter>/<verse>.json plus an edition
metadata.json. Writes are sequential and overwrite existing files.
"""
import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

from core.errors import ErrorContext, KjvStoreError
from data.schemas import Verse
from observability.logging import get_logger

logger = get_logger(__name__)

PROGRESS_INTERVAL = 1000

ProgressCallback = Callable[[int, int], None]


class JsonVerseStore:
    """Writes verse records as pretty-printed UTF-8 JSON."""

    def __init__(self, data_dir: Path, edition: str):
        self.data_dir = Path(data_dir)
        self.edition = edition

    @property
    def root(self) -> Path:
        return self.data_dir / self.edition

    def verse_path(self, book: str, chapter: int, number: int) -> Path:
        return self.root / book / str(chapter) / f"{number}.json"

    def _write_json(self, path: Path, payload: Dict[str, Any], verse_id: Optional[str] = None) -> Path:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise KjvStoreError(
                f"Failed to write {path}: {e}",
                path=str(path),
                verse_id=verse_id,
                context=ErrorContext(operation="write", component="verse_store", verse_id=verse_id),
                cause=e,
            ) from e
        return path

    def save_verse(self, verse: Verse) -> Path:
        path = self.verse_path(verse.book, verse.chapter, verse.number)
        return self._write_json(path, verse.to_dict(), verse_id=verse.verse_id)

    def save_all(
        self,
        verses: Iterable[Verse],
        total: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Save verses in order.

        `on_progress(saved, total)` is called every PROGRESS_INTERVAL verses
        and once at the end.
        """
        saved = 0
        for verse in verses:
            self.save_verse(verse)
            saved += 1
            if on_progress and saved % PROGRESS_INTERVAL == 0:
                on_progress(saved, total if total is not None else saved)

        if on_progress and saved % PROGRESS_INTERVAL != 0:
            on_progress(saved, total if total is not None else saved)
        logger.debug("Store pass finished", saved=saved, root=str(self.root))
        return saved

    def save_metadata(self, metadata: Dict[str, Any]) -> Path:
        return self._write_json(self.root / "metadata.json", metadata)

