"""
KJV OSIS Importer - Data Schemas

Record types produced by one conversion pass. Every type is frozen:
records are built once and replaced, never updated in place.

Serialized verse record (one JSON file per verse):
{
    "text": "In the beginning God created the heaven and the earth.",
    "words": [
        {"position": 1, "text": "In", "lemma": "strong:H07225",
         "strongs": ["H7225"], "gematria": {...}},
        ...
    ],
    "gematria": {"standard": 412, "ordinal": 412, "reduced": 173},
    "metadata": {"has_colophon": true, ...}      # only with a colophon
}
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


COLOPHON_TYPE = "subscription"


# =============================================================================
# ENUMS
# =============================================================================

class WordFlag(str, Enum):
    """Structural flags carried by a word."""
    TRANSLATOR_INSERTION = "translator_insertion"
    COLOPHON = "colophon"


class WordOrigin(str, Enum):
    """Markup a word was read from. Kept in memory only."""
    WORD_TAG = "word_tag"
    TRANSLATOR_INSERTION = "translator_insertion"
    TAIL_TEXT = "tail_text"


class DiagnosticKind(str, Enum):
    """Non-fatal outcomes worth surfacing from a pass."""
    UNATTACHED_COLOPHON = "unattached_colophon"
    ORPHAN_VERSE_END = "orphan_verse_end"
    NESTED_VERSE_START = "nested_verse_start"


# =============================================================================
# GEMATRIA
# =============================================================================

@dataclass(frozen=True)
class Gematria:
    """Three numeric encodings of a text, summed element-wise."""
    standard: int = 0
    ordinal: int = 0
    reduced: int = 0

    def __add__(self, other: "Gematria") -> "Gematria":
        if not isinstance(other, Gematria):
            return NotImplemented
        return Gematria(
            standard=self.standard + other.standard,
            ordinal=self.ordinal + other.ordinal,
            reduced=self.reduced + other.reduced,
        )

    def to_dict(self) -> Dict[str, int]:
        return {"standard": self.standard, "ordinal": self.ordinal, "reduced": self.reduced}


# =============================================================================
# WORD
# =============================================================================

@dataclass(frozen=True)
class Word:
    """
    One rendered token of a verse body or colophon.

    `attributes` holds source attributes other than lemma/morph.
    `segments` holds the types of <seg> elements closed right after it.
    """
    position: int
    text: str
    gematria: Gematria = field(default_factory=Gematria)
    strongs: Tuple[str, ...] = ()
    lemma: Optional[str] = None
    morph: Optional[str] = None
    flags: FrozenSet[WordFlag] = frozenset()
    attributes: Mapping[str, str] = field(default_factory=dict)
    segments: Tuple[str, ...] = ()
    origin: WordOrigin = WordOrigin.WORD_TAG

    @property
    def is_colophon(self) -> bool:
        return WordFlag.COLOPHON in self.flags

    @property
    def is_translator_insertion(self) -> bool:
        return WordFlag.TRANSLATOR_INSERTION in self.flags

    def to_dict(self) -> Dict[str, Any]:
        """Store record; empty optional fields are omitted."""
        record: Dict[str, Any] = {"position": self.position, "text": self.text}
        if self.lemma:
            record["lemma"] = self.lemma
        if self.morph:
            record["morph"] = self.morph
        if self.strongs:
            record["strongs"] = list(self.strongs)

        metadata: Dict[str, Any] = dict(self.attributes)
        if self.is_translator_insertion:
            metadata["translator_insertion"] = True
        if self.segments:
            metadata["segments"] = [{"type": seg_type} for seg_type in self.segments]
        if self.is_colophon:
            metadata["colophon"] = True
            metadata["colophon_type"] = COLOPHON_TYPE
        if metadata:
            record["metadata"] = metadata

        record["gematria"] = self.gematria.to_dict()
        return record


# =============================================================================
# VERSE / COLOPHON
# =============================================================================

@dataclass(frozen=True)
class Verse:
    """
    A finalized verse.

    `words` holds the body words followed by any attached colophon words.
    `gematria` is the total over body words only.
    """
    book: str
    chapter: int
    number: int
    text: str
    words: Tuple[Word, ...] = ()
    gematria: Gematria = field(default_factory=Gematria)
    colophon_range: Optional[Tuple[int, int]] = None

    @property
    def verse_id(self) -> str:
        """OSIS-style reference, e.g. "Rom.16.27"."""
        return f"{self.book}.{self.chapter}.{self.number}"

    @property
    def has_colophon(self) -> bool:
        return self.colophon_range is not None

    @property
    def body_words(self) -> Tuple[Word, ...]:
        return tuple(w for w in self.words if not w.is_colophon)

    @property
    def colophon_words(self) -> Tuple[Word, ...]:
        return tuple(w for w in self.words if w.is_colophon)

    def to_dict(self) -> Dict[str, Any]:
        """Verse store record."""
        record: Dict[str, Any] = {
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
            "gematria": self.gematria.to_dict(),
        }
        if self.colophon_range is not None:
            record["metadata"] = {
                "has_colophon": True,
                "colophon_word_range": list(self.colophon_range),
                "colophon_type": COLOPHON_TYPE,
            }
        return record


@dataclass(frozen=True)
class Colophon:
    """A book-closing subscription as parsed, positions starting at 1."""
    book: str
    osis_id: str
    words: Tuple[Word, ...]


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal outcome of a conversion pass."""
    kind: DiagnosticKind
    message: str
    book: Optional[str] = None
    reference: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "book": self.book,
            "reference": self.reference,
        }


@dataclass
class ParseResult:
    """Everything one pass over a document produced."""
    verses: List[Verse] = field(default_factory=list)
    colophons: List[Colophon] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return sum(len(v.words) for v in self.verses)

    @property
    def attached_colophon_count(self) -> int:
        return sum(1 for v in self.verses if v.has_colophon)

    def diagnostics_of(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    def books(self) -> List[str]:
        """Books in document order."""
        return _unique(v.book for v in self.verses)


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered
