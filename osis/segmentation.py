"""
KJV OSIS Importer - Segmentation State Machine

Walks the flat tag stream of an OSIS document and rebuilds verse and word
boundaries from overlapping markup:

- <verse> as container or as sID/eID milestones
- <w lemma="..." morph="..."> lexical words
- <transChange> translator insertions
- <note> annotations (nestable, never captured)
- <div type="colophon"> book-closing subscriptions
- untagged character data between elements ("tail text")

All state lives in a SegmentationState value owned by the machine, so the
machine can be driven with synthetic events in tests:

    machine = SegmentationMachine()
    for event in iter_events(xml):
        machine.feed(event)
    result = machine.finish()
"""
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional

from core.errors import ErrorContext, KjvMilestoneError, KjvParseError
from data.schemas import (
    Colophon,
    Diagnostic,
    DiagnosticKind,
    ParseResult,
    Verse,
    Word,
    WordFlag,
    WordOrigin,
)
from osis.assembler import assemble_verse, attach_colophons
from osis.gematria import compute_gematria
from osis.punctuation import is_punctuation_only, tokenize
from osis.reader import CloseTag, OpenTag, TagEvent, Text
from osis.references import HEBREW_DEFAULT, ReferencePolicy, extract_strongs

COLOPHON_DIV_TYPE = "colophon"
COLOPHON_BOOK_RE = re.compile(r"^(\w+)\.")

# Attributes with a dedicated Word field
LEXICAL_ATTRIBUTES = ("lemma", "morph")


class ParseMode(str, Enum):
    OUTSIDE_VERSE = "outside_verse"
    INSIDE_VERSE_BODY = "inside_verse_body"
    INSIDE_COLOPHON = "inside_colophon"


@dataclass
class VerseRef:
    book: str
    chapter: int
    number: int
    start_id: Optional[str] = None

    @property
    def verse_id(self) -> str:
        return f"{self.book}.{self.chapter}.{self.number}"


@dataclass
class UnitBuffer:
    """Words of the verse body or colophon being read, with its position counter."""
    words: List[Word] = field(default_factory=list)
    next_position: int = 1

    def take_position(self) -> int:
        position = self.next_position
        self.next_position += 1
        return position


@dataclass
class InlineBuffer:
    """Text collected inside an open <w> or <transChange>."""
    attributes: Dict[str, str]
    chunks: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.chunks)


@dataclass
class SegmentationState:
    verse: Optional[VerseRef] = None
    verse_body: UnitBuffer = field(default_factory=UnitBuffer)

    colophon_book: Optional[str] = None
    colophon_id: Optional[str] = None
    colophon_body: UnitBuffer = field(default_factory=UnitBuffer)
    # True for each open <div>, marking the one that opened the colophon
    div_stack: List[bool] = field(default_factory=list)

    word: Optional[InlineBuffer] = None
    insertion: Optional[InlineBuffer] = None
    note_depth: int = 0

    verses: List[Verse] = field(default_factory=list)
    colophons: List[Colophon] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def mode(self) -> ParseMode:
        if self.colophon_book is not None:
            return ParseMode.INSIDE_COLOPHON
        if self.verse is not None:
            return ParseMode.INSIDE_VERSE_BODY
        return ParseMode.OUTSIDE_VERSE

    @property
    def active_unit(self) -> Optional[UnitBuffer]:
        mode = self.mode
        if mode == ParseMode.INSIDE_COLOPHON:
            return self.colophon_body
        if mode == ParseMode.INSIDE_VERSE_BODY:
            return self.verse_body
        return None

    @property
    def capturing(self) -> bool:
        return self.active_unit is not None and self.note_depth == 0


class SegmentationMachine:
    """Event-driven converter from OSIS tag events to Verse records."""

    def __init__(self, policy: ReferencePolicy = HEBREW_DEFAULT):
        self.policy = policy
        self.state = SegmentationState()
        self._finished = False

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------

    def feed(self, event: TagEvent) -> None:
        if self._finished:
            raise RuntimeError("SegmentationMachine already finished")
        if isinstance(event, OpenTag):
            self._open(event)
        elif isinstance(event, Text):
            self._text(event.data)
        elif isinstance(event, CloseTag):
            self._close(event)
        else:
            raise TypeError(f"Unknown tag event: {event!r}")

    def _open(self, tag: OpenTag) -> None:
        state = self.state
        if tag.name == "div":
            self._open_div(tag.attributes)
        elif tag.name == "verse":
            self._open_verse(tag.attributes)
        elif tag.name == "w" and state.capturing:
            state.word = InlineBuffer(dict(tag.attributes))
        elif tag.name == "transChange" and state.capturing:
            state.insertion = InlineBuffer(dict(tag.attributes))
        elif tag.name == "note":
            state.note_depth += 1

    def _text(self, data: str) -> None:
        state = self.state
        if state.note_depth > 0:
            return
        if state.word is not None:
            state.word.chunks.append(data)
        elif state.insertion is not None:
            state.insertion.chunks.append(data)
        elif state.active_unit is not None:
            self._tail_text(data)

    def _close(self, tag: CloseTag) -> None:
        state = self.state
        if tag.name == "div":
            self._close_div()
        elif tag.name == "verse":
            self._close_verse(tag.attributes)
        elif tag.name == "w" and state.word is not None and state.note_depth == 0:
            buffer, state.word = state.word, None
            self._emit_word_tag(buffer)
        elif tag.name == "transChange" and state.insertion is not None and state.note_depth == 0:
            buffer, state.insertion = state.insertion, None
            self._emit_insertion(buffer)
        elif tag.name == "note":
            if state.note_depth > 0:
                state.note_depth -= 1
        elif tag.name == "seg" and state.capturing:
            self._record_segment(tag.attributes.get("type"))

    # ------------------------------------------------------------------
    # Structural transitions
    # ------------------------------------------------------------------

    def _open_div(self, attributes: Mapping[str, str]) -> None:
        state = self.state
        opens_colophon = False
        osis_id = attributes.get("osisID")
        if attributes.get("type") == COLOPHON_DIV_TYPE and osis_id:
            match = COLOPHON_BOOK_RE.match(osis_id)
            if match:
                opens_colophon = True
                state.colophon_book = match.group(1)
                state.colophon_id = osis_id
                state.colophon_body = UnitBuffer()
        state.div_stack.append(opens_colophon)

    def _close_div(self) -> None:
        state = self.state
        if not state.div_stack or not state.div_stack.pop():
            return
        words = state.colophon_body.words
        if words:
            state.colophons.append(Colophon(
                book=state.colophon_book,
                osis_id=state.colophon_id,
                words=tuple(words),
            ))
        state.colophon_book = None
        state.colophon_id = None
        state.colophon_body = UnitBuffer()

    def _open_verse(self, attributes: Mapping[str, str]) -> None:
        state = self.state
        osis_id = attributes.get("osisID")
        if not osis_id:
            return
        if state.verse is not None:
            state.diagnostics.append(Diagnostic(
                kind=DiagnosticKind.NESTED_VERSE_START,
                message=f"Verse {osis_id} starts inside open verse {state.verse.verse_id}; ignored",
                book=state.verse.book,
                reference=osis_id,
            ))
            return
        state.verse = parse_verse_ref(osis_id, attributes.get("sID"))
        state.verse_body = UnitBuffer()

    def _close_verse(self, attributes: Mapping[str, str]) -> None:
        end_id = attributes.get("eID")
        container_end = "osisID" in attributes and "sID" not in attributes
        if not end_id and not container_end:
            return

        state = self.state
        if state.verse is None:
            state.diagnostics.append(Diagnostic(
                kind=DiagnosticKind.ORPHAN_VERSE_END,
                message=f"Verse end {end_id or attributes.get('osisID')} without an open verse; ignored",
                reference=end_id or attributes.get("osisID"),
            ))
            return

        ref = state.verse
        if end_id and ref.start_id and end_id != ref.start_id:
            raise KjvMilestoneError(
                f"Verse end marker {end_id!r} does not match open verse {ref.start_id!r}",
                start_id=ref.start_id,
                end_id=end_id,
                verse_id=ref.verse_id,
                context=ErrorContext(operation="close_verse", component="segmentation", verse_id=ref.verse_id),
            )

        state.verses.append(assemble_verse(ref.book, ref.chapter, ref.number, state.verse_body.words))
        state.verse = None
        state.verse_body = UnitBuffer()

    # ------------------------------------------------------------------
    # Word emission
    # ------------------------------------------------------------------

    def _unit_flags(self) -> frozenset:
        if self.state.mode == ParseMode.INSIDE_COLOPHON:
            return frozenset({WordFlag.COLOPHON})
        return frozenset()

    def _emit_word_tag(self, buffer: InlineBuffer) -> None:
        unit = self.state.active_unit
        if unit is None:
            return
        attributes = buffer.attributes
        lemma = attributes.get("lemma") or None
        morph = attributes.get("morph") or None
        strongs = tuple(extract_strongs(lemma, self.policy))
        extra = {k: v for k, v in attributes.items() if k not in LEXICAL_ATTRIBUTES}
        flags = self._unit_flags()

        for token in tokenize(buffer.text):
            unit.words.append(Word(
                position=unit.take_position(),
                text=token,
                gematria=compute_gematria(token),
                strongs=strongs,
                lemma=lemma,
                morph=morph,
                flags=flags,
                attributes=dict(extra),
                origin=WordOrigin.WORD_TAG,
            ))

    def _emit_insertion(self, buffer: InlineBuffer) -> None:
        unit = self.state.active_unit
        if unit is None:
            return
        flags = self._unit_flags() | {WordFlag.TRANSLATOR_INSERTION}

        for token in tokenize(buffer.text):
            unit.words.append(Word(
                position=unit.take_position(),
                text=token,
                gematria=compute_gematria(token),
                flags=flags,
                attributes=dict(buffer.attributes),
                origin=WordOrigin.TRANSLATOR_INSERTION,
            ))

    def _tail_text(self, data: str) -> None:
        unit = self.state.active_unit
        flags = self._unit_flags()

        for token in tokenize(data):
            if is_punctuation_only(token) and unit.words:
                previous = unit.words[-1]
                text = previous.text + token
                unit.words[-1] = replace(previous, text=text, gematria=compute_gematria(text))
            else:
                unit.words.append(Word(
                    position=unit.take_position(),
                    text=token,
                    gematria=compute_gematria(token),
                    flags=flags,
                    origin=WordOrigin.TAIL_TEXT,
                ))

    def _record_segment(self, seg_type: Optional[str]) -> None:
        unit = self.state.active_unit
        if not seg_type or not unit.words:
            return
        previous = unit.words[-1]
        unit.words[-1] = replace(previous, segments=previous.segments + (seg_type,))

    # ------------------------------------------------------------------
    # End of document
    # ------------------------------------------------------------------

    def finish(self) -> ParseResult:
        """
        Close the pass and attach colophons.

        Raises:
            KjvMilestoneError: a verse was still open at end of document
        """
        state = self.state
        if state.verse is not None:
            raise KjvMilestoneError(
                f"Document ended inside verse {state.verse.verse_id}",
                start_id=state.verse.start_id,
                verse_id=state.verse.verse_id,
                context=ErrorContext(operation="finish", component="segmentation", verse_id=state.verse.verse_id),
            )
        self._finished = True

        verses, diagnostics = attach_colophons(state.verses, state.colophons)
        return ParseResult(
            verses=verses,
            colophons=list(state.colophons),
            diagnostics=state.diagnostics + diagnostics,
        )


def parse_verse_ref(osis_id: str, start_id: Optional[str] = None) -> VerseRef:
    """
    Parse "Book.Chapter.Verse".

    Raises:
        KjvParseError: the id does not have that shape
    """
    parts = osis_id.split(".")
    if len(parts) == 3 and parts[0] and parts[1].isdigit() and parts[2].isdigit():
        chapter, number = int(parts[1]), int(parts[2])
        if chapter > 0 and number > 0:
            return VerseRef(book=parts[0], chapter=chapter, number=number, start_id=start_id)
    raise KjvParseError(
        f"Verse osisID {osis_id!r} is not of the form Book.Chapter.Verse",
        verse_id=osis_id,
        context=ErrorContext(operation="open_verse", component="segmentation", verse_id=osis_id),
    )
