"""
KJV OSIS Importer - OSIS Conversion Package

Streaming conversion of an OSIS XML document into per-verse records.

Usage:
    from osis import convert

    result = convert(Path("kjvfull.xml"))
    for verse in result.verses:
        print(verse.verse_id, verse.text)
"""
from osis.assembler import assemble_verse, attach_colophon, attach_colophons, join_words, sum_gematria
from osis.converter import convert
from osis.gematria import compute_gematria, letter_value
from osis.punctuation import attach_punctuation, is_punctuation_only, strip_trailing_punctuation, tokenize
from osis.reader import CloseTag, OpenTag, TagEvent, Text, iter_events
from osis.references import GREEK_DEFAULT, HEBREW_DEFAULT, ReferencePolicy, extract_strongs
from osis.segmentation import ParseMode, SegmentationMachine, SegmentationState

__all__ = [
    "CloseTag",
    "GREEK_DEFAULT",
    "HEBREW_DEFAULT",
    "OpenTag",
    "ParseMode",
    "ReferencePolicy",
    "SegmentationMachine",
    "SegmentationState",
    "TagEvent",
    "Text",
    "assemble_verse",
    "attach_colophon",
    "attach_colophons",
    "attach_punctuation",
    "compute_gematria",
    "convert",
    "extract_strongs",
    "is_punctuation_only",
    "iter_events",
    "join_words",
    "letter_value",
    "strip_trailing_punctuation",
    "sum_gematria",
    "tokenize",
]
