"""
KJV OSIS Importer - Verse Assembler

Builds finalized Verse records from word sequences and attaches book-closing
colophons to the last parsed verse of their book.
"""
from dataclasses import replace
from typing import Iterable, List, Sequence, Tuple

from data.schemas import Colophon, Diagnostic, DiagnosticKind, Gematria, Verse, Word, WordFlag
from osis.punctuation import attach_punctuation


def join_words(words: Iterable[Word]) -> str:
    """Display text: words joined by single spaces, punctuation re-attached."""
    return attach_punctuation(" ".join(w.text for w in words))


def sum_gematria(words: Iterable[Word]) -> Gematria:
    """Element-wise total over words not flagged as colophon."""
    total = Gematria()
    for word in words:
        if not word.is_colophon:
            total = total + word.gematria
    return total


def assemble_verse(book: str, chapter: int, number: int, words: Sequence[Word]) -> Verse:
    return Verse(
        book=book,
        chapter=chapter,
        number=number,
        text=join_words(words),
        words=tuple(words),
        gematria=sum_gematria(words),
    )


def attach_colophon(verse: Verse, colophon: Colophon) -> Verse:
    """
    Append colophon words to a verse.

    Positions continue after the verse's last word. The display text and the
    gematria total stay those of the body.
    """
    start = verse.words[-1].position + 1 if verse.words else 1
    renumbered = tuple(
        replace(word, position=start + offset, flags=word.flags | {WordFlag.COLOPHON})
        for offset, word in enumerate(colophon.words)
    )
    if not renumbered:
        return verse

    first = verse.colophon_range[0] if verse.colophon_range else renumbered[0].position
    words = verse.words + renumbered
    return replace(
        verse,
        words=words,
        gematria=sum_gematria(words),
        colophon_range=(first, renumbered[-1].position),
    )


def attach_colophons(
    verses: List[Verse],
    colophons: Iterable[Colophon],
) -> Tuple[List[Verse], List[Diagnostic]]:
    """
    Attach each colophon to the chronologically last verse of its book.

    Requires the whole document to have been parsed. Colophons whose book has
    no verse are dropped and reported.
    """
    attached = list(verses)
    diagnostics: List[Diagnostic] = []

    last_index = {}
    for index, verse in enumerate(attached):
        last_index[verse.book] = index

    for colophon in colophons:
        index = last_index.get(colophon.book)
        if index is None:
            diagnostics.append(Diagnostic(
                kind=DiagnosticKind.UNATTACHED_COLOPHON,
                message=f"Colophon {colophon.osis_id} dropped: no verse parsed for {colophon.book}",
                book=colophon.book,
                reference=colophon.osis_id,
            ))
            continue
        attached[index] = attach_colophon(attached[index], colophon)

    return attached, diagnostics
