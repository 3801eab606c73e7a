"""
KJV OSIS Importer - Missing Strong's Report

Analysis of words that carry no Strong's number after conversion.

Words without codes fall into three groups:
- translator insertions (<transChange>, italics in print)
- tail text between elements
- tagged words whose lemma yielded nothing

A tagged word whose lemma holds a Strong's reference the extractor did not
accept (e.g. a one or two digit number) is counted as an extraction gap.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Tuple

from data.schemas import ParseResult, Verse, Word, WordOrigin
from osis.punctuation import strip_trailing_punctuation

# Any Strong's reference in a lemma, regardless of digit count
LEMMA_REFERENCE_RE = re.compile(r"strong:[HG]?\d{1,5}", re.IGNORECASE)

MAX_SAMPLES = 3
DEFAULT_LIMIT = 100


@dataclass
class ReportTotals:
    words: int = 0
    missing: int = 0
    translator_insertions: int = 0
    tail_text: int = 0
    tagged_missing: int = 0
    extraction_gaps: int = 0

    def share(self, count: int) -> float:
        """Percentage of all words."""
        return count / self.words * 100 if self.words else 0.0


@dataclass
class WordGroup:
    """Occurrences of one normalized word that lack Strong's codes."""
    word: str
    count: int = 0
    translator_insertions: int = 0
    tail_text: int = 0
    tagged: int = 0
    extraction_gaps: int = 0
    samples: List[str] = field(default_factory=list)


@dataclass
class StrongsReport:
    totals: ReportTotals
    groups: List[WordGroup]


def normalize_word(text: str) -> str:
    return strip_trailing_punctuation(text.lower())


def word_reference(verse: Verse, word: Word) -> str:
    """Colophon words are referenced as "Book.colophon"."""
    if word.is_colophon:
        return f"{verse.book}.colophon"
    return verse.verse_id


def has_lemma_reference(word: Word) -> bool:
    return bool(word.lemma and LEMMA_REFERENCE_RE.search(word.lemma))


def _iter_words(result: ParseResult) -> Iterator[Tuple[Verse, Word]]:
    for verse in result.verses:
        for word in verse.words:
            yield verse, word


def build_report(result: ParseResult) -> StrongsReport:
    totals = ReportTotals()
    groups: Dict[str, WordGroup] = {}

    for verse, word in _iter_words(result):
        totals.words += 1
        if word.strongs:
            continue

        totals.missing += 1
        gap = word.origin == WordOrigin.WORD_TAG and has_lemma_reference(word)
        if word.origin == WordOrigin.TRANSLATOR_INSERTION:
            totals.translator_insertions += 1
        elif word.origin == WordOrigin.TAIL_TEXT:
            totals.tail_text += 1
        else:
            totals.tagged_missing += 1
        if gap:
            totals.extraction_gaps += 1

        key = normalize_word(word.text)
        if not key:
            continue
        group = groups.get(key)
        if group is None:
            group = groups[key] = WordGroup(word=key)

        group.count += 1
        if word.origin == WordOrigin.TRANSLATOR_INSERTION:
            group.translator_insertions += 1
        elif word.origin == WordOrigin.TAIL_TEXT:
            group.tail_text += 1
        else:
            group.tagged += 1
        if gap:
            group.extraction_gaps += 1
        if len(group.samples) < MAX_SAMPLES:
            group.samples.append(f"{word_reference(verse, word)}[{word.position}]")

    ordered = sorted(groups.values(), key=lambda g: (-g.count, g.word))
    return StrongsReport(totals=totals, groups=ordered)


def render_markdown(report: StrongsReport, limit: int = DEFAULT_LIMIT) -> str:
    totals = report.totals
    lines = [
        "# Strong's Numbers Analysis Report",
        "",
        "## Summary",
        "",
        "| Metric | Count | Percentage |",
        "|--------|-------|------------|",
        f"| Total words | {totals.words:,} | 100% |",
    ]
    for label, count in (
        ("Missing Strong's", totals.missing),
        ("Translator insertions", totals.translator_insertions),
        ("Tail text", totals.tail_text),
        ("Tagged words without codes", totals.tagged_missing),
        ("Extraction gaps", totals.extraction_gaps),
    ):
        lines.append(f"| {label} | {count:,} | {totals.share(count):.2f}% |")

    lines += [
        "",
        "## Words Missing Strong's Numbers",
        "",
        "| Word | Total | Insertions | Tail text | Tagged | Gaps | Sample references |",
        "|------|-------|------------|-----------|--------|------|-------------------|",
    ]
    for group in report.groups[:limit]:
        samples = ", ".join(group.samples) or "-"
        lines.append(
            f"| {group.word} | {group.count} | {group.translator_insertions} | {group.tail_text} "
            f"| {group.tagged} | {group.extraction_gaps} | {samples} |"
        )

    remaining = len(report.groups) - limit
    if remaining > 0:
        lines += ["", f"... and {remaining} more unique words"]

    return "\n".join(lines) + "\n"
