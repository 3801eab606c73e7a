"""
KJV OSIS Importer - Token and Punctuation Rules

One set of rules shared by segmentation, verse assembly and reporting.
"""
import re
from typing import List

PUNCTUATION = ".,;:!?"

PUNCTUATION_ONLY_RE = re.compile(r"^[.,;:!?]+$")
SPACE_BEFORE_PUNCTUATION_RE = re.compile(r"\s+([.,;:!?])")
TRAILING_PUNCTUATION_RE = re.compile(r"[.,;:!?]+$")

# "/" separates alternate renderings in the KJV module markup
ALTERNATE_MARKER = "/"


def is_punctuation_only(token: str) -> bool:
    """True when the token consists solely of punctuation characters."""
    return bool(PUNCTUATION_ONLY_RE.match(token))


def strip_alternate_markers(text: str) -> str:
    return text.replace(ALTERNATE_MARKER, "")


def tokenize(text: str) -> List[str]:
    """Remove alternate markers and split on whitespace."""
    return strip_alternate_markers(text).split()


def attach_punctuation(text: str) -> str:
    """Collapse whitespace immediately before punctuation."""
    return SPACE_BEFORE_PUNCTUATION_RE.sub(r"\1", text)


def strip_trailing_punctuation(token: str) -> str:
    return TRAILING_PUNCTUATION_RE.sub("", token)
