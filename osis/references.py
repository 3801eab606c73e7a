"""
KJV OSIS Importer - Strong's Reference Extraction

Pulls Strong's numbers out of a <w lemma="..."> attribute value.

    >>> extract_strongs("strong:H0430 strong:H0853")
    ['H430', 'H853']
"""
import re
from dataclasses import dataclass
from typing import List, Optional

STRONGS_RE = re.compile(r"(?:strongs?:)?([HG]?)(\d{3,5})", re.IGNORECASE)

VALID_PREFIXES = ("H", "G")


@dataclass(frozen=True)
class ReferencePolicy:
    """
    How to label a Strong's number that carries no H/G letter.

    The KJV module is English text with mixed Hebrew and Greek references;
    unprefixed numbers are labelled Hebrew unless told otherwise.
    """
    default_prefix: str = "H"

    def __post_init__(self):
        if self.default_prefix not in VALID_PREFIXES:
            raise ValueError(f"default_prefix must be one of {VALID_PREFIXES}, got {self.default_prefix!r}")


HEBREW_DEFAULT = ReferencePolicy("H")
GREEK_DEFAULT = ReferencePolicy("G")


def extract_strongs(value: Optional[str], policy: ReferencePolicy = HEBREW_DEFAULT) -> List[str]:
    """
    Extract normalized Strong's numbers in source order.

    Duplicates are kept. Leading zeros are dropped ("H0091" -> "H91").
    """
    if not value:
        return []

    results = []
    for match in STRONGS_RE.finditer(value):
        prefix = match.group(1).upper() or policy.default_prefix
        results.append(f"{prefix}{int(match.group(2))}")
    return results
