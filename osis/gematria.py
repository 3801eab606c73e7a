"""
KJV OSIS Importer - English Gematria

Simple English gematria: A=1 ... Z=26.

- standard: sum of alphabet positions
- ordinal: identical to standard in this scheme (alphabet position, not the
  letter's index within the word)
- reduced: each letter's digital root, accumulated, then folded to a single
  digital root for the token ("God": 7 + 6 + 4 = 17 -> 8)

Verse totals add token values element-wise, so a verse's reduced total is a
sum of token roots and is not itself folded.
"""
from data.schemas import Gematria


def letter_value(char: str) -> int:
    """Alphabet position of an uppercase A-Z letter, 0 for anything else."""
    if "A" <= char <= "Z":
        return ord(char) - ord("A") + 1
    return 0


def digital_root(value: int) -> int:
    """1-9 for positive values (9 stays 9), 0 for 0."""
    if value <= 0:
        return 0
    return (value - 1) % 9 + 1


def compute_gematria(text: str) -> Gematria:
    standard = 0
    reduced = 0
    for char in text.upper():
        value = letter_value(char)
        if value:
            standard += value
            reduced += digital_root(value)
    return Gematria(standard=standard, ordinal=standard, reduced=digital_root(reduced))
