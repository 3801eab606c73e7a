"""
KJV OSIS Importer - Data Module

Record types shared by the converter, the verse store and reporting.
"""
from data.schemas import (
    COLOPHON_TYPE,
    Colophon,
    Diagnostic,
    DiagnosticKind,
    Gematria,
    ParseResult,
    Verse,
    Word,
    WordFlag,
    WordOrigin,
)

__all__ = [
    "COLOPHON_TYPE",
    "Colophon",
    "Diagnostic",
    "DiagnosticKind",
    "Gematria",
    "ParseResult",
    "Verse",
    "Word",
    "WordFlag",
    "WordOrigin",
]
