"""
KJV OSIS Importer - Verse Store Package
"""
from store.verse_store import JsonVerseStore, PROGRESS_INTERVAL

__all__ = ["JsonVerseStore", "PROGRESS_INTERVAL"]
