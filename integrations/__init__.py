"""
KJV OSIS Importer - External Integrations

CrossWire KJV source fetch and import orchestration.
"""
from integrations.crosswire import CrosswireImporter, ImportSummary, fetch_source

__all__ = ["CrosswireImporter", "ImportSummary", "fetch_source"]
