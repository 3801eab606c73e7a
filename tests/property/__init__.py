"""
KJV OSIS Importer - Property-Based Testing Suite

Property-based testing using Hypothesis to discover edge cases and invariants
in gematria, reference extraction and verse segmentation.
"""
