"""
KJV OSIS Importer - Reports
"""
from reports.strongs import StrongsReport, WordGroup, build_report, render_markdown

__all__ = ["StrongsReport", "WordGroup", "build_report", "render_markdown"]
