"""Core business logic.

Modules:
- extraction: level/book candidates from OCR text
- records: partitioned progress store and student registry
- chart: plot-ready series and dashboard sections
"""

__all__ = [
    "extraction",
    "records",
    "chart",
]
