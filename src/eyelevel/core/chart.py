"""Chart projection for progress partitions.

Turns an ordered partition into a plot-ready series. The x axis is the
position in the partition (insertion order); entries are never re-sorted
by their date text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from eyelevel.core.records import Category, ProgressEntry, RecordStore

# A series needs at least two points to draw a line
MIN_POINTS = 2


@dataclass(frozen=True)
class ChartPoint:
    """One plotted point: x is the entry's position, y its error count."""

    x: int
    y: int
    label: str

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y, "label": self.label}


@dataclass
class CategorySection:
    """Everything the dashboard shows for one subject."""

    category: Category
    title: str
    color: str
    series: list[ChartPoint] | None
    history: list[ProgressEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "title": self.title,
            "color": self.color,
            "series": [p.to_dict() for p in self.series] if self.series is not None else None,
            "history": [e.to_dict() for e in self.history],
        }


def project(entries: Sequence[ProgressEntry]) -> list[ChartPoint] | None:
    """Project entries onto a series, or None when there are fewer than two."""
    if len(entries) < MIN_POINTS:
        return None
    return [
        ChartPoint(x=index, y=entry.value, label=entry.label)
        for index, entry in enumerate(entries)
    ]


def history(entries: Sequence[ProgressEntry]) -> list[ProgressEntry]:
    """Entries newest first, as listed under each chart."""
    return list(reversed(entries))


def build_dashboard(store: RecordStore, student: str) -> list[CategorySection]:
    """Build one section per category for a student, in fixed subject order.

    Args:
        store: Record store to read partitions from
        student: Student whose partitions are shown

    Returns:
        List of CategorySection (BTM, CTM, English)
    """
    sections: list[CategorySection] = []
    for category in Category:
        entries = store.list(student, category)
        sections.append(
            CategorySection(
                category=category,
                title=category.display_title,
                color=category.color,
                series=project(entries),
                history=history(entries),
            )
        )
    return sections
