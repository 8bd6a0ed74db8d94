"""Pydantic schemas for Web API.

Serialization models for analysis, students, entries and charts.
Field names of the /analyze contract (imageBase64, rawText) are kept
as the mobile client sends and reads them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# ANALYZE SCHEMAS
# =============================================================================


class AnalyzeRequest(BaseModel):
    """Request body for POST /analyze."""

    imageBase64: str | None = None


class ExtractedFields(BaseModel):
    """Level/book candidates; empty strings when not found."""

    level: str = ""
    book: str = ""


class AnalyzeResponse(BaseModel):
    """Response for POST /analyze."""

    rawText: str
    extracted: ExtractedFields


class ErrorResponse(BaseModel):
    """Short, non-technical error notice."""

    error: str


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentCreate(BaseModel):
    """Request body for adding a student."""

    name: str = Field(..., max_length=100)


class StudentListResponse(BaseModel):
    """Response for list of students."""

    students: list[str]
    count: int


# =============================================================================
# ENTRY SCHEMAS
# =============================================================================


class EntryCreate(BaseModel):
    """Request body for recording an entry (fields as typed in the form)."""

    level: str = ""
    book: str = ""
    errors: str | int = ""
    date: str | None = None


class EntryResponse(BaseModel):
    """Response for a progress entry."""

    id: str
    value: int
    label: str
    date: str
    category: str


class EntryListResponse(BaseModel):
    """Response for a (student, category) partition."""

    student: str
    category: str
    entries: list[EntryResponse]
    count: int


# =============================================================================
# CHART SCHEMAS
# =============================================================================


class ChartPointResponse(BaseModel):
    """One plotted point."""

    x: int
    y: int
    label: str


class CategorySectionResponse(BaseModel):
    """Dashboard section for one subject."""

    category: str
    title: str
    color: str
    series: list[ChartPointResponse] | None = None
    history: list[EntryResponse] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    """All subject sections for a student."""

    student: str
    sections: list[CategorySectionResponse]

    @classmethod
    def from_sections(cls, student: str, sections: list[Any]) -> DashboardResponse:
        return cls(
            student=student,
            sections=[CategorySectionResponse(**s.to_dict()) for s in sections],
        )


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
