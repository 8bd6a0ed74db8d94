"""Progress entry and chart endpoints.

Entries live under /api/students/{student}/entries/{category}. The
category path segment accepts BTM, CTM or English (any case).
"""

import structlog
from fastapi import APIRouter, status

from eyelevel.core.chart import build_dashboard
from eyelevel.core.records import Category, ProgressEntry
from eyelevel.web.schemas import (
    DashboardResponse,
    EntryCreate,
    EntryListResponse,
    EntryResponse,
)
from eyelevel.web.services import get_record_store

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/students/{student}", tags=["entries"])


def _entry_response(entry: ProgressEntry) -> EntryResponse:
    return EntryResponse(**entry.to_dict())


@router.get("/entries/{category}", response_model=EntryListResponse)
def list_entries(student: str, category: str) -> EntryListResponse:
    """List a partition in insertion order."""
    resolved = Category.parse(category)
    entries = get_record_store().list(student, resolved)
    return EntryListResponse(
        student=student,
        category=resolved.value,
        entries=[_entry_response(e) for e in entries],
        count=len(entries),
    )


@router.post(
    "/entries/{category}",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_entry(student: str, category: str, entry_data: EntryCreate) -> EntryResponse:
    """Record a confirmed entry at the end of the partition."""
    resolved = Category.parse(category)
    entry = get_record_store().record(
        student,
        resolved,
        level=entry_data.level,
        book=entry_data.book,
        errors=entry_data.errors,
        date=entry_data.date,
    )
    return _entry_response(entry)


@router.delete("/entries/{category}/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(student: str, category: str, entry_id: str) -> None:
    """Delete an entry. Unknown ids are ignored."""
    resolved = Category.parse(category)
    removed = get_record_store().delete(student, resolved, entry_id)
    logger.info("entry_delete_requested", student=student, entry_id=entry_id, removed=removed)


@router.get("/chart", response_model=DashboardResponse)
def get_dashboard(student: str) -> DashboardResponse:
    """Chart series and history for every subject of a student."""
    sections = build_dashboard(get_record_store(), student)
    return DashboardResponse.from_sections(student, sections)
