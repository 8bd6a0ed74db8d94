"""Progress record store.

Responsibilities:
- Persist progress entries partitioned by (student, category)
- Keep partitions in insertion order (chronological and chart x-axis order)
- Maintain the student registry
- Validate every persisted payload on read

Storage layout (key/value):
- "student_list"                -> JSON array of student names
- "data_{student}_{category}"   -> JSON array of entry objects

Concurrency: append/delete are read-modify-write sequences against the
key/value store. They are serialized per partition within one process.
Several processes sharing the same database file are NOT coordinated; the
deployment model is a single writer.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from datetime import date as dt_date
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from eyelevel.db.kv_store import KeyValueStore

logger = structlog.get_logger(__name__)

REGISTRY_KEY = "student_list"
DEFAULT_STUDENT = "Default"

# =============================================================================
# EXCEPTIONS
# =============================================================================


class RecordStoreError(Exception):
    """Base exception for record store errors."""

    pass


class DataCorruptionError(RecordStoreError):
    """Raised when a persisted value is not valid JSON, fails its schema
    or breaks a partition invariant (foreign category, repeated id)."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored data under '{key}' is corrupted: {reason}")


class DuplicateEntryError(RecordStoreError):
    """Raised when an entry id already exists in its partition."""

    def __init__(self, key: str, entry_id: str):
        self.key = key
        self.entry_id = entry_id
        super().__init__(f"Entry '{entry_id}' already exists in '{key}'")


class EntryValidationError(RecordStoreError):
    """Raised when user-provided entry fields are missing or invalid."""

    pass


class UnknownCategoryError(RecordStoreError):
    """Raised when a category name is not one of the known subjects."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Unknown category '{name}'. Expected one of: "
            + ", ".join(c.value for c in Category)
        )


# =============================================================================
# DATA MODEL
# =============================================================================


class Category(str, Enum):
    """Workbook subjects. Values are the persisted strings."""

    BTM = "BTM"
    CTM = "CTM"
    ENGLISH = "English"

    @property
    def display_title(self) -> str:
        return _CATEGORY_TITLES[self]

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]

    @classmethod
    def parse(cls, name: str) -> Category:
        """Resolve a member name or value, case-insensitively."""
        wanted = name.strip().lower()
        for category in cls:
            if wanted in (category.name.lower(), category.value.lower()):
                return category
        raise UnknownCategoryError(name)


_CATEGORY_TITLES = {
    Category.BTM: "Basic Thinking Math",
    Category.CTM: "Critical Thinking Math",
    Category.ENGLISH: "English",
}

_CATEGORY_COLORS = {
    Category.BTM: "#007AFF",
    Category.CTM: "#FF9500",
    Category.ENGLISH: "#4CD964",
}


@dataclass(frozen=True)
class ProgressEntry:
    """One recorded workbook result. Never mutated once created."""

    id: str
    value: int
    label: str
    date: str
    category: Category

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "value": self.value,
            "label": self.label,
            "date": self.date,
            "category": self.category.value,
        }


class _EntryRecord(BaseModel):
    """Schema of one persisted entry."""

    id: str
    value: int = Field(ge=0)
    label: str
    date: str
    category: Category

    def to_entry(self) -> ProgressEntry:
        return ProgressEntry(
            id=self.id,
            value=self.value,
            label=self.label,
            date=self.date,
            category=self.category,
        )


_PARTITION_SCHEMA = TypeAdapter(list[_EntryRecord])
_REGISTRY_SCHEMA = TypeAdapter(list[str])

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def partition_key(student: str, category: Category) -> str:
    """Storage key for a (student, category) partition."""
    return f"data_{student}_{category.value}"


def make_label(level: str, book: str) -> str:
    """Chart label for a workbook, e.g. "LB-B12"."""
    return f"L{level}-B{book}"


def today_label(today: dt_date | None = None) -> str:
    """Default entry date, formatted M/D/YYYY."""
    today = today or dt_date.today()
    return f"{today.month}/{today.day}/{today.year}"


def _new_entry_id(existing_ids: set[str]) -> str:
    """Millisecond timestamp id, bumped until unique in the partition."""
    candidate = int(time.time() * 1000)
    while str(candidate) in existing_ids:
        candidate += 1
    return str(candidate)


def _parse_errors(errors: str | int) -> int:
    text = str(errors).strip()
    try:
        value = int(text)
    except ValueError:
        raise EntryValidationError(f"Errors must be a whole number, got '{text}'") from None
    if value < 0:
        raise EntryValidationError("Errors cannot be negative")
    return value


def _decode(key: str, raw: str, schema: TypeAdapter) -> Any:
    try:
        return schema.validate_json(raw)
    except ValidationError as e:
        logger.error("record_store.corrupt_data", key=key, errors=e.error_count())
        raise DataCorruptionError(key, f"{e.error_count()} validation error(s)") from e


# =============================================================================
# RECORD STORE
# =============================================================================


class RecordStore:
    """Partitioned append/list/delete of progress entries."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.RLock:
        with self._locks_guard:
            if key not in self._locks:
                self._locks[key] = threading.RLock()
            return self._locks[key]

    def _read(self, key: str, category: Category) -> list[ProgressEntry]:
        raw = self.kv.get(key)
        if raw is None:
            return []
        entries = [record.to_entry() for record in _decode(key, raw, _PARTITION_SCHEMA)]

        # Every entry belongs to its partition's category, ids are unique within it
        seen_ids: set[str] = set()
        for entry in entries:
            if entry.category is not category:
                logger.error("record_store.foreign_entry", key=key, entry_id=entry.id)
                raise DataCorruptionError(
                    key, f"entry '{entry.id}' has category {entry.category.value}"
                )
            if entry.id in seen_ids:
                logger.error("record_store.duplicate_id", key=key, entry_id=entry.id)
                raise DataCorruptionError(key, f"duplicate entry id '{entry.id}'")
            seen_ids.add(entry.id)
        return entries

    def _write(self, key: str, entries: list[ProgressEntry]) -> None:
        self.kv.set(key, json.dumps([e.to_dict() for e in entries], ensure_ascii=False))

    def list(self, student: str, category: Category) -> list[ProgressEntry]:
        """Return the partition in insertion order (empty if never written).

        Raises:
            DataCorruptionError: If the stored partition fails validation
            StorageUnavailableError: If the store cannot be read
        """
        return self._read(partition_key(student, category), category)

    def append(self, student: str, category: Category, entry: ProgressEntry) -> None:
        """Append an entry at the end of its partition.

        Raises:
            EntryValidationError: If the student name is blank or the entry
                category does not match the partition
            DuplicateEntryError: If the entry id is already in the partition
            DataCorruptionError: If the stored partition fails validation
            StorageUnavailableError: If the store cannot be read or written
        """
        if not student.strip():
            raise EntryValidationError("Student name is required")
        if entry.category is not category:
            raise EntryValidationError(
                f"Entry category {entry.category.value} does not match {category.value}"
            )

        key = partition_key(student, category)
        with self._lock_for(key):
            entries = self._read(key, category)
            if any(e.id == entry.id for e in entries):
                raise DuplicateEntryError(key, entry.id)
            entries.append(entry)
            self._write(key, entries)

        logger.info("record_store.appended", key=key, entry_id=entry.id, size=len(entries))

    def delete(self, student: str, category: Category, entry_id: str) -> bool:
        """Remove the entry with `entry_id`; survivors keep their order.

        Returns:
            True if an entry was removed, False if the id was absent (no write)
        """
        key = partition_key(student, category)
        with self._lock_for(key):
            entries = self._read(key, category)
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                logger.debug("record_store.delete_noop", key=key, entry_id=entry_id)
                return False
            self._write(key, remaining)

        logger.info("record_store.deleted", key=key, entry_id=entry_id)
        return True

    def record(
        self,
        student: str,
        category: Category,
        level: str,
        book: str,
        errors: str | int,
        date: str | None = None,
    ) -> ProgressEntry:
        """Build an entry from confirmed form fields and append it.

        Args:
            student: Student name (partition owner)
            category: Subject
            level: Workbook level as confirmed by the tutor
            book: Workbook number as confirmed by the tutor
            errors: Error count (int or numeric text)
            date: Free-text date; defaults to today as M/D/YYYY

        Returns:
            The stored ProgressEntry

        Raises:
            EntryValidationError: If level, book or errors are missing/invalid
        """
        level = level.strip()
        book = book.strip()
        if not level or not book or str(errors).strip() == "":
            raise EntryValidationError("Please fill Level, Book, and Errors.")
        value = _parse_errors(errors)

        key = partition_key(student, category)
        with self._lock_for(key):
            existing_ids = {e.id for e in self._read(key, category)}
            entry = ProgressEntry(
                id=_new_entry_id(existing_ids),
                value=value,
                label=make_label(level, book),
                date=date.strip() if date and date.strip() else today_label(),
                category=category,
            )
            self.append(student, category, entry)

        return entry


# =============================================================================
# STUDENT REGISTRY
# =============================================================================


class StudentRegistry:
    """Ordered list of student names. Duplicates are not prevented."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        self._lock = threading.Lock()

    def list(self) -> list[str]:
        """Registered names in insertion order; ["Default"] if never written."""
        raw = self.kv.get(REGISTRY_KEY)
        if raw is None:
            return [DEFAULT_STUDENT]
        return _decode(REGISTRY_KEY, raw, _REGISTRY_SCHEMA)

    def add(self, name: str) -> list[str]:
        """Append a (trimmed) name and return the updated registry."""
        name = name.strip()
        if not name:
            raise EntryValidationError("Student name is required")

        with self._lock:
            students = self.list()
            students.append(name)
            self.kv.set(REGISTRY_KEY, json.dumps(students, ensure_ascii=False))

        logger.info("student_registry.added", name=name, count=len(students))
        return students

