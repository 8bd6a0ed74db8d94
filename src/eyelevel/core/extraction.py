"""Level/book extraction from OCR text.

Responsibilities:
- Turn noisy recognized text into best-effort level/book candidates
- Never fail: a non-match is an empty field, not an error

Each field is searched with an ordered list of rules. The first rule that
matches wins; later rules are not evaluated. Anchored rules ("Level B",
"Book 12") come first, unanchored fallbacks ("B", "12") last.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Literal

# =============================================================================
# CONSTANTS
# =============================================================================

LEVEL_ANCHORS = ("level", "lvl", "lv")
BOOK_ANCHORS = ("book", "bk", "no")

# Optional punctuation OCR tends to leave between an anchor and its value
_SEPARATOR = r"\s*[:.#\-]?\s*"

Outcome = Literal["complete", "partial", "none"]

# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class ExtractionResult:
    """Best-effort level/book candidates. Empty string means no match."""

    level: str = ""
    book: str = ""

    @property
    def outcome(self) -> Outcome:
        """How much of the identifier was recovered."""
        found = sum(1 for value in (self.level, self.book) if value)
        if found == 2:
            return "complete"
        if found == 1:
            return "partial"
        return "none"

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"level": self.level, "book": self.book}


@dataclass(frozen=True)
class ExtractionRule:
    """One ordered pattern-matching attempt for a single field."""

    name: str
    pattern: re.Pattern[str]
    transform: Callable[[str], str] = str

    def apply(self, text: str) -> str | None:
        """Return the transformed first match, or None."""
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.transform(match.group(1))


def _anchor_alternative(anchor: str, anchors: tuple[str, ...]) -> str:
    """An anchor that cannot match as the prefix of a longer anchor ("lv" in "lvl")."""
    followers = sorted(
        {other[len(anchor)] for other in anchors if other != anchor and other.startswith(anchor)}
    )
    if not followers:
        return anchor
    return rf"{anchor}(?![{''.join(followers)}])"


def _anchored(anchors: tuple[str, ...], value: str) -> re.Pattern[str]:
    alternation = "|".join(_anchor_alternative(a, anchors) for a in anchors)
    return re.compile(
        rf"\b(?:{alternation}){_SEPARATOR}({value})\b",
        re.IGNORECASE,
    )


LEVEL_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        name="level_anchored",
        pattern=_anchored(LEVEL_ANCHORS, r"[A-M]"),
        transform=str.upper,
    ),
    ExtractionRule(
        name="level_isolated_letter",
        pattern=re.compile(r"\b([A-M])\b", re.IGNORECASE),
        transform=str.upper,
    ),
)

BOOK_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        name="book_anchored",
        pattern=_anchored(BOOK_ANCHORS, r"\d{1,2}"),
    ),
    ExtractionRule(
        name="book_isolated_number",
        pattern=re.compile(r"\b(\d{1,2})\b"),
    ),
)

# =============================================================================
# MAIN FUNCTION
# =============================================================================


def first_match(rules: tuple[ExtractionRule, ...], text: str) -> str:
    """Evaluate rules in order and return the first hit ("" if none)."""
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            return value
    return ""


def extract(raw_text: str | None) -> ExtractionResult:
    """Extract level and book candidates from recognized text.

    Args:
        raw_text: Text returned by the OCR service (may be None or empty)

    Returns:
        ExtractionResult; fields are empty strings when nothing matched
    """
    if not raw_text:
        return ExtractionResult()

    return ExtractionResult(
        level=first_match(LEVEL_RULES, raw_text),
        book=first_match(BOOK_RULES, raw_text),
    )
