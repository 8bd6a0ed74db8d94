"""Tests for level/book extraction (F1)."""

import pytest

from eyelevel.core.extraction import (
    BOOK_RULES,
    LEVEL_RULES,
    ExtractionResult,
    extract,
    first_match,
)


class TestExtractAnchored:
    """Anchored rules: "Level B", "Book 12" and their variants."""

    def test_level_and_book_anchored(self):
        """Both anchors present."""
        result = extract("Level B, Book 12")
        assert result == ExtractionResult(level="B", book="12")

    @pytest.mark.parametrize(
        "text,level",
        [
            ("LEVEL c", "C"),
            ("lvl: D", "D"),
            ("Lv.E", "E"),
            ("level-M", "M"),
        ],
    )
    def test_level_anchor_variants(self, text, level):
        """Anchor is case-insensitive and tolerates a separator."""
        assert extract(text).level == level

    @pytest.mark.parametrize(
        "text,book",
        [
            ("BOOK 3", "3"),
            ("bk#07", "07"),
            ("No. 15", "15"),
        ],
    )
    def test_book_anchor_variants(self, text, book):
        """Book numeral is returned as written."""
        assert extract(text).book == book

    def test_lvl_anchor_not_misread_as_lv(self):
        """'lvl B' yields B, not the trailing 'l' of the anchor."""
        assert extract("lvl B").level == "B"

    @pytest.mark.parametrize("text", ["Lvl 3", "lvl: 7", "LVL"])
    def test_lvl_without_letter_reads_no_level(self, text):
        """An 'lvl' anchor with no letter after it never yields its own 'l'."""
        assert extract(text).level == ""

    def test_empty_lvl_anchor_does_not_hide_later_anchor(self):
        """A later 'Level D' still wins after an 'lvl' with a digit."""
        assert extract("Lvl 3, Level D").level == "D"

    def test_lv_anchor_still_matches(self):
        assert extract("lv K").level == "K"

    def test_anchor_wins_over_earlier_isolated_token(self):
        """Anchored match beats an isolated token appearing first."""
        result = extract("A 4 ... Level G Book 9")
        assert result.level == "G"
        assert result.book == "9"

    def test_anchor_with_letter_out_of_range_falls_back(self):
        """Level Z is not a level; fallback picks the first isolated A-M."""
        result = extract("Level Z page C")
        assert result.level == "C"


class TestExtractFallback:
    """Unanchored fallback rules."""

    def test_isolated_tokens_only(self):
        """'B 7' is resolved by fallbacks alone."""
        assert extract("B 7") == ExtractionResult(level="B", book="7")

    def test_first_isolated_letter_wins(self):
        """First match wins, not best match."""
        assert extract("x F then H").level == "F"

    def test_three_digit_number_is_not_a_book(self):
        """Only 1-2 digit isolated numerals count."""
        assert extract("page 123").book == ""

    def test_three_digit_after_anchor_falls_back(self):
        """Book 123 is rejected; a later isolated numeral is taken."""
        assert extract("Book 123 / 45").book == "45"

    def test_letters_inside_words_are_ignored(self):
        """Letters must be isolated tokens."""
        assert extract("Mathematics").level == ""


class TestExtractNoMatch:
    """Non-matches are empty fields, never errors."""

    def test_unrelated_text(self):
        """No anchors and no isolated tokens."""
        assert extract("random unrelated text") == ExtractionResult(level="", book="")

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_input(self, text):
        """Absent input yields empty result."""
        assert extract(text) == ExtractionResult()

    def test_deterministic(self):
        """Same text, same result."""
        text = "Kumon lvl J no 4 worksheet 21"
        assert extract(text) == extract(text)


class TestExtractionResult:
    """Tests for ExtractionResult helpers."""

    def test_outcome_complete(self):
        assert ExtractionResult(level="A", book="1").outcome == "complete"

    def test_outcome_partial(self):
        assert ExtractionResult(level="A").outcome == "partial"
        assert ExtractionResult(book="1").outcome == "partial"

    def test_outcome_none(self):
        assert ExtractionResult().outcome == "none"

    def test_to_dict(self):
        assert ExtractionResult(level="K", book="2").to_dict() == {"level": "K", "book": "2"}


class TestRules:
    """Tests for rule ordering."""

    def test_rules_are_ordered_anchored_first(self):
        assert [r.name for r in LEVEL_RULES] == ["level_anchored", "level_isolated_letter"]
        assert [r.name for r in BOOK_RULES] == ["book_anchored", "book_isolated_number"]

    def test_first_match_returns_empty_when_no_rule_matches(self):
        assert first_match(BOOK_RULES, "no digits here") == ""
