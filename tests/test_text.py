"""Unit tests for Persian-aware text normalization and comparison."""

import pytest

from grading.text import (
    has_persian_text,
    normalize_text,
    strip_whitespace,
    texts_match,
)

ZWNJ = "\u200c"


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_empty_values(self):
        """Should return an empty string for None and empty input."""
        assert normalize_text(None) == ""
        assert normalize_text("") == ""

    def test_arabic_kaf_folds_to_persian_kaf(self):
        """Should fold Arabic kaf to Persian keheh."""
        assert normalize_text("كتاب") == normalize_text("کتاب")

    def test_arabic_yeh_folds_to_persian_yeh(self):
        """Should fold Arabic yeh and alef maksura to Farsi yeh."""
        assert normalize_text("علي") == "علی"
        assert normalize_text("موسى") == "موسی"

    def test_digits_fold_to_ascii(self):
        """Should fold Arabic-indic and extended Arabic-indic digits to ASCII."""
        assert normalize_text("١٢٣") == "123"
        assert normalize_text("۴۵۶") == "456"

    def test_strips_diacritics(self):
        """Should remove combining marks from Latin and Arabic text."""
        assert normalize_text("café") == "cafe"
        assert normalize_text("كَتَب") == "کتب"

    def test_strips_invisible_characters(self):
        """Should remove zero-width, bidi control and tatweel characters."""
        assert normalize_text("a\u200bb\u200fc\u0640d") == "abcd"
        assert normalize_text("\ufeffword") == "word"

    def test_collapses_whitespace(self):
        """Should fold whitespace runs to one space and trim."""
        assert normalize_text("  two \t\n words  ") == "two words"

    @pytest.mark.parametrize(
        "value",
        [
            "كتاب",
            "  Hello   World ",
            "نیم" + ZWNJ + "فاصله",
            "۱۲ apples",
            "résumé",
        ],
    )
    def test_fixed_point(self, value):
        """Should return the same string when normalizing twice."""
        once = normalize_text(value)
        assert normalize_text(once) == once


class TestPersianDetection:
    """Tests for Persian script helpers."""

    def test_has_persian_text(self):
        """Should detect Persian letters and half-spaces."""
        assert has_persian_text("کتاب")
        assert has_persian_text("a" + ZWNJ + "b")
        assert not has_persian_text("plain ascii")
        assert not has_persian_text(None)

    def test_strip_whitespace_removes_half_spaces(self):
        """Should remove spaces and half-spaces alike."""
        assert strip_whitespace("a b" + ZWNJ + "c") == "abc"


class TestTextsMatch:
    """Tests for texts_match."""

    def test_exact_case_insensitive(self):
        """Should ignore letter case by default."""
        assert texts_match("Desk", "desk")

    def test_exact_case_sensitive(self):
        """Should honor letter case when requested."""
        assert not texts_match("Desk", "desk", case_sensitive=True)
        assert texts_match("Desk", "Desk", case_sensitive=True)

    def test_one_side_empty(self):
        """Should reject an empty submission against a non-empty answer."""
        assert not texts_match("desk", "")
        assert not texts_match("", "desk")

    def test_both_empty(self):
        """Should accept two empty values."""
        assert texts_match("", "   ")

    def test_half_space_and_arabic_yeh(self):
        """Should accept a half-space word typed joined with Arabic yeh."""
        correct = "نیم" + ZWNJ + "فاصله"
        submitted = "نيمفاصله"
        assert texts_match(correct, submitted)

    def test_persian_space_variants(self):
        """Should accept a Persian compound word written with a full space."""
        correct = "می" + ZWNJ + "روم"
        submitted = "می روم"
        assert texts_match(correct, submitted)

    def test_latin_spacing_is_not_ignored(self):
        """Should not strip spaces for Latin-only text in exact mode."""
        assert not texts_match("note book", "notebook")

    def test_keyword_mode(self):
        """Should accept a submission containing the correct answer."""
        assert texts_match("paris", "the city of Paris", answer_type="keyword")
        assert not texts_match("paris", "the city of Paris")

    def test_similar_mode(self):
        """Should accept whitespace differences in similar mode."""
        assert texts_match("new york", "new    york", answer_type="similar")

    def test_unknown_answer_type_behaves_as_exact(self):
        """Should treat an unknown answer type as exact."""
        assert not texts_match("paris", "in paris", answer_type="fuzzy")
