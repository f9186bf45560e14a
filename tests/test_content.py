"""Unit tests for content document helpers."""

import logging
from decimal import Decimal

import pytest

from grading.config import EvaluationConfig
from grading.content import (
    as_bool,
    as_decimal,
    as_int,
    as_text,
    get_field,
    normalize_tag,
    parse_document,
    resolve_points,
    run_probes,
    same_id,
    type_matches,
    unique_by,
)


class TestParseDocument:
    """Tests for parse_document."""

    def test_parses_json_object(self):
        """Should parse a JSON object from text or bytes."""
        assert parse_document('{"a": 1}') == {"a": 1}
        assert parse_document(b'{"a": 1}') == {"a": 1}

    def test_accepts_mapping(self):
        """Should copy an already parsed mapping."""
        tree = {"blocks": []}
        parsed = parse_document(tree)
        assert parsed == tree
        assert parsed is not tree

    @pytest.mark.parametrize("document", [None, "", "   ", "not json", "[1, 2]", "42"])
    def test_rejects_non_objects(self, document):
        """Should return None for empty, invalid or non-object documents."""
        assert parse_document(document) is None


class TestTags:
    """Tests for type tag and id comparison."""

    def test_normalize_tag(self):
        """Should lowercase and drop separators."""
        assert normalize_tag("Multiple-Choice") == "multiplechoice"
        assert normalize_tag("gap_fill") == "gapfill"
        assert normalize_tag(None) == ""

    def test_type_matches(self):
        """Should match a type tag containing the kind tag."""
        assert type_matches("GapFill", ("gapfill",))
        assert type_matches("fill-blank", ("gapfill", "fillblank"))
        assert not type_matches("ordering", ("gapfill",))
        assert not type_matches("", ("gapfill",))

    def test_same_id(self):
        """Should compare ids case-insensitively and never match empties."""
        assert same_id("Block-1", " block-1 ")
        assert same_id(7, "7")
        assert not same_id("", "")
        assert not same_id(None, "a")


class TestFieldAccess:
    """Tests for tolerant field reading."""

    def test_first_present_key_wins(self):
        """Should return the first non-null value among the keys."""
        obj = {"text": None, "value": "v", "content": "c"}
        assert get_field(obj, "text", "value", "content") == "v"

    def test_case_insensitive_fallback(self):
        """Should fall back to case-insensitive key matching."""
        assert get_field({"FileID": "f1"}, "fileId") == "f1"

    def test_default(self):
        """Should return the default for missing keys and non-mappings."""
        assert get_field({}, "a", default=3) == 3
        assert get_field([1], "a") is None

    def test_scalar_conversions(self):
        """Should convert loosely typed scalars."""
        assert as_text(2.0) == "2"
        assert as_text(True) == "true"
        assert as_text({"a": 1}) is None
        assert as_int("3") == 3
        assert as_int("3.0") == 3
        assert as_int("3.5") is None
        assert as_int(True, default=0) == 0
        assert as_bool("yes") is True
        assert as_bool("maybe", default=True) is True
        assert as_decimal("1.5") == Decimal("1.5")
        assert as_decimal("nan") is None
        assert as_decimal(False) is None


class TestResolvePoints:
    """Tests for resolve_points."""

    def test_declared_positive(self):
        """Should keep a positive declared value."""
        assert resolve_points(Decimal("2.5"), 1, EvaluationConfig()) == Decimal("2.5")

    def test_missing_or_negative_uses_default(self):
        """Should substitute the default for missing or negative values."""
        config = EvaluationConfig()
        assert resolve_points(None, 3, config) == Decimal(3)
        assert resolve_points(Decimal("-1"), 3, config) == Decimal(3)

    def test_zero_points(self):
        """Should keep zero only when unscored blocks are allowed."""
        assert resolve_points(Decimal(0), 2, EvaluationConfig()) == Decimal(2)
        assert resolve_points(Decimal(0), 2, EvaluationConfig(allow_unscored=True)) == Decimal(0)


def _never(tree, block_id, config):
    return None


def _found(tree, block_id, config):
    return {"id": block_id}


class TestRunProbes:
    """Tests for run_probes."""

    def test_first_hit_wins(self):
        """Should return the first block any probe finds."""
        block = run_probes((_never, _found), '{"blocks": []}', "b1", EvaluationConfig(), "test")
        assert block == {"id": "b1"}

    def test_no_probe_finds_block(self, caplog):
        """Should return None and warn when every probe misses."""
        with caplog.at_level(logging.WARNING, logger="grading.content"):
            block = run_probes((_never,), '{"blocks": []}', "b1", EvaluationConfig(), "test")
        assert block is None
        assert "No test block 'b1'" in caplog.text

    def test_invalid_document(self):
        """Should return None for content that is not a JSON object."""
        assert run_probes((_found,), "not json", "b1", EvaluationConfig(), "test") is None

    def test_blank_block_id(self):
        """Should not resolve an empty block id."""
        assert run_probes((_found,), "{}", "  ", EvaluationConfig(), "test") is None


class TestUniqueBy:
    """Tests for unique_by."""

    def test_drops_case_insensitive_duplicates(self):
        """Should keep the first of items whose keys differ only by case."""
        items = ["a", "B", "A", "b", "c"]
        assert unique_by(items, lambda item: item) == ["a", "B", "c"]
