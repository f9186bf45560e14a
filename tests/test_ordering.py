"""Unit tests for the ordering evaluator."""

import itertools
import json
from decimal import Decimal

import pytest

from grading.errors import EmptySubmissionError
from grading.ordering import OrderingEvaluator


@pytest.fixture
def evaluator(english_config) -> OrderingEvaluator:
    return OrderingEvaluator(english_config)


class TestOrderingResolution:
    """Tests for resolving ordering blocks."""

    def test_declared_order(self, evaluator, ordering_content):
        """Should read items and the declared correct order."""
        block = evaluator.resolve(ordering_content, "ord-1")
        assert [item.id for item in block.items] == ["a", "b", "c"]
        assert block.correct_order == ["b", "a", "c"]
        assert block.direction == "vertical"

    def test_order_from_included_items(self, evaluator):
        """Should fall back to included items in order without a declared order."""
        content = json.dumps(
            {
                "blocks": [
                    {
                        "id": "o",
                        "type": "ordering",
                        "data": {
                            "items": [
                                {"id": "x", "value": "1"},
                                {"id": "y", "value": "2", "include": False},
                                {"id": "z", "value": "3"},
                            ]
                        },
                    }
                ]
            }
        )
        block = evaluator.resolve(content, "o")
        assert block.correct_order == ["x", "z"]
        assert block.points == Decimal("2")

    def test_unknown_ids_dropped_from_declared_order(self, evaluator):
        """Should ignore declared ids that name no item."""
        content = json.dumps(
            {
                "blocks": [
                    {
                        "id": "o",
                        "type": "ordering",
                        "data": {"items": [{"id": "x"}, {"id": "y"}], "correctOrder": ["y", "ghost", "x"]},
                    }
                ]
            }
        )
        assert evaluator.resolve(content, "o").correct_order == ["y", "x"]

    def test_legacy_document(self, evaluator):
        """Should resolve a single-sequence document under the legacy id."""
        content = json.dumps({"items": [{"id": "p"}, {"id": "q"}], "correctOrder": ["q", "p"]})
        assert evaluator.resolve(content, "main").correct_order == ["q", "p"]

    def test_legacy_array(self, evaluator):
        """Should resolve blocks from the orderingBlocks array."""
        content = json.dumps({"orderingBlocks": [{"id": "seq", "correctOrder": ["1", "2"]}]})
        assert evaluator.resolve(content, "SEQ").correct_order == ["1", "2"]


class TestOrderingEvaluation:
    """Tests for checking submitted orders."""

    def test_correct_order(self, evaluator, ordering_content):
        """Should accept the exact correct order."""
        verdict = evaluator.validate(ordering_content, "ord-1", ["b", "a", "c"])
        assert verdict.is_correct
        assert verdict.points_earned == Decimal("1")
        assert all(p["isCorrect"] for p in verdict.detailed_feedback["positions"])

    def test_swapped_order(self, evaluator, ordering_content):
        """Should reject a swapped order and mark the wrong positions."""
        verdict = evaluator.validate(ordering_content, "ord-1", '["a", "b", "c"]')
        assert not verdict.is_correct
        assert verdict.points_earned == Decimal("0")
        assert [p["isCorrect"] for p in verdict.detailed_feedback["positions"]] == [False, False, True]

    def test_ids_are_case_sensitive(self, evaluator, ordering_content):
        """Should compare item ids exactly."""
        assert not evaluator.validate(ordering_content, "ord-1", ["B", "a", "c"]).is_correct

    def test_short_submission(self, evaluator, ordering_content):
        """Should reject a submission missing items."""
        verdict = evaluator.validate(ordering_content, "ord-1", {"order": ["b", "a"]})
        assert not verdict.is_correct
        assert verdict.detailed_feedback["positions"][2]["submittedId"] is None

    def test_only_one_permutation_correct(self, evaluator):
        """Should accept exactly one of all orderings of four items."""
        ids = ["p", "q", "r", "s"]
        content = json.dumps(
            {
                "blocks": [
                    {
                        "id": "o",
                        "type": "ordering",
                        "data": {"items": [{"id": i} for i in ids], "correctOrder": ["r", "p", "s", "q"]},
                    }
                ]
            }
        )
        accepted = [
            list(permutation)
            for permutation in itertools.permutations(ids)
            if evaluator.validate(content, "o", list(permutation)).is_correct
        ]
        assert accepted == [["r", "p", "s", "q"]]

    def test_empty_correct_order_never_matches(self, evaluator):
        """Should reject every submission when the block declares no order."""
        content = json.dumps(
            {"blocks": [{"id": "o", "type": "ordering", "data": {"items": [{"id": "x", "include": False}]}}]}
        )
        assert not evaluator.validate(content, "o", ["x"]).is_correct

    @pytest.mark.parametrize("submission", [None, "", [], {"order": []}, [{"label": "x"}]])
    def test_empty_submission(self, evaluator, ordering_content, submission):
        """Should raise when the submission names no item."""
        with pytest.raises(EmptySubmissionError):
            evaluator.validate(ordering_content, "ord-1", submission)
