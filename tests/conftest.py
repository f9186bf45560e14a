"""Shared pytest fixtures for the block grading test suite."""

import json
import pytest

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from grading.config import EvaluationConfig


@pytest.fixture
def english_config() -> EvaluationConfig:
    """Create a configuration with English feedback."""
    return EvaluationConfig(language="en")


@pytest.fixture
def gap_fill_content() -> str:
    """Create a content document with one current-layout gap-fill block."""
    return json.dumps(
        {
            "blocks": [
                {
                    "id": "gf-1",
                    "type": "gapFill",
                    "order": 1,
                    "data": {
                        "instruction": "Fill in the blanks",
                        "content": "The [[blank1]] is on the [[blank2]].",
                        "answerType": "exact",
                        "caseSensitive": False,
                        "points": 2,
                        "blanks": [
                            {
                                "id": "blank2",
                                "index": 2,
                                "correctAnswer": "desk",
                                "alternativeAnswers": ["table"],
                            },
                            {
                                "id": "blank1",
                                "index": 1,
                                "correctAnswer": "book",
                                "options": [
                                    {"id": "o1", "value": "book"},
                                    {"id": "o2", "value": "pen"},
                                ],
                                "correctOptionId": "o1",
                            },
                        ],
                    },
                }
            ]
        }
    )


@pytest.fixture
def matching_content() -> str:
    """Create a content document with a three-item matching block."""
    return json.dumps(
        {
            "blocks": [
                {
                    "id": "m-1",
                    "type": "matching",
                    "order": 2,
                    "data": {
                        "instruction": "Match the words",
                        "points": 3,
                        "items": [
                            {"id": "i1", "leftType": "text", "leftText": "sun", "rightType": "text", "rightText": "day"},
                            {"id": "i2", "leftType": "text", "leftText": "moon", "rightType": "text", "rightText": "night"},
                            {"id": "i3", "leftType": "text", "leftText": "rain", "rightType": "text", "rightText": "cloud"},
                        ],
                    },
                }
            ]
        }
    )


@pytest.fixture
def multiple_choice_content() -> str:
    """Create a content document with single and multiple answer questions."""
    return json.dumps(
        {
            "blocks": [
                {
                    "id": "mc-single",
                    "type": "multiple-choice",
                    "order": 3,
                    "data": {
                        "question": "Which one is a fruit?",
                        "answerType": "single",
                        "options": [
                            {"index": 0, "text": "carrot"},
                            {"index": 1, "text": "apple", "isCorrect": True},
                            {"index": 2, "text": "potato"},
                            {"index": 3, "text": "onion"},
                        ],
                    },
                },
                {
                    "id": "mc-multi",
                    "type": "MultipleChoice",
                    "order": 4,
                    "data": {
                        "question": "Which are even?",
                        "answerType": "multiple",
                        "options": [
                            {"index": 0, "text": "2", "isCorrect": True},
                            {"index": 1, "text": "4", "isCorrect": True},
                            {"index": 2, "text": "6", "isCorrect": True},
                            {"index": 3, "text": "7"},
                        ],
                    },
                },
            ]
        }
    )


@pytest.fixture
def ordering_content() -> str:
    """Create a content document with a three-item ordering block."""
    return json.dumps(
        {
            "blocks": [
                {
                    "id": "ord-1",
                    "type": "ordering",
                    "order": 5,
                    "data": {
                        "instruction": "Put the steps in order",
                        "points": 1,
                        "items": [
                            {"id": "a", "type": "text", "value": "first"},
                            {"id": "b", "type": "text", "value": "second"},
                            {"id": "c", "type": "text", "value": "third"},
                        ],
                        "correctOrder": ["b", "a", "c"],
                    },
                }
            ]
        }
    )


@pytest.fixture
def mixed_content(
    gap_fill_content, matching_content, multiple_choice_content, ordering_content
) -> str:
    """Create a content document holding one block of every kind."""
    blocks = []
    for document in (
        gap_fill_content,
        matching_content,
        multiple_choice_content,
        ordering_content,
    ):
        blocks.extend(json.loads(document)["blocks"])
    return json.dumps({"blocks": blocks})
