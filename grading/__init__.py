"""Answer validation for interactive exercise blocks.

Given a JSON content document, a block id, a kind tag and a submitted answer
in any of several wire shapes, the package resolves the block, coerces the
answer into a canonical form and returns a Verdict.

Exercise kinds:
- Gap fill: text with blanks, free-text or option answers
- Matching: pairs of left and right sides
- Multiple choice: single or multiple selection
- Ordering: arrange items into a sequence

Entry points:
- evaluate: resolve, normalize and check in one call
- get_evaluator: registry lookup by kind tag
- infer_kind: guess a document's kind from its structure
- list_blocks: every resolvable block in a document

Errors:
- BlockNotFoundError, EmptySubmissionError (both BlockValidationError)
- UnsupportedKindError (kept separate from validation errors)
"""

from grading.base import BlockEvaluator
from grading.config import (
    DEFAULT_CONFIG,
    ENGLISH_MESSAGES,
    PERSIAN_MESSAGES,
    EvaluationConfig,
    FeedbackMessages,
)
from grading.dispatch import (
    EVALUATORS,
    evaluate,
    get_evaluator,
    infer_kind,
    list_blocks,
    resolve_kind,
)
from grading.errors import (
    BlockNotFoundError,
    BlockValidationError,
    EmptySubmissionError,
    UnsupportedKindError,
)
from grading.gap_fill import GapFillEvaluator
from grading.matching import MatchingEvaluator
from grading.multiple_choice import MultipleChoiceEvaluator
from grading.ordering import OrderingEvaluator
from grading.text import normalize_text, texts_match

__all__ = [
    # Entry points
    "evaluate",
    "get_evaluator",
    "infer_kind",
    "list_blocks",
    "resolve_kind",
    "EVALUATORS",
    # Evaluators
    "BlockEvaluator",
    "GapFillEvaluator",
    "MatchingEvaluator",
    "MultipleChoiceEvaluator",
    "OrderingEvaluator",
    # Configuration
    "EvaluationConfig",
    "FeedbackMessages",
    "DEFAULT_CONFIG",
    "PERSIAN_MESSAGES",
    "ENGLISH_MESSAGES",
    # Errors
    "BlockValidationError",
    "BlockNotFoundError",
    "EmptySubmissionError",
    "UnsupportedKindError",
    # Text
    "normalize_text",
    "texts_match",
]
