"""Abstract base class shared by the block evaluators."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Generic, TypeVar

from grading.config import DEFAULT_CONFIG, EvaluationConfig
from grading.content import parse_document
from grading.errors import BlockNotFoundError, EmptySubmissionError
from grading.schemas import ExerciseBlock
from models import ExerciseKind, Verdict

B = TypeVar("B", bound=ExerciseBlock)
S = TypeVar("S")

Document = str | bytes | Mapping[str, Any] | None


class BlockEvaluator(ABC, Generic[B, S]):
    """Abstract base class for block evaluators.

    Each exercise kind implements this interface to provide:
    - Content resolution (document + block id -> canonical block)
    - Answer normalization (raw submission -> canonical submission)
    - Answer checking (canonical block + canonical submission -> verdict)
    - Block listing for inspection

    To add a new exercise kind:
    1. Add a member to ExerciseKind in models.py
    2. Add canonical block models to grading/schemas.py
    3. Create an evaluator class extending BlockEvaluator[YourBlock, YourSubmission]
    4. Register it in EVALUATORS in grading/dispatch.py
    """

    kind: ExerciseKind

    def __init__(self, config: EvaluationConfig | None = None):
        self.config = config or DEFAULT_CONFIG

    @abstractmethod
    def resolve(self, document: Document, block_id: str) -> B | None:
        """Resolve a block of this kind from a content document.

        Returns None when no probe finds the block; never raises on
        malformed content.
        """
        ...

    @abstractmethod
    def normalize(self, submission: Any) -> S:
        """Coerce a raw submission into this kind's canonical submission."""
        ...

    @abstractmethod
    def check(self, block: B, submission: S) -> Verdict:
        """Compare a canonical submission with the block and build the verdict."""
        ...

    @abstractmethod
    def block_ids(self, tree: dict[str, Any]) -> list[str]:
        """Ids of every block of this kind the content document exposes."""
        ...

    def supports(self, kind: ExerciseKind) -> bool:
        return kind == self.kind

    def validate(self, document: Document, block_id: str, submission: Any) -> Verdict:
        """Resolve, normalize and check in one call.

        Raises:
            BlockNotFoundError: The block could not be resolved.
            EmptySubmissionError: The submission normalized to nothing.
        """
        block = self.resolve(document, block_id)
        if block is None:
            raise BlockNotFoundError(self.kind.value, block_id)

        canonical = self.normalize(submission)
        if not canonical:
            raise EmptySubmissionError(self.kind.value, "no recognizable answer")

        return self.check(block, canonical)

    def list_blocks(self, document: Document) -> list[B]:
        """Every resolvable block of this kind, in document order."""
        tree = parse_document(document)
        if tree is None:
            return []
        blocks = []
        for block_id in self.block_ids(tree):
            block = self.resolve(tree, block_id)
            if block is not None and all(b.id != block.id for b in blocks):
                blocks.append(block)
        return blocks

    def all_or_nothing(self, block: ExerciseBlock, is_correct: bool) -> Decimal:
        return block.points if is_correct else Decimal("0")

    def round_points(self, value: Decimal) -> Decimal:
        """Round points half away from zero to the configured precision."""
        exponent = Decimal(1).scaleb(-self.config.points_precision)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)

    def feedback(self, is_correct: bool) -> str:
        messages = self.config.feedback
        return messages.correct if is_correct else messages.incorrect
