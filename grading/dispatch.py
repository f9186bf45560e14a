"""Evaluator registry and the top-level evaluation call.

The registry is built once at import time and never changes. Kind tags
arrive in many spellings ("gap-fill", "GapFill", "mcq", ...); they are
normalized and mapped through a fixed alias table before lookup.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from grading.base import BlockEvaluator, Document
from grading.config import EvaluationConfig
from grading.content import normalize_tag, objects, parse_document, same_id
from grading.errors import UnsupportedKindError
from grading.gap_fill import GapFillEvaluator
from grading.matching import MatchingEvaluator
from grading.multiple_choice import MultipleChoiceEvaluator
from grading.ordering import OrderingEvaluator
from grading.schemas import ExerciseBlock
from models import ExerciseKind, Verdict

logger = logging.getLogger(__name__)

EVALUATORS: Mapping[ExerciseKind, type[BlockEvaluator]] = MappingProxyType(
    {
        ExerciseKind.GAP_FILL: GapFillEvaluator,
        ExerciseKind.MATCHING: MatchingEvaluator,
        ExerciseKind.MULTIPLE_CHOICE: MultipleChoiceEvaluator,
        ExerciseKind.ORDERING: OrderingEvaluator,
    }
)

KIND_ALIASES: Mapping[str, ExerciseKind] = MappingProxyType(
    {
        "gapfill": ExerciseKind.GAP_FILL,
        "fillblank": ExerciseKind.GAP_FILL,
        "fillintheblank": ExerciseKind.GAP_FILL,
        "match": ExerciseKind.MATCHING,
        "matching": ExerciseKind.MATCHING,
        "multiplechoice": ExerciseKind.MULTIPLE_CHOICE,
        "mcq": ExerciseKind.MULTIPLE_CHOICE,
        "ordering": ExerciseKind.ORDERING,
        "order": ExerciseKind.ORDERING,
        "sequence": ExerciseKind.ORDERING,
    }
)

# Structural markers, checked in this order; anything else is an ordering block.
_STRUCTURE_MARKERS = (
    (("questions", "correctAnswers"), ExerciseKind.MULTIPLE_CHOICE),
    (("blanks", "gaps"), ExerciseKind.GAP_FILL),
    (("leftType", "rightType", "leftText", "leftItems"), ExerciseKind.MATCHING),
)


def resolve_kind(tag: ExerciseKind | str) -> ExerciseKind:
    """Map a kind tag onto an ExerciseKind.

    Raises:
        UnsupportedKindError: The tag names no known exercise kind.
    """
    if isinstance(tag, ExerciseKind):
        return tag
    kind = KIND_ALIASES.get(normalize_tag(tag))
    if kind is None:
        logger.warning("Unsupported exercise kind '%s'", tag)
        raise UnsupportedKindError(tag)
    return kind


def get_evaluator(
    tag: ExerciseKind | str,
    config: EvaluationConfig | None = None,
) -> BlockEvaluator:
    """Return an evaluator for a kind tag.

    Raises:
        UnsupportedKindError: No registered evaluator supports the kind.
    """
    kind = resolve_kind(tag)
    for evaluator_class in EVALUATORS.values():
        evaluator = evaluator_class(config)
        if evaluator.supports(kind):
            return evaluator
    logger.warning("No evaluator registered for kind '%s'", kind.value)
    raise UnsupportedKindError(tag)


def _contains_key(node: Any, keys: tuple[str, ...]) -> bool:
    wanted = {key.lower() for key in keys}
    if isinstance(node, dict):
        for key, value in node.items():
            if str(key).lower() in wanted or _contains_key(value, keys):
                return True
    elif isinstance(node, list):
        return any(_contains_key(item, keys) for item in node)
    return False


def _kind_from_type(type_value: Any) -> ExerciseKind | None:
    tag = normalize_tag(type_value)
    if not tag:
        return None
    if tag in KIND_ALIASES:
        return KIND_ALIASES[tag]
    for alias, kind in KIND_ALIASES.items():
        if alias in tag:
            return kind
    return None


def infer_kind(document: Document, block_id: str | None = None) -> ExerciseKind:
    """Guess the exercise kind of a content document.

    A typed ``blocks[]`` entry (the one with ``block_id`` when given) decides
    first. Otherwise the document is probed for characteristic field names.
    """
    tree = parse_document(document)
    if tree is None:
        return ExerciseKind.ORDERING

    for entry in objects(tree.get("blocks")):
        if block_id is not None and not same_id(entry.get("id"), block_id):
            continue
        kind = _kind_from_type(entry.get("type"))
        if kind is not None:
            return kind

    for keys, kind in _STRUCTURE_MARKERS:
        if _contains_key(tree, keys):
            return kind
    return ExerciseKind.ORDERING


def evaluate(
    content_document: Document,
    block_id: str,
    kind_hint: ExerciseKind | str | None,
    submission: Any,
    config: EvaluationConfig | None = None,
) -> Verdict:
    """Evaluate one submission against one block of a content document.

    Args:
        content_document: JSON text (or an already parsed object).
        block_id: Id of the block inside the document.
        kind_hint: Exercise kind tag; inferred from the document when empty.
        submission: The submitted answer in any accepted shape.
        config: Evaluation settings; defaults apply when omitted.

    Returns:
        The verdict.

    Raises:
        UnsupportedKindError: The kind hint names no known exercise kind.
        BlockNotFoundError: The block could not be resolved.
        EmptySubmissionError: The submission contained nothing to evaluate.
    """
    tree = parse_document(content_document)
    document = tree if tree is not None else content_document

    if kind_hint is None or (isinstance(kind_hint, str) and not kind_hint.strip()):
        kind_hint = infer_kind(document, block_id)
        logger.debug("Inferred kind '%s' for block '%s'", kind_hint.value, block_id)

    evaluator = get_evaluator(kind_hint, config)
    return evaluator.validate(document, block_id, submission)


def list_blocks(
    document: Document,
    config: EvaluationConfig | None = None,
) -> list[tuple[ExerciseKind, ExerciseBlock]]:
    """Every resolvable block in a content document, sorted by declared order."""
    tree = parse_document(document)
    if tree is None:
        return []
    found = []
    for kind, evaluator_class in EVALUATORS.items():
        found.extend((kind, block) for block in evaluator_class(config).list_blocks(tree))
    return sorted(found, key=lambda pair: pair[1].order)
