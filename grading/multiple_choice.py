"""Multiple-choice blocks: content resolution and evaluation."""

import logging
from typing import Any

from grading.answers import normalize_selection
from grading.base import BlockEvaluator, Document
from grading.config import EvaluationConfig
from grading.content import (
    as_bool,
    as_decimal,
    as_int,
    as_text,
    block_data,
    find_by_id,
    get_field,
    iter_typed_blocks,
    objects,
    resolve_points,
    run_probes,
    unique_by,
)
from grading.schemas import ChoiceOption, MultipleChoiceBlock
from models import ExerciseKind, Verdict

logger = logging.getLogger(__name__)

KIND_TAGS = ("multiplechoice",)
LEGACY_ARRAY = "multipleChoiceBlocks"


# =============================================================================
# Content parsing
# =============================================================================


def parse_options(value: Any) -> list[ChoiceOption]:
    options = [
        ChoiceOption(
            index=as_int(entry.get("index"), default=position),
            text=as_text(get_field(entry, "text", "value", "label")) or "",
            option_type=as_text(get_field(entry, "optionType", "type")) or "text",
            is_correct=as_bool(get_field(entry, "isCorrect", "correct")),
        )
        for position, entry in enumerate(objects(value))
    ]
    return unique_by(options, lambda option: str(option.index))


def correct_indices(data: dict[str, Any], options: list[ChoiceOption]) -> frozenset[int]:
    """Declared correct answers, or the options flagged as correct."""
    declared = get_field(data, "correctAnswers", "correctAnswerIndices", "correctOptions")
    if isinstance(declared, list):
        indices = {index for index in (as_int(value) for value in declared) if index is not None}
        if indices:
            return frozenset(indices)
    elif as_int(declared) is not None:
        return frozenset({as_int(declared)})
    return frozenset(option.index for option in options if option.is_correct)


def parse_block(
    entry: dict[str, Any],
    config: EvaluationConfig,
    block_id: str | None = None,
) -> MultipleChoiceBlock:
    data = block_data(entry)
    options = parse_options(data.get("options"))
    correct = correct_indices(data, options)

    answer_type = (as_text(data.get("answerType")) or "single").strip().lower()
    if answer_type != "multiple" and as_bool(data.get("allowMultiple")):
        answer_type = "multiple"
    if answer_type != "multiple":
        answer_type = "single"
    default_points = max(1, len(correct)) if answer_type == "multiple" else 1

    return MultipleChoiceBlock(
        id=block_id or as_text(entry.get("id")) or "",
        order=as_int(entry.get("order"), default=as_int(data.get("order"), default=0)),
        instruction=as_text(data.get("instruction")) or "",
        points=resolve_points(as_decimal(data.get("points")), default_points, config),
        is_required=as_bool(data.get("isRequired"), default=True),
        question=as_text(get_field(data, "question", "questionText", "text")) or "",
        options=options,
        answer_type=answer_type,
        correct_answer_indices=correct,
    )


def _is_question(entry: dict[str, Any]) -> bool:
    return bool(objects(block_data(entry).get("options")))


# =============================================================================
# Probes
# =============================================================================


def from_blocks_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MultipleChoiceBlock | None:
    entry = find_by_id(list(iter_typed_blocks(tree, KIND_TAGS)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_legacy_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MultipleChoiceBlock | None:
    entry = find_by_id(objects(tree.get(LEGACY_ARRAY)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_untyped_blocks(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MultipleChoiceBlock | None:
    entries = [e for e in objects(tree.get("blocks")) if e.get("type") is None and _is_question(e)]
    entry = find_by_id(entries, block_id)
    return parse_block(entry, config) if entry is not None else None


def from_questions(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MultipleChoiceBlock | None:
    """Quiz-style ``questions[]``; a legacy id picks the first question."""
    questions = [q for q in objects(tree.get("questions")) if _is_question(q)]
    entry = find_by_id(questions, block_id)
    if entry is not None:
        return parse_block(entry, config)
    if questions and config.is_legacy_id(block_id):
        return parse_block(questions[0], config, block_id=block_id.strip())
    return None


def from_legacy_document(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MultipleChoiceBlock | None:
    """The single-question layout: ``{question, options[], answerType, correctAnswers}``."""
    if not config.is_legacy_id(block_id) or not _is_question(tree):
        return None
    return parse_block(tree, config, block_id=block_id.strip())


PROBES = (
    from_blocks_array,
    from_legacy_array,
    from_untyped_blocks,
    from_questions,
    from_legacy_document,
)


# =============================================================================
# Evaluator
# =============================================================================


class MultipleChoiceEvaluator(BlockEvaluator[MultipleChoiceBlock, frozenset[int]]):
    """Evaluator for multiple-choice blocks. Scoring is all-or-nothing."""

    kind = ExerciseKind.MULTIPLE_CHOICE

    def resolve(self, document: Document, block_id: str) -> MultipleChoiceBlock | None:
        return run_probes(PROBES, document, block_id, self.config, self.kind.value)

    def normalize(self, submission: Any) -> frozenset[int]:
        return normalize_selection(submission)

    def block_ids(self, tree: dict[str, Any]) -> list[str]:
        entries = list(iter_typed_blocks(tree, KIND_TAGS)) + objects(tree.get(LEGACY_ARRAY))
        entries += [e for e in objects(tree.get("blocks")) if e.get("type") is None and _is_question(e)]
        entries += [q for q in objects(tree.get("questions")) if _is_question(q)]
        ids = [as_text(entry.get("id")) for entry in entries]
        if _is_question(tree) and self.config.legacy_block_ids:
            ids.append(self.config.legacy_block_ids[0])
        return [block_id for block_id in ids if block_id]

    def check(self, block: MultipleChoiceBlock, submission: frozenset[int]) -> Verdict:
        correct = block.correct_answer_indices
        if block.answer_type == "multiple":
            is_correct = bool(correct) and submission == correct
        else:
            is_correct = len(submission) == 1 and submission <= correct

        submitted = sorted(submission)
        expected = sorted(correct)
        return Verdict(
            is_correct=is_correct,
            points_earned=self.all_or_nothing(block, is_correct),
            max_points=block.points,
            correct_answer={"selectedOptions": expected},
            submitted_answer={"selectedOptions": submitted},
            feedback=self.feedback(is_correct),
            detailed_feedback={
                "submittedOptions": submitted,
                "correctOptions": expected,
                "answerType": block.answer_type,
            },
        )
