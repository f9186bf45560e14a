"""Gap-fill blocks: content resolution and evaluation.

A gap-fill block is a text with numbered blanks. Each blank has a correct
answer, optional alternative answers, and optionally a set of selectable
options (its own, or the block's global options). Students either type a
value or pick an option; the block is correct only if every blank is.
"""

import logging
from typing import Any

from grading.answers import normalize_blanks
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
    has_field,
    iter_typed_blocks,
    objects,
    resolve_points,
    run_probes,
    same_id,
    string_list,
    unique_by,
)
from grading.schemas import Blank, GapFillBlock, GapFillOption, SubmittedBlank
from grading.text import texts_match
from models import ExerciseKind, Verdict

logger = logging.getLogger(__name__)

KIND_TAGS = ("gapfill", "fillblank")
LEGACY_ARRAY = "gapFillBlocks"
ANSWER_TYPES = ("exact", "keyword", "similar")


# =============================================================================
# Content parsing
# =============================================================================


def parse_options(value: Any, owner: str) -> list[GapFillOption]:
    """Parse option objects or bare strings, dropping options without a value.

    Options without an id get ``{owner}-opt{n}`` so repeated evaluations of
    the same content produce the same ids.
    """
    if not isinstance(value, list):
        return []

    options = []
    for position, item in enumerate(value, start=1):
        if isinstance(item, dict):
            text = as_text(get_field(item, "value", "text", "label")) or ""
            if not text.strip():
                continue
            option_id = as_text(item.get("id")) or f"{owner}-opt{position}"
            display = as_text(get_field(item, "displayText", "label")) or text.strip()
            options.append(GapFillOption(id=option_id, value=text.strip(), display_text=display))
        else:
            text = as_text(item) or ""
            if not text.strip():
                continue
            options.append(
                GapFillOption(id=f"{owner}-opt{position}", value=text.strip(), display_text=text.strip())
            )
    return unique_by(options, lambda o: o.id)


def _answers_as_options(answers: list[str], owner: str) -> list[GapFillOption]:
    return [
        GapFillOption(id=f"{owner}-opt{n}", value=answer, display_text=answer)
        for n, answer in enumerate(answers, start=1)
    ]


def parse_blank(entry: dict[str, Any], position: int, allow_global_default: bool) -> Blank:
    """Map one ``blanks[]`` entry into a Blank.

    The index falls back to ``order`` and then to the 1-based position; the
    id falls back to ``key`` and then to ``blank{index}``.
    """
    index = as_int(get_field(entry, "index", "order"), default=position)
    blank_id = as_text(get_field(entry, "id", "key")) or f"blank{index}"
    alternatives = string_list(entry.get("alternativeAnswers"))

    options = parse_options(get_field(entry, "options", "suggestions"), blank_id)
    allow_blank_options = as_bool(entry.get("allowBlankOptions"))
    if not options and alternatives:
        options = _answers_as_options(alternatives, blank_id)
        if not has_field(entry, "allowBlankOptions"):
            allow_blank_options = True
    if options:
        allow_blank_options = True

    correct_option_id = as_text(entry.get("correctOptionId"))
    correct_answer = (as_text(entry.get("correctAnswer")) or "").strip()
    if not correct_answer and correct_option_id:
        for option in options:
            if same_id(option.id, correct_option_id):
                correct_answer = option.value
                break

    return Blank(
        id=blank_id,
        index=index,
        correct_answer=correct_answer,
        alternative_answers=alternatives,
        correct_option_id=correct_option_id,
        alternative_option_ids=string_list(entry.get("alternativeOptionIds")),
        options=options,
        hint=as_text(entry.get("hint")) or "",
        allow_manual_input=as_bool(entry.get("allowManualInput"), default=True),
        allow_global_options=as_bool(entry.get("allowGlobalOptions"), default=allow_global_default),
        allow_blank_options=allow_blank_options,
    )


def parse_legacy_gap(entry: dict[str, Any], position: int, allow_global_default: bool) -> Blank:
    """Map an entry of the old ``gaps[]`` array; its id is always ``blank{index}``."""
    index = max(1, as_int(entry.get("index"), default=position))
    blank_id = f"blank{index}"
    alternatives = string_list(entry.get("alternativeAnswers"))
    return Blank(
        id=blank_id,
        index=index,
        correct_answer=(as_text(entry.get("correctAnswer")) or "").strip(),
        alternative_answers=alternatives,
        options=_answers_as_options(alternatives, blank_id),
        hint=as_text(entry.get("hint")) or "",
        allow_manual_input=True,
        allow_global_options=allow_global_default,
        allow_blank_options=bool(alternatives),
    )


def _sorted_blanks(blanks: list[Blank]) -> list[Blank]:
    ordered = sorted(blanks, key=lambda b: (b.index, b.identifier.casefold()))
    return unique_by(ordered, lambda b: b.identifier)


def _answer_type(value: Any) -> str:
    answer_type = (as_text(value) or "exact").strip().lower()
    return answer_type if answer_type in ANSWER_TYPES else "exact"


def parse_block(
    entry: dict[str, Any],
    config: EvaluationConfig,
    block_id: str | None = None,
) -> GapFillBlock:
    """Map a block entry (current or legacy layout) into a GapFillBlock."""
    data = block_data(entry)
    show_global = as_bool(get_field(data, "showGlobalOptions", "showOptions"))
    global_options = parse_options(get_field(data, "globalOptions", "options"), "global")
    if global_options:
        show_global = True

    blanks = [
        parse_blank(blank, position, show_global)
        for position, blank in enumerate(objects(data.get("blanks")), start=1)
    ]
    if not blanks:
        blanks = [
            parse_legacy_gap(gap, position, show_global)
            for position, gap in enumerate(objects(data.get("gaps")), start=1)
        ]

    return GapFillBlock(
        id=block_id or as_text(entry.get("id")) or "",
        order=as_int(entry.get("order"), default=as_int(data.get("order"), default=0)),
        instruction=as_text(data.get("instruction")) or "",
        points=resolve_points(as_decimal(data.get("points")), 1, config),
        is_required=as_bool(data.get("isRequired"), default=True),
        blanks=_sorted_blanks(blanks),
        global_options=global_options,
        show_global_options=show_global,
        answer_type=_answer_type(data.get("answerType")),
        case_sensitive=as_bool(data.get("caseSensitive")),
        content=as_text(get_field(data, "content", "textContent")) or "",
    )


# =============================================================================
# Probes
# =============================================================================


def from_blocks_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> GapFillBlock | None:
    entry = find_by_id(list(iter_typed_blocks(tree, KIND_TAGS)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_legacy_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> GapFillBlock | None:
    entry = find_by_id(objects(tree.get(LEGACY_ARRAY)), block_id)
    return parse_block(entry, config) if entry is not None else None


def _is_legacy_document(tree: dict[str, Any]) -> bool:
    return bool(objects(tree.get("gaps")) or objects(tree.get("blanks")))


def from_legacy_document(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> GapFillBlock | None:
    """The pre-block layout: ``{text, gaps[], answerType, caseSensitive, showOptions}``."""
    if not config.is_legacy_id(block_id) or not _is_legacy_document(tree):
        return None
    document = dict(tree)
    document.setdefault("content", tree.get("text"))
    return parse_block(document, config, block_id=block_id.strip())


PROBES = (from_blocks_array, from_legacy_array, from_legacy_document)


# =============================================================================
# Evaluator
# =============================================================================


class GapFillEvaluator(BlockEvaluator[GapFillBlock, list[SubmittedBlank]]):
    """Evaluator for gap-fill blocks. Scoring is all-or-nothing."""

    kind = ExerciseKind.GAP_FILL

    def resolve(self, document: Document, block_id: str) -> GapFillBlock | None:
        return run_probes(PROBES, document, block_id, self.config, self.kind.value)

    def normalize(self, submission: Any) -> list[SubmittedBlank]:
        return normalize_blanks(submission)

    def block_ids(self, tree: dict[str, Any]) -> list[str]:
        entries = list(iter_typed_blocks(tree, KIND_TAGS)) + objects(tree.get(LEGACY_ARRAY))
        ids = [as_text(entry.get("id")) for entry in entries]
        if _is_legacy_document(tree) and self.config.legacy_block_ids:
            ids.append(self.config.legacy_block_ids[-1])
        return [block_id for block_id in ids if block_id]

    def check(self, block: GapFillBlock, submission: list[SubmittedBlank]) -> Verdict:
        results = [self._check_blank(block, blank, submission) for blank in block.blanks]
        is_correct = all(result["isCorrect"] for result in results)

        if not block.blanks:
            feedback = self.config.feedback.empty_block
        elif is_correct:
            feedback = self.config.feedback.correct
        else:
            feedback = self.config.feedback.gap_fill_incorrect

        return Verdict(
            is_correct=is_correct,
            points_earned=self.all_or_nothing(block, is_correct),
            max_points=block.points,
            correct_answer=self._correct_answer(block),
            submitted_answer={
                "blanks": [
                    {
                        "blankId": result["blankId"],
                        "index": result["index"],
                        "value": result["submittedValue"],
                        "optionId": result["submittedOptionId"],
                    }
                    for result in results
                ]
            },
            feedback=feedback,
            detailed_feedback={
                "blanks": results,
                "answerType": block.answer_type,
                "caseSensitive": block.case_sensitive,
            },
        )

    def _check_blank(
        self,
        block: GapFillBlock,
        blank: Blank,
        submission: list[SubmittedBlank],
    ) -> dict[str, Any]:
        submitted = find_submitted_blank(blank, submission)
        value = submitted.value if submitted else None
        option_id = submitted.option_id if submitted else None

        result = {
            "blankId": blank.identifier,
            "index": blank.index,
            "isCorrect": False,
            "submittedValue": value,
            "submittedOptionId": option_id,
            "allowManual": blank.allow_manual_input,
            "allowGlobalOptions": blank.allow_global_options,
            "allowBlankOptions": blank.allow_blank_options,
        }
        if submitted is None or submitted.is_empty:
            return result

        option = find_option(block, blank, option_id)
        if option is None and not blank.allow_manual_input:
            logger.debug("Blank '%s' requires an option pick", blank.identifier)
            return result

        result["isCorrect"] = blank_matches(block, blank, option, value, option_id)
        return result

    def _correct_answer(self, block: GapFillBlock) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "answerType": block.answer_type,
            "caseSensitive": block.case_sensitive,
            "blanks": [
                {
                    "blankId": blank.identifier,
                    "index": blank.index,
                    "correctAnswer": blank.correct_answer,
                    "alternativeAnswers": list(blank.alternative_answers),
                    "correctOptionId": blank.correct_option_id,
                    "alternativeOptionIds": list(blank.alternative_option_ids),
                    "options": [_option_payload(option) for option in blank.options],
                }
                for blank in block.blanks
            ],
        }
        if block.show_global_options and block.global_options:
            payload["globalOptions"] = [_option_payload(option) for option in block.global_options]
        return payload


def _option_payload(option: GapFillOption) -> dict[str, str]:
    return {"id": option.id, "value": option.value, "displayText": option.display_text}


def find_submitted_blank(blank: Blank, submission: list[SubmittedBlank]) -> SubmittedBlank | None:
    """The response for a blank: matched by id first, then by index."""
    for submitted in submission:
        if same_id(submitted.blank_id, blank.identifier):
            return submitted
    for submitted in submission:
        if submitted.index > 0 and submitted.index == blank.index:
            return submitted
    return None


def find_option(block: GapFillBlock, blank: Blank, option_id: str | None) -> GapFillOption | None:
    """Look an option id up in the blank's own options, then the global ones."""
    if not option_id:
        return None
    for option in list(blank.options) + list(block.global_options):
        if same_id(option.id, option_id):
            return option
    return None


def blank_matches(
    block: GapFillBlock,
    blank: Blank,
    option: GapFillOption | None,
    value: str | None,
    option_id: str | None,
) -> bool:
    """First match wins: correct answer, alternatives, then option ids."""
    comparison = option.value if option is not None else (value or "")

    if comparison.strip():
        candidates = [blank.correct_answer, *blank.alternative_answers]
        for candidate in candidates:
            if texts_match(candidate, comparison, block.answer_type, block.case_sensitive):
                return True

    picked_id = option.id if option is not None else option_id
    if not picked_id:
        return False
    if blank.correct_option_id and same_id(blank.correct_option_id, picked_id):
        return True
    return any(same_id(alternative_id, picked_id) for alternative_id in blank.alternative_option_ids)
