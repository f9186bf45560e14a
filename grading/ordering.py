"""Ordering blocks: content resolution and evaluation.

Item ids are opaque tokens, so the submitted sequence is compared with the
correct order position by position and case-sensitively.
"""

import logging
from typing import Any

from grading.answers import normalize_order
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
    string_list,
    unique_by,
)
from grading.schemas import OrderingBlock, OrderingItem
from models import ExerciseKind, Verdict

logger = logging.getLogger(__name__)

KIND_TAGS = ("ordering",)
LEGACY_ARRAY = "orderingBlocks"


# =============================================================================
# Content parsing
# =============================================================================


def parse_items(value: Any, owner: str) -> list[OrderingItem]:
    items = [
        OrderingItem(
            id=as_text(entry.get("id")) or f"{owner}-item{position}",
            type=as_text(entry.get("type")) or "text",
            value=as_text(get_field(entry, "value", "text", "content")),
            file_id=as_text(get_field(entry, "fileId", "fileID")),
            file_name=as_text(entry.get("fileName")),
            file_url=as_text(entry.get("fileUrl")),
            mime_type=as_text(entry.get("mimeType")),
            include=as_bool(entry.get("include"), default=True),
        )
        for position, entry in enumerate(objects(value), start=1)
    ]
    return unique_by(items, lambda item: item.id)


def resolve_correct_order(declared: list[str], items: list[OrderingItem]) -> list[str]:
    """The declared order restricted to known items, else the included items in order."""
    if declared:
        if not items:
            return declared
        known = {item.id for item in items}
        dropped = [item_id for item_id in declared if item_id not in known]
        if dropped:
            logger.debug("Ignoring unknown ids in correct order: %s", dropped)
        return [item_id for item_id in declared if item_id in known]
    return [item.id for item in items if item.include]


def parse_block(
    entry: dict[str, Any],
    config: EvaluationConfig,
    block_id: str | None = None,
) -> OrderingBlock:
    data = block_data(entry)
    identifier = block_id or as_text(entry.get("id")) or ""
    items = parse_items(data.get("items"), identifier)
    correct_order = resolve_correct_order(string_list(data.get("correctOrder")), items)
    included = [item for item in items if item.include]

    return OrderingBlock(
        id=identifier,
        order=as_int(entry.get("order"), default=as_int(data.get("order"), default=0)),
        instruction=as_text(data.get("instruction")) or "",
        points=resolve_points(as_decimal(data.get("points")), max(1, len(included)), config),
        is_required=as_bool(data.get("isRequired"), default=True),
        items=items,
        correct_order=correct_order,
        direction=as_text(data.get("direction")) or "vertical",
        alignment=as_text(data.get("alignment")),
        show_numbers=as_bool(data.get("showNumbers"), default=True),
        allow_drag_drop=as_bool(data.get("allowDragDrop"), default=True),
    )


def _is_sequence(entry: dict[str, Any]) -> bool:
    data = block_data(entry)
    return bool(objects(data.get("items")) or string_list(data.get("correctOrder")))


# =============================================================================
# Probes
# =============================================================================


def from_blocks_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> OrderingBlock | None:
    entry = find_by_id(list(iter_typed_blocks(tree, KIND_TAGS)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_legacy_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> OrderingBlock | None:
    entry = find_by_id(objects(tree.get(LEGACY_ARRAY)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_untyped_blocks(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> OrderingBlock | None:
    entries = [e for e in objects(tree.get("blocks")) if e.get("type") is None and _is_sequence(e)]
    entry = find_by_id(entries, block_id)
    return parse_block(entry, config) if entry is not None else None


def from_legacy_document(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> OrderingBlock | None:
    """The single-sequence layout: ``{instruction, items[], correctOrder[], points}``."""
    if not config.is_legacy_id(block_id) or not _is_sequence(tree):
        return None
    return parse_block(tree, config, block_id=block_id.strip())


PROBES = (from_blocks_array, from_legacy_array, from_untyped_blocks, from_legacy_document)


# =============================================================================
# Evaluator
# =============================================================================


class OrderingEvaluator(BlockEvaluator[OrderingBlock, list[str]]):
    """Evaluator for ordering blocks. Scoring is all-or-nothing."""

    kind = ExerciseKind.ORDERING

    def resolve(self, document: Document, block_id: str) -> OrderingBlock | None:
        return run_probes(PROBES, document, block_id, self.config, self.kind.value)

    def normalize(self, submission: Any) -> list[str]:
        return normalize_order(submission)

    def block_ids(self, tree: dict[str, Any]) -> list[str]:
        entries = list(iter_typed_blocks(tree, KIND_TAGS)) + objects(tree.get(LEGACY_ARRAY))
        entries += [e for e in objects(tree.get("blocks")) if e.get("type") is None and _is_sequence(e)]
        ids = [as_text(entry.get("id")) for entry in entries]
        if _is_sequence(tree) and self.config.legacy_block_ids:
            ids.append(self.config.legacy_block_ids[0])
        return [block_id for block_id in ids if block_id]

    def check(self, block: OrderingBlock, submission: list[str]) -> Verdict:
        correct = list(block.correct_order)
        is_correct = bool(correct) and submission == correct

        positions = []
        for position in range(max(len(submission), len(correct))):
            submitted_id = submission[position] if position < len(submission) else None
            correct_id = correct[position] if position < len(correct) else None
            positions.append(
                {
                    "position": position,
                    "submittedId": submitted_id,
                    "correctId": correct_id,
                    "isCorrect": submitted_id is not None and submitted_id == correct_id,
                }
            )

        return Verdict(
            is_correct=is_correct,
            points_earned=self.all_or_nothing(block, is_correct),
            max_points=block.points,
            correct_answer={"order": correct},
            submitted_answer={"order": list(submission)},
            feedback=self.feedback(is_correct),
            detailed_feedback={
                "submittedOrder": list(submission),
                "correctOrder": correct,
                "positions": positions,
            },
        )
