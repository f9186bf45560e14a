"""Matching blocks: content resolution and evaluation.

Every matching item carries both of its sides. The item id doubles as the
correct pair id, so a submitted pair is right when the left item was
connected to the right side belonging to the same item.
"""

import logging
from decimal import Decimal
from typing import Any

from grading.answers import normalize_matches
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
    same_id,
    unique_by,
)
from grading.schemas import MatchingBlock, MatchItem, MatchSide, SubmittedMatch
from models import ExerciseKind, Verdict

logger = logging.getLogger(__name__)

KIND_TAGS = ("match",)
LEGACY_ARRAY = "matchingBlocks"


# =============================================================================
# Content parsing
# =============================================================================


def _prefixed(entry: dict[str, Any], prefix: str, *suffixes: str) -> Any:
    return get_field(entry, *(f"{prefix}{suffix}" for suffix in suffixes))


def parse_side(entry: dict[str, Any], prefix: str) -> MatchSide:
    """Read one side of an item, either as a nested object or as prefixed keys.

    Examples:
        - {"left": {"type": "text", "text": "sun"}}
        - {"leftType": "image", "leftFileId": 12, "leftFileUrl": "/f/12"}
    """
    nested = entry.get(prefix)
    if isinstance(nested, dict):
        return MatchSide(
            type=as_text(nested.get("type")) or "text",
            text=as_text(get_field(nested, "text", "value", "content")),
            file_id=as_text(get_field(nested, "fileId", "fileID")),
            file_name=as_text(nested.get("fileName")),
            file_url=as_text(get_field(nested, "fileUrl", "url")),
            mime_type=as_text(get_field(nested, "mimeType", "mime")),
            is_recorded=as_bool(nested.get("isRecorded")),
            duration=as_int(nested.get("duration")),
        )
    if isinstance(nested, str):
        return MatchSide(text=nested)

    return MatchSide(
        type=as_text(_prefixed(entry, prefix, "Type")) or "text",
        text=as_text(_prefixed(entry, prefix, "Text", "Value", "Content")),
        file_id=as_text(_prefixed(entry, prefix, "FileId", "FileID")),
        file_name=as_text(_prefixed(entry, prefix, "FileName")),
        file_url=as_text(_prefixed(entry, prefix, "FileUrl", "Url")),
        mime_type=as_text(_prefixed(entry, prefix, "MimeType", "Mime")),
        is_recorded=as_bool(_prefixed(entry, prefix, "IsRecorded")),
        duration=as_int(_prefixed(entry, prefix, "Duration")),
    )


def parse_items(entries: list[dict[str, Any]], owner: str) -> list[MatchItem]:
    items = [
        MatchItem(
            id=as_text(entry.get("id")) or f"{owner}-item{position}",
            left=parse_side(entry, "left"),
            right=parse_side(entry, "right"),
        )
        for position, entry in enumerate(entries, start=1)
    ]
    return unique_by(items, lambda item: item.id)


def _indexed_texts(entries: Any) -> dict[int, str]:
    texts = {}
    for entry in objects(entries):
        index = as_int(get_field(entry, "Index", "index"), default=0)
        texts.setdefault(index, as_text(get_field(entry, "Text", "text")) or "")
    return texts


def parse_legacy_items(data: dict[str, Any]) -> list[MatchItem]:
    """Build items from the ``leftItems``/``rightItems``/``connections`` layout.

    Without connections every left index is paired with the same right index.
    """
    left_texts = _indexed_texts(data.get("leftItems"))
    right_texts = _indexed_texts(data.get("rightItems"))
    if not left_texts or not right_texts:
        return []

    connections = [
        (
            as_int(get_field(c, "LeftIndex", "leftIndex"), default=-1),
            as_int(get_field(c, "RightIndex", "rightIndex"), default=-1),
        )
        for c in objects(data.get("connections"))
    ]
    if not connections:
        connections = [(index, index) for index in sorted(left_texts)]

    items = []
    for left_index, right_index in connections:
        if left_index not in left_texts or right_index not in right_texts:
            logger.debug("Skipping connection %s -> %s with a missing side", left_index, right_index)
            continue
        items.append(
            MatchItem(
                id=f"legacy-{left_index}",
                left=MatchSide(text=left_texts[left_index]),
                right=MatchSide(text=right_texts[right_index]),
            )
        )
    return unique_by(items, lambda item: item.id)


def parse_block(
    entry: dict[str, Any],
    config: EvaluationConfig,
    block_id: str | None = None,
) -> MatchingBlock:
    data = block_data(entry)
    identifier = block_id or as_text(entry.get("id")) or ""

    item_entries = objects(data.get("items"))
    items = parse_items(item_entries, identifier) if item_entries else parse_legacy_items(data)

    return MatchingBlock(
        id=identifier,
        order=as_int(entry.get("order"), default=as_int(data.get("order"), default=0)),
        instruction=as_text(data.get("instruction")) or "",
        points=resolve_points(as_decimal(data.get("points")), max(1, len(items)), config),
        is_required=as_bool(data.get("isRequired"), default=True),
        items=items,
    )


def _contains_item(entry: dict[str, Any], block_id: str) -> bool:
    return any(same_id(item.get("id"), block_id) for item in objects(block_data(entry).get("items")))


def _has_sides(entry: dict[str, Any]) -> bool:
    data = block_data(entry)
    if objects(data.get("leftItems")):
        return True
    return any(
        isinstance(item.get("left"), dict) or get_field(item, "leftType", "leftText") is not None
        for item in objects(data.get("items"))
    )


# =============================================================================
# Probes
# =============================================================================


def from_blocks_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MatchingBlock | None:
    entries = list(iter_typed_blocks(tree, KIND_TAGS))
    entry = find_by_id(entries, block_id)
    return parse_block(entry, config) if entry is not None else None


def from_item_id(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MatchingBlock | None:
    """A block id naming one of a block's items resolves to the whole block."""
    for entry in iter_typed_blocks(tree, KIND_TAGS):
        if _contains_item(entry, block_id):
            return parse_block(entry, config)
    return None


def from_legacy_array(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MatchingBlock | None:
    entry = find_by_id(objects(tree.get(LEGACY_ARRAY)), block_id)
    return parse_block(entry, config) if entry is not None else None


def from_untyped_blocks(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MatchingBlock | None:
    """Serialized matching content whose ``blocks[]`` entries carry no type tag.

    A legacy id addresses the block stored with id ``legacy``.
    """
    entries = [
        entry
        for entry in objects(tree.get("blocks"))
        if entry.get("type") is None and _has_sides(entry)
    ]
    entry = find_by_id(entries, block_id)
    if entry is None and config.is_legacy_id(block_id):
        entry = find_by_id(entries, "legacy")
    return parse_block(entry, config) if entry is not None else None


def from_legacy_document(tree: dict[str, Any], block_id: str, config: EvaluationConfig) -> MatchingBlock | None:
    if not config.is_legacy_id(block_id):
        return None
    items = parse_legacy_items(tree)
    if not items:
        return None
    return MatchingBlock(
        id="legacy",
        points=resolve_points(None, len(items), config),
        items=items,
    )


PROBES = (
    from_blocks_array,
    from_item_id,
    from_legacy_array,
    from_untyped_blocks,
    from_legacy_document,
)


# =============================================================================
# Evaluator
# =============================================================================


class MatchingEvaluator(BlockEvaluator[MatchingBlock, list[SubmittedMatch]]):
    """Evaluator for matching blocks. Scoring is proportional to correct pairs."""

    kind = ExerciseKind.MATCHING

    def resolve(self, document: Document, block_id: str) -> MatchingBlock | None:
        return run_probes(PROBES, document, block_id, self.config, self.kind.value)

    def normalize(self, submission: Any) -> list[SubmittedMatch]:
        return [match for match in normalize_matches(submission) if match.left_item_id]

    def block_ids(self, tree: dict[str, Any]) -> list[str]:
        entries = list(iter_typed_blocks(tree, KIND_TAGS)) + objects(tree.get(LEGACY_ARRAY))
        entries += [e for e in objects(tree.get("blocks")) if e.get("type") is None and _has_sides(e)]
        ids = [as_text(entry.get("id")) for entry in entries]
        if parse_legacy_items(tree):
            ids.append("legacy")
        return [block_id for block_id in ids if block_id]

    def check(self, block: MatchingBlock, submission: list[SubmittedMatch]) -> Verdict:
        messages = self.config.feedback
        submitted_payload = {
            "matches": [
                {
                    "leftItemId": match.left_item_id,
                    "selectedPairId": match.selected_pair_id,
                    "orderIndex": match.order_index,
                }
                for match in submission
            ]
        }

        if not block.items:
            return Verdict(
                is_correct=True,
                points_earned=block.points,
                max_points=block.points,
                correct_answer={"matches": []},
                submitted_answer=submitted_payload,
                feedback=messages.empty_block,
                detailed_feedback={"pairs": [], "correctCount": 0, "totalItems": 0},
            )

        by_left_id: dict[str, int] = {}
        by_position: dict[int, int] = {}
        for n, match in enumerate(submission):
            by_left_id.setdefault(match.left_item_id.casefold(), n)
            if match.order_index >= 0:
                by_position.setdefault(match.order_index, n)

        # Left ids are claimed first so the positional fallback cannot reuse them.
        claimed = {by_left_id.get(item.id.casefold()) for item in block.items} - {None}
        pairs = []
        for position, item in enumerate(block.items):
            n = by_left_id.get(item.id.casefold())
            if n is None:
                n = by_position.get(position)
                if n in claimed:
                    n = None
                elif n is not None:
                    claimed.add(n)
            selected = submission[n].selected_pair_id if n is not None else ""
            pairs.append(
                {
                    "leftItemId": item.id,
                    "selectedPairId": selected,
                    "correctPairId": item.id,
                    "isCorrect": same_id(selected, item.id),
                }
            )

        correct_count = sum(1 for pair in pairs if pair["isCorrect"])
        is_correct = correct_count == len(block.items)
        earned = self.round_points(block.points * Decimal(correct_count) / Decimal(len(block.items)))

        return Verdict(
            is_correct=is_correct,
            points_earned=block.points if is_correct else earned,
            max_points=block.points,
            correct_answer={
                "matches": [{"leftItemId": item.id, "correctPairId": item.id} for item in block.items]
            },
            submitted_answer=submitted_payload,
            feedback=messages.matching_correct if is_correct else messages.matching_incorrect,
            detailed_feedback={
                "pairs": pairs,
                "correctCount": correct_count,
                "totalItems": len(block.items),
            },
        )
