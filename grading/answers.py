"""Coercion of submitted answers into canonical per-kind submissions.

Clients send the same logical field in many shapes: native arrays, JSON
arrays encoded as strings, comma-joined strings, single scalars, or arrays
whose elements are themselves stringified JSON objects. Every submitted
value is ingested once into a RawValue variant; downstream code only ever
looks at the variant tag.

Coercion order for list-shaped fields: array parsing, then delimited-string
parsing, then wrapping a single scalar. Empty entries are dropped and
strings are trimmed. A submission with no recognizable shape normalizes to
an empty canonical value; evaluators turn that into EmptySubmissionError.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from grading.content import as_int, as_text, get_field
from grading.schemas import SubmittedBlank, SubmittedMatch

logger = logging.getLogger(__name__)


# =============================================================================
# RawValue
# =============================================================================


class ArrayValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: Literal["array"] = "array"
    items: tuple[Any, ...] = ()


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: Literal["string"] = "string"
    text: str


class ScalarValue(BaseModel):
    """Numbers, booleans and single JSON objects."""

    model_config = ConfigDict(frozen=True)

    tag: Literal["scalar"] = "scalar"
    value: Any


class NullValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: Literal["null"] = "null"


RawValue = Union[ArrayValue, StringValue, ScalarValue, NullValue]


def ingest(value: Any) -> RawValue:
    """Classify a submitted value once, decoding JSON carried inside strings."""
    if value is None:
        return NullValue()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ArrayValue(items=tuple(value))
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return NullValue()
        if text[0] in "[{":
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                logger.debug("Submitted string looks like JSON but is not; treating as text")
            else:
                return ingest(decoded)
        return StringValue(text=text)
    return ScalarValue(value=value)


_DELIMITER_RE = re.compile(r"[,،;]")


def to_list(raw: RawValue) -> list[Any]:
    """Flatten a RawValue into a list of non-empty elements.

    Nested arrays are flattened and stringified elements are decoded, so a
    list like ``["a", "[\\"b\\", \\"c\\"]"]`` yields ``["a", "b", "c"]``.
    Objects are kept as elements.
    """
    if isinstance(raw, NullValue):
        return []
    if isinstance(raw, StringValue):
        parts = [part.strip() for part in _DELIMITER_RE.split(raw.text)]
        return [part for part in parts if part]
    if isinstance(raw, ScalarValue):
        return [raw.value]

    result: list[Any] = []
    for item in raw.items:
        element = ingest(item)
        if isinstance(element, ArrayValue):
            result.extend(to_list(element))
        elif isinstance(element, StringValue):
            result.append(element.text)
        elif isinstance(element, ScalarValue):
            result.append(element.value)
    return result


def _unwrap(submission: Any) -> Any:
    """Decode a submission that arrived as a JSON object encoded in a string."""
    if isinstance(submission, (str, bytes)):
        raw = ingest(submission)
        if isinstance(raw, ScalarValue) and isinstance(raw.value, Mapping):
            return raw.value
    return submission


def _field_value(submission: Any, keys: tuple[str, ...]) -> Any:
    """Find the logical field in a submission.

    A submission that is already list- or string-shaped is the field itself.
    """
    submission = _unwrap(submission)
    if isinstance(submission, Mapping):
        return get_field(submission, *keys)
    return submission


# =============================================================================
# Ordering
# =============================================================================

ORDER_KEYS = ("order", "orderedItems", "orderedIds", "items", "sequence", "answer")
ITEM_ID_KEYS = ("id", "itemId", "value", "key")


def _element_id(element: Any) -> str | None:
    if isinstance(element, Mapping):
        element = get_field(element, *ITEM_ID_KEYS)
    text = as_text(element)
    if text is None:
        return None
    text = text.strip()
    return text or None


def normalize_order(submission: Any) -> list[str]:
    """Ordered list of submitted item ids."""
    raw = ingest(_field_value(submission, ORDER_KEYS))
    order = []
    for element in to_list(raw):
        item_id = _element_id(element)
        if item_id:
            order.append(item_id)
    return order


# =============================================================================
# Multiple choice
# =============================================================================

SELECTION_KEYS = (
    "selectedOptions",
    "selectedOptionIndices",
    "selectedIndices",
    "selected",
    "selectedIndex",
    "answers",
    "answer",
)
OPTION_INDEX_KEYS = ("index", "optionIndex", "value", "id")


def normalize_selection(submission: Any) -> frozenset[int]:
    """Set of selected option indices; unparsable entries are dropped."""
    raw = ingest(_field_value(submission, SELECTION_KEYS))
    selected = set()
    for element in to_list(raw):
        if isinstance(element, Mapping):
            element = get_field(element, *OPTION_INDEX_KEYS)
        index = as_int(element)
        if index is not None:
            selected.add(index)
    return frozenset(selected)


# =============================================================================
# Matching
# =============================================================================

MATCHES_KEYS = ("matches", "pairs", "connections", "answers")
LEFT_KEYS = ("leftItemId", "leftId", "left", "itemId", "sourceId")
SELECTED_KEYS = ("selectedPairId", "rightItemId", "pairId", "right", "selectedId", "targetId")
ORDER_INDEX_KEYS = ("orderIndex", "index", "order", "position")

# Order index of a pair submitted without one; such pairs never match by position.
UNORDERED = -1


def _match_from_object(entry: Mapping) -> SubmittedMatch | None:
    left = as_text(get_field(entry, *LEFT_KEYS)) or ""
    selected = as_text(get_field(entry, *SELECTED_KEYS)) or ""
    order_index = as_int(get_field(entry, *ORDER_INDEX_KEYS), default=UNORDERED)
    if not left.strip() and not selected.strip():
        return None
    return SubmittedMatch(
        left_item_id=left.strip(),
        selected_pair_id=selected.strip(),
        order_index=order_index,
    )


def normalize_matches(submission: Any) -> list[SubmittedMatch]:
    """Submitted pairs, sorted by their order index.

    Accepts a list of pair objects or a ``{leftItemId: selectedPairId}``
    mapping. Pairs without an explicit order index keep their submission
    order after the indexed ones.
    """
    submission = _unwrap(submission)
    field = _field_value(submission, MATCHES_KEYS)
    if field is None and isinstance(submission, Mapping):
        field = submission
    raw = ingest(field)

    if isinstance(raw, ScalarValue) and isinstance(raw.value, Mapping):
        mapping = raw.value
        if get_field(mapping, *LEFT_KEYS) is None:
            matches = []
            for left, selected in mapping.items():
                match = _match_from_object({"leftItemId": left, "selectedPairId": as_text(selected)})
                if match is not None:
                    matches.append(match)
            return matches

    matches = []
    for element in to_list(raw):
        if not isinstance(element, Mapping):
            logger.debug("Ignoring non-object match entry %r", element)
            continue
        match = _match_from_object(element)
        if match is not None:
            matches.append(match)
    return sorted(matches, key=lambda m: (m.order_index == UNORDERED, m.order_index))


# =============================================================================
# Gap fill
# =============================================================================

BLANKS_KEYS = ("blanks", "answers", "gaps")
BLANK_ID_KEYS = ("blankId", "id", "key", "blank")
OPTION_ID_KEYS = ("optionId", "selectedOptionId", "option")
VALUE_KEYS = ("value", "text", "input", "answer")
BLANK_INDEX_KEYS = ("index", "order")

_BLANKS_FIELDS = frozenset(key.lower() for key in BLANKS_KEYS)

_DIGITS_RE = re.compile(r"\d+")


def _index_from_id(blank_id: str) -> int:
    digits = "".join(_DIGITS_RE.findall(blank_id))
    return int(digits) if digits else 0


def _blank_from_object(entry: Mapping) -> SubmittedBlank:
    blank_id = (as_text(get_field(entry, *BLANK_ID_KEYS)) or "").strip()
    option_id = as_text(get_field(entry, *OPTION_ID_KEYS))
    value = as_text(get_field(entry, *VALUE_KEYS))
    index = as_int(get_field(entry, *BLANK_INDEX_KEYS))

    if index is None:
        index = _index_from_id(blank_id) if blank_id else 0
    if not blank_id and index > 0:
        blank_id = f"blank{index}"

    return SubmittedBlank(
        blank_id=blank_id,
        index=index,
        value=value.strip() if value is not None else None,
        option_id=option_id.strip() if option_id and option_id.strip() else None,
    )


def normalize_blanks(submission: Any) -> list[SubmittedBlank]:
    """Submitted blank responses.

    Accepts a ``blanks`` array of objects (possibly stringified), plain values
    (an array, a comma-separated string or a single scalar) taken as blanks
    1..n, or a flat ``{"blank1": "...", ...}`` mapping.
    """
    submission = _unwrap(submission)
    field = _field_value(submission, BLANKS_KEYS)
    raw = ingest(field)

    blanks = []
    if isinstance(raw, ScalarValue) and isinstance(raw.value, Mapping):
        blanks.append(_blank_from_object(raw.value))
    elif not isinstance(raw, NullValue):
        for position, element in enumerate(to_list(raw), start=1):
            if isinstance(element, Mapping):
                blanks.append(_blank_from_object(element))
            else:
                value = as_text(element)
                if value is not None:
                    blanks.append(
                        SubmittedBlank(
                            blank_id=f"blank{position}",
                            index=position,
                            value=value.strip(),
                        )
                    )

    if not blanks and isinstance(submission, Mapping):
        for key, value in submission.items():
            name = str(key).lower()
            if not name.startswith("blank") or name in _BLANKS_FIELDS:
                continue
            if isinstance(value, Mapping):
                blanks.append(_blank_from_object({"blankId": key, **value}))
                continue
            text = as_text(value)
            blanks.append(
                SubmittedBlank(
                    blank_id=str(key),
                    index=_index_from_id(str(key)),
                    value=text.strip() if text is not None else None,
                )
            )

    return [blank for blank in blanks if not blank.is_empty]
