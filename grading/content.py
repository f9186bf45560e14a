"""Shared helpers for reading loosely-structured content documents.

Content documents are JSON trees whose layout changed several times. Each
exercise kind resolves its blocks through an ordered chain of probes: small
functions that look for one layout and return a canonical block, or None to
let the next probe try. Nothing in here raises on malformed content.
"""

import json
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from grading.config import EvaluationConfig

logger = logging.getLogger(__name__)

# A probe receives the parsed document, the requested block id and the
# active configuration, and returns a canonical block or None.
Probe = Callable[[dict[str, Any], str, EvaluationConfig], Any]


def parse_document(document: str | bytes | Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Parse a content document into a JSON object.

    Returns None for empty input, invalid JSON, or JSON that is not an object.
    """
    if document is None:
        return None
    if isinstance(document, Mapping):
        return dict(document)
    if isinstance(document, bytes):
        document = document.decode("utf-8", errors="replace")
    if not isinstance(document, str) or not document.strip():
        return None
    try:
        tree = json.loads(document)
    except json.JSONDecodeError as e:
        logger.debug("Content document is not valid JSON: %s", e)
        return None
    return tree if isinstance(tree, dict) else None


def normalize_tag(value: Any) -> str:
    """Lowercase a type tag and drop separators: "Multiple-Choice" -> "multiplechoice"."""
    if value is None:
        return ""
    return "".join(ch for ch in str(value).lower() if ch not in "-_ ")


def type_matches(type_value: Any, kind_tags: Sequence[str]) -> bool:
    tag = normalize_tag(type_value)
    return bool(tag) and any(kind_tag in tag for kind_tag in kind_tags)


def same_id(left: Any, right: Any) -> bool:
    """Case-insensitive id equality; empty ids never match."""
    left_text = as_text(left)
    right_text = as_text(right)
    if not left_text or not right_text:
        return False
    return left_text.strip().casefold() == right_text.strip().casefold()


# =============================================================================
# Field access
# =============================================================================


def get_field(obj: Any, *keys: str, default: Any = None) -> Any:
    """Return the first non-null value among several accepted key spellings.

    Exact key matches win; otherwise keys are compared case-insensitively.
    """
    if not isinstance(obj, Mapping):
        return default
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    lowered = {str(k).lower(): v for k, v in obj.items()}
    for key in keys:
        value = lowered.get(key.lower())
        if value is not None:
            return value
    return default


def has_field(obj: Any, *keys: str) -> bool:
    if not isinstance(obj, Mapping):
        return False
    lowered = {str(k).lower() for k in obj}
    return any(key.lower() in lowered for key in keys)


def as_text(value: Any) -> str | None:
    """Render a scalar JSON value as text; containers and null give None."""
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def as_int(value: Any, default: int | None = None) -> int | None:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return default
            return int(number) if number.is_integer() else default
    return default


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1", "yes"):
            return True
        if text in ("false", "0", "no"):
            return False
    return default


def as_decimal(value: Any) -> Decimal | None:
    """Parse points declared as an int, a float or a numeric string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def string_list(value: Any) -> list[str]:
    """Trimmed, non-empty strings from an array (or a single scalar)."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    result = []
    for item in items:
        text = as_text(item)
        if text and text.strip():
            result.append(text.strip())
    return result


def objects(value: Any) -> list[dict[str, Any]]:
    """The JSON objects of an array, skipping anything else."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def block_data(entry: dict[str, Any]) -> dict[str, Any]:
    """The nested ``data`` object of a block entry, or the entry itself."""
    data = entry.get("data")
    return data if isinstance(data, dict) else entry


# =============================================================================
# Block lookup
# =============================================================================


def iter_typed_blocks(tree: dict[str, Any], kind_tags: Sequence[str]) -> Iterator[dict[str, Any]]:
    """Yield the entries of ``blocks[]`` whose ``type`` matches the kind."""
    for entry in objects(tree.get("blocks")):
        if type_matches(entry.get("type"), kind_tags):
            yield entry


def find_by_id(entries: Sequence[dict[str, Any]], block_id: str) -> dict[str, Any] | None:
    for entry in entries:
        if same_id(entry.get("id"), block_id):
            return entry
    return None


def resolve_points(
    declared: Decimal | None,
    default: int | Decimal,
    config: EvaluationConfig,
) -> Decimal:
    """Pick the block's max points, substituting a default for missing or non-positive values."""
    if declared is not None and declared > 0:
        return declared
    if declared is not None and declared == 0 and config.allow_unscored:
        return Decimal("0")
    return Decimal(default)


def run_probes(
    probes: Sequence[Probe],
    document: str | bytes | Mapping[str, Any] | None,
    block_id: str,
    config: EvaluationConfig,
    kind: str,
) -> Any:
    """Run a probe chain and return the first block found, or None."""
    tree = parse_document(document)
    if tree is None:
        logger.warning("Cannot resolve %s block '%s': content is not a JSON object", kind, block_id)
        return None
    if not block_id or not block_id.strip():
        return None

    for probe in probes:
        block = probe(tree, block_id, config)
        if block is not None:
            logger.debug("Resolved %s block '%s' via %s", kind, block_id, probe.__name__)
            return block
        logger.debug("Probe %s found no %s block '%s'", probe.__name__, kind, block_id)

    logger.warning("No %s block '%s' in content document", kind, block_id)
    return None


def unique_by(items: Sequence[Any], key: Callable[[Any], str]) -> list[Any]:
    """Drop later items whose key repeats an earlier one, ignoring case."""
    seen = set()
    result = []
    for item in items:
        marker = key(item).casefold()
        if marker in seen:
            logger.debug("Dropping duplicate identifier '%s'", key(item))
            continue
        seen.add(marker)
        result.append(item)
    return result
