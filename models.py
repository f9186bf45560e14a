from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExerciseKind(str, Enum):
    GAP_FILL = "gap_fill"
    MATCHING = "matching"
    MULTIPLE_CHOICE = "multiple_choice"
    ORDERING = "ordering"


# ============================================================================
# Verdict
# ============================================================================


class Verdict(BaseModel):
    """
    The single structured result of evaluating one submission against one block.

    Verdicts are immutable. Points are kept as Decimal so rounding stays exact;
    the answer maps are plain JSON-compatible dicts whose shape depends on the
    exercise kind.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    is_correct: bool
    points_earned: Decimal = Decimal("0")
    max_points: Decimal = Decimal("0")
    correct_answer: dict[str, Any] = Field(default_factory=dict)
    submitted_answer: dict[str, Any] = Field(default_factory=dict)
    feedback: str = ""
    detailed_feedback: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase, JSON-ready form of the verdict."""
        return self.model_dump(mode="json", by_alias=True)
