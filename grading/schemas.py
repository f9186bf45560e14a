"""Canonical block and submission models.

Content documents arrive in several JSON layouts. Resolvers map every layout
into these models, so evaluators never touch raw JSON. Blocks are built
fresh for each evaluation and never mutated.
"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CanonicalModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class ExerciseBlock(CanonicalModel):
    """Fields shared by every exercise kind."""

    id: str
    order: int = 0
    instruction: str = ""
    points: Decimal = Decimal("1")
    is_required: bool = True


# =============================================================================
# Gap Fill
# =============================================================================


class GapFillOption(CanonicalModel):
    """A selectable answer offered for a blank (or for every blank).

    Examples:
        - id="opt-1", value="desk", display_text="desk"
    """

    id: str
    value: str
    display_text: str = ""


class Blank(CanonicalModel):
    """One blank inside a gap-fill text.

    Examples:
        - id="blank1", index=1, correct_answer="desk",
          alternative_answers=["table"]
    """

    id: str = ""
    index: int = 0
    correct_answer: str = ""
    alternative_answers: list[str] = Field(default_factory=list)
    correct_option_id: str | None = None
    alternative_option_ids: list[str] = Field(default_factory=list)
    options: list[GapFillOption] = Field(default_factory=list)
    hint: str = ""
    allow_manual_input: bool = True
    allow_global_options: bool = False
    allow_blank_options: bool = False

    @property
    def identifier(self) -> str:
        return self.id or f"blank{max(1, self.index)}"


class GapFillBlock(ExerciseBlock):
    blanks: list[Blank] = Field(default_factory=list)
    global_options: list[GapFillOption] = Field(default_factory=list)
    show_global_options: bool = False
    answer_type: Literal["exact", "keyword", "similar"] = "exact"
    case_sensitive: bool = False
    content: str = ""


class SubmittedBlank(CanonicalModel):
    blank_id: str = ""
    index: int = 0
    value: str | None = None
    option_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.value or "").strip() and not (self.option_id or "").strip()


# =============================================================================
# Matching
# =============================================================================


class MatchSide(CanonicalModel):
    """One side of a matching pair: text, an image or an audio clip."""

    type: str = "text"
    text: str | None = None
    file_id: str | None = None
    file_name: str | None = None
    file_url: str | None = None
    mime_type: str | None = None
    is_recorded: bool = False
    duration: int | None = None


class MatchItem(CanonicalModel):
    """A pair whose left side correctly matches its own right side.

    The item id is the correct pair id: a submission pairs a left item with
    the id of the item whose right side it picked.
    """

    id: str
    left: MatchSide
    right: MatchSide


class MatchingBlock(ExerciseBlock):
    items: list[MatchItem] = Field(default_factory=list)


class SubmittedMatch(CanonicalModel):
    left_item_id: str = ""
    selected_pair_id: str = ""
    order_index: int = -1


# =============================================================================
# Multiple Choice
# =============================================================================


class ChoiceOption(CanonicalModel):
    index: int
    text: str = ""
    option_type: str = "text"
    is_correct: bool = False


class MultipleChoiceBlock(ExerciseBlock):
    question: str = ""
    options: list[ChoiceOption] = Field(default_factory=list)
    answer_type: Literal["single", "multiple"] = "single"
    correct_answer_indices: frozenset[int] = frozenset()


# =============================================================================
# Ordering
# =============================================================================


class OrderingItem(CanonicalModel):
    id: str
    type: str = "text"
    value: str | None = None
    file_id: str | None = None
    file_name: str | None = None
    file_url: str | None = None
    mime_type: str | None = None
    include: bool = True


class OrderingBlock(ExerciseBlock):
    items: list[OrderingItem] = Field(default_factory=list)
    correct_order: list[str] = Field(default_factory=list)
    direction: str = "vertical"
    alignment: str | None = None
    show_numbers: bool = True
    allow_drag_drop: bool = True
