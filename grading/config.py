"""Configuration for answer evaluation.

These configuration models let callers tune evaluation behavior, such as
the feedback language, which block ids address legacy single-exercise
content, and how matching scores are rounded.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FeedbackMessages(BaseModel):
    """Human-readable verdict phrasing for one language."""

    model_config = ConfigDict(frozen=True)

    correct: str
    incorrect: str
    matching_correct: str
    matching_incorrect: str
    gap_fill_incorrect: str
    empty_block: str


PERSIAN_MESSAGES = FeedbackMessages(
    correct="عالی! پاسخ شما صحیح است.",
    incorrect="متأسفانه پاسخ شما صحیح نیست. لطفاً دوباره تلاش کنید.",
    matching_correct="عالی! همه تطبیق‌ها صحیح هستند.",
    matching_incorrect="برخی از تطبیق‌ها نیاز به بررسی مجدد دارند.",
    gap_fill_incorrect="برخی از پاسخ‌ها صحیح نیست. لطفاً دوباره تلاش کنید.",
    empty_block="پاسخی برای این بلاک ثبت نشده است.",
)

ENGLISH_MESSAGES = FeedbackMessages(
    correct="Great! Your answer is correct.",
    incorrect="Unfortunately your answer is not correct. Please try again.",
    matching_correct="Great! All matches are correct.",
    matching_incorrect="Some of the matches need another look.",
    gap_fill_incorrect="Some of the answers are not correct. Please try again.",
    empty_block="There is nothing to answer in this block.",
)


class EvaluationConfig(BaseModel):
    """Master configuration shared by all evaluators."""

    model_config = ConfigDict(frozen=True)

    language: Literal["fa", "en"] = "fa"
    legacy_block_ids: tuple[str, ...] = ("main", "legacy")
    points_precision: int = Field(default=2, ge=0, le=6)
    allow_unscored: bool = False
    messages: dict[str, FeedbackMessages] = Field(
        default_factory=lambda: {"fa": PERSIAN_MESSAGES, "en": ENGLISH_MESSAGES}
    )

    @property
    def feedback(self) -> FeedbackMessages:
        return self.messages.get(self.language, PERSIAN_MESSAGES)

    def is_legacy_id(self, block_id: str) -> bool:
        return block_id.strip().lower() in {b.lower() for b in self.legacy_block_ids}


DEFAULT_CONFIG = EvaluationConfig()
