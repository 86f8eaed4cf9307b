from __future__ import annotations

from enum import Enum

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


MIN_EASE_FACTOR = 1.3
INITIAL_EASE_FACTOR = 2.5


class VocabItem(BaseModel):
    """One tracked vocabulary item and its SM-2 scheduling state.

    表示用テキスト（word/translation/example/phonetic）はスケジューラから見て
    不透明で、保持して受け渡すだけ。スケジューリング項目は `update_schedule`
    だけが更新する。frozen なので更新は常に新しいインスタンスを返す。
    永続化レコードのキーは camelCase（easeFactor, nextReview など）。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(min_length=1)
    word: str
    translation: str = ""
    example: str = ""
    phonetic: str = ""
    ease_factor: float = Field(default=INITIAL_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    interval: int = Field(default=0, ge=0, description="Days until next review")
    repetitions: int = Field(default=0, ge=0, description="Consecutive reviews with quality >= 3")
    next_review: AwareDatetime
    last_review: AwareDatetime
    created_at: AwareDatetime


class MasteryLevel(str, Enum):
    """Coarse display tier derived from consecutive successful repetitions."""

    new = "new"
    learning = "learning"
    familiar = "familiar"
    mastered = "mastered"


class MasteryInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: MasteryLevel
    label: str


class MasteryBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    new: int = 0
    learning: int = 0
    familiar: int = 0
    mastered: int = 0


class VocabStats(BaseModel):
    """Aggregate counts for a collection.

    - total: 件数
    - due_today: 今日中に due になる件数
    - overdue: 現時点で期限を過ぎている件数（厳密に <）
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total: int
    due_today: int
    overdue: int
    by_mastery: MasteryBreakdown


class ReviewButton(str, Enum):
    """Four self-assessment buttons of the review screen."""

    again = "again"
    hard = "hard"
    good = "good"
    easy = "easy"


class VocabDeck(BaseModel):
    """Everything persisted for one user: the item list plus lifetime counters.

    total_reviews_completed は採点のたびに 1 増え、items と同じ書き込みで保存される。
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    items: list[VocabItem] = Field(default_factory=list)
    total_reviews_completed: int = Field(default=0, ge=0)
