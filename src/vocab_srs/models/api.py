from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictInt, model_validator
from pydantic.alias_generators import to_camel

from .vocab import MasteryInfo, ReviewButton, VocabItem


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WordCreateRequest(_CamelModel):
    """単語追加リクエスト。同じ綴り（大小文字無視）が既にあれば表示テキストのみ更新する。"""

    word: str = Field(min_length=1, max_length=128, description="見出し語（1..128文字）")
    translation: str = Field(default="", max_length=1000)
    example: str = Field(default="", max_length=2000)
    phonetic: str = Field(default="", max_length=128)


class WordUpdateRequest(_CamelModel):
    """表示テキストの部分更新。スケジューリング項目はここからは変更できない。"""

    translation: str | None = Field(default=None, max_length=1000)
    example: str | None = Field(default=None, max_length=2000)
    phonetic: str | None = Field(default=None, max_length=128)


class ReviewRequest(_CamelModel):
    """採点リクエスト。`quality`（0..5）か `button` のどちらか一方を指定する。

    quality は JSON の整数だけを受け付ける（true や 4.0、"4" は 422）。範囲外の
    整数は 400 として扱うため、範囲の検証はスケジューラに任せる。
    """

    quality: StrictInt | None = None
    button: ReviewButton | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ReviewRequest":
        if (self.quality is None) == (self.button is None):
            raise ValueError("exactly one of 'quality' or 'button' must be provided")
        return self


class VocabItemView(_CamelModel):
    item: VocabItem
    mastery: MasteryInfo
    interval_text: str


class VocabListResponse(_CamelModel):
    items: list[VocabItemView]
    total: int


class ReviewResponse(_CamelModel):
    item: VocabItemView
    quality: int
    total_reviews_completed: int = Field(description="累計採点回数（保存済み）")


class DueScope(str, Enum):
    now = "now"
    today = "today"


class ListSort(str, Enum):
    created = "created"
    mastery = "mastery"
