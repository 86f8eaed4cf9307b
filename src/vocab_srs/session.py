"""Review session: the caller-side owner of one user's item collection.

スケジューラは値を受け取って値を返すだけなので、ID による検索・単語の追加と
削除・保存のタイミングはここで扱う。1 ユーザーにつき同時に 1 つの書き手だけが
load -> 変更 -> save を行えるよう、`user_lock` で直列化する。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from threading import Lock

from .clock import Clock, make_clock
from .config import settings
from .errors import InvalidArgumentError, NotFoundError
from .logging import logger
from .models.vocab import ReviewButton, VocabItem, VocabStats
from .scheduler import (
    compute_stats,
    create_item,
    get_due_items,
    get_due_today,
    map_button_to_quality,
    sort_by_mastery,
    update_schedule,
)
from .store.common import VocabStore

_user_locks: dict[str, Lock] = {}
_user_locks_guard = Lock()


@contextmanager
def user_lock(user_id: str) -> Iterator[None]:
    """Serialise load/modify/save cycles for a single user within this process."""

    with _user_locks_guard:
        lock = _user_locks.setdefault(user_id, Lock())
    with lock:
        yield


class VocabularySession:
    """One user's working collection plus the operations the review UI needs.

    Items are replaced (never mutated) on every change; `save()` commits the
    whole list to the store in one write.
    """

    def __init__(self, store: VocabStore, user_id: str, clock: Clock | None = None) -> None:
        if not user_id:
            raise InvalidArgumentError("user_id must be a non-empty string")
        self._store = store
        self.user_id = user_id
        self._clock = clock or make_clock(settings.timezone)
        self._items: list[VocabItem] = []
        # reviews_completed はこのセッション内、total_reviews_completed は保存される累計。
        self.reviews_completed = 0
        self.total_reviews_completed = 0
        self._log = logger.bind(user_id=user_id)

    @classmethod
    def open(cls, store: VocabStore, user_id: str, clock: Clock | None = None) -> "VocabularySession":
        session = cls(store, user_id, clock)
        session.load()
        return session

    # --- persistence ---
    def load(self) -> list[VocabItem]:
        deck = self._store.load_deck(self.user_id)
        self._items = list(deck.items)
        self.total_reviews_completed = deck.total_reviews_completed
        self._log.debug("vocab_loaded", item_count=len(self._items))
        return self.items

    def save(self) -> None:
        self._store.save(
            self.user_id,
            self._items,
            total_reviews_completed=self.total_reviews_completed,
        )

    # --- lookups ---
    @property
    def items(self) -> list[VocabItem]:
        return list(self._items)

    def now(self) -> datetime:
        return self._clock()

    def _index_of(self, item_id: str) -> int:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        raise NotFoundError(item_id)

    def get(self, item_id: str) -> VocabItem:
        return self._items[self._index_of(item_id)]

    def find_by_word(self, word: str) -> VocabItem | None:
        key = word.strip().casefold()
        for item in self._items:
            if item.word.strip().casefold() == key:
                return item
        return None

    # --- lifecycle ---
    def add_word(
        self,
        word: str,
        translation: str = "",
        example: str = "",
        phonetic: str = "",
    ) -> VocabItem:
        """Add a word, or refresh the display text of an existing one.

        同じ綴り（大小文字無視）の単語が既にある場合は学習状況を保ったまま
        translation/example/phonetic だけを更新する。
        """

        cleaned = word.strip()
        if not cleaned:
            raise InvalidArgumentError("word must be a non-empty string")

        existing = self.find_by_word(cleaned)
        if existing is not None:
            updated = existing.model_copy(
                update={"translation": translation, "example": example, "phonetic": phonetic}
            )
            self._items[self._index_of(existing.id)] = updated
            self._log.info("vocab_item_refreshed", item_id=existing.id)
            return updated

        item = create_item(cleaned, translation, example, phonetic, now=self.now())
        self._items.append(item)
        self._log.info("vocab_item_added", item_id=item.id)
        return item

    def edit_word(
        self,
        item_id: str,
        *,
        translation: str | None = None,
        example: str | None = None,
        phonetic: str | None = None,
    ) -> VocabItem:
        """Change display text only; scheduling fields stay owned by the scheduler."""

        index = self._index_of(item_id)
        changes = {
            key: value
            for key, value in (
                ("translation", translation),
                ("example", example),
                ("phonetic", phonetic),
            )
            if value is not None
        }
        updated = self._items[index].model_copy(update=changes)
        self._items[index] = updated
        return updated

    def delete_word(self, item_id: str) -> VocabItem:
        removed = self._items.pop(self._index_of(item_id))
        self._log.info("vocab_item_deleted", item_id=item_id)
        return removed

    # --- reviews ---
    def review(self, item_id: str, quality: int) -> VocabItem:
        index = self._index_of(item_id)
        before = self._items[index]
        updated = update_schedule(before, quality, now=self.now())
        self._items[index] = updated
        self.reviews_completed += 1
        self.total_reviews_completed += 1
        self._log.info(
            "vocab_reviewed",
            item_id=item_id,
            quality=quality,
            repetitions=updated.repetitions,
            interval=updated.interval,
            ease_factor=round(updated.ease_factor, 4),
            next_review=updated.next_review.isoformat(),
        )
        return updated

    def review_with_button(self, item_id: str, button: ReviewButton | str) -> VocabItem:
        return self.review(item_id, map_button_to_quality(button))

    # --- queries ---
    def due_items(self) -> list[VocabItem]:
        return get_due_items(self._items, now=self.now())

    def due_today(self) -> list[VocabItem]:
        return get_due_today(self._items, now=self.now())

    def review_queue(self, limit: int | None = None) -> list[VocabItem]:
        """Due items, most overdue first, capped at `limit` (settings default)."""

        cap = settings.review_queue_limit if limit is None else limit
        if cap < 0:
            raise InvalidArgumentError(f"limit must be >= 0, got {cap}")
        queue = sorted(self.due_items(), key=lambda item: item.next_review)
        return queue[:cap]

    def stats(self) -> VocabStats:
        return compute_stats(self._items, now=self.now())

    def sorted_by_mastery(self) -> list[VocabItem]:
        return sort_by_mastery(self._items)
