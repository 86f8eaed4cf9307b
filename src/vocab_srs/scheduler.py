"""SM-2 spaced-repetition scheduler.

Pure functions over `VocabItem` values. Nothing here reads storage, logs, or
keeps state between calls; time-dependent functions take an explicit `now`
and fall back to the system clock only when it is omitted.

- quality: 0..5 の自己評価（3 以上が想起成功）
- ease_factor は下限 1.3 に丸め、成功/失敗に関わらず毎回更新する
- 次回出題日時は `now` のタイムゾーンで暦日を加算する（時刻は保持）
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from .clock import ensure_aware
from .errors import InvalidArgumentError
from .id_factory import generate_vocab_id
from .models.vocab import (
    INITIAL_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MasteryBreakdown,
    MasteryInfo,
    MasteryLevel,
    ReviewButton,
    VocabItem,
    VocabStats,
)

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3

# repetitions の下限値 -> (level, label)。境界値は上位の段階に属する。
_MASTERY_TIERS: tuple[tuple[int, MasteryLevel, str], ...] = (
    (6, MasteryLevel.mastered, "Mastered"),
    (3, MasteryLevel.familiar, "Familiar"),
    (1, MasteryLevel.learning, "Learning"),
    (0, MasteryLevel.new, "New"),
)

# 0 と 2 は 4 ボタン UI からは到達しない。
_BUTTON_QUALITY: dict[ReviewButton, int] = {
    ReviewButton.again: 1,
    ReviewButton.hard: 3,
    ReviewButton.good: 4,
    ReviewButton.easy: 5,
}


def _validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidArgumentError(f"quality must be an integer in [0, 5], got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidArgumentError(f"quality must be in [0, 5], got {quality}")
    return quality


def _round_half_up(value: float) -> int:
    # Python の round() は偶数丸めなので、古典的な SM-2 の挙動に合わせて四捨五入する。
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """Apply the SM-2 ease-factor update for one review and clamp it at 1.3."""

    q = _validate_quality(quality)
    miss = MAX_QUALITY - q
    updated = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(MIN_EASE_FACTOR, updated)


def update_schedule(item: VocabItem, quality: int, now: datetime | None = None) -> VocabItem:
    """Return the item's new scheduling state after one review event.

    The input item is not modified. A failed recall (quality < 3) resets the
    streak and schedules the item for tomorrow; a successful one grows the
    interval 1 -> 6 -> round(interval * ease_factor). The ease factor is
    updated on every call.

    Raises:
        InvalidArgumentError: quality is not an int in [0, 5], or `now` is naive.
    """

    q = _validate_quality(quality)
    reviewed_at = ensure_aware(now)

    interval = item.interval
    repetitions = item.repetitions

    if q < PASSING_QUALITY:
        repetitions = 0
        interval = 1
    else:
        if repetitions == 0:
            interval = 1
        elif repetitions == 1:
            interval = 6
        else:
            interval = _round_half_up(interval * item.ease_factor)
        repetitions += 1

    ease_factor = next_ease_factor(item.ease_factor, q)

    return item.model_copy(
        update={
            "ease_factor": ease_factor,
            "interval": interval,
            "repetitions": repetitions,
            "last_review": reviewed_at,
            "next_review": reviewed_at + timedelta(days=interval),
        }
    )


def create_item(
    word: str,
    translation: str,
    example: str,
    phonetic: str,
    now: datetime | None = None,
) -> VocabItem:
    """Create a never-reviewed item that is due immediately."""

    created_at = ensure_aware(now)
    return VocabItem(
        id=generate_vocab_id(),
        word=word,
        translation=translation,
        example=example,
        phonetic=phonetic,
        ease_factor=INITIAL_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review=created_at,
        last_review=created_at,
        created_at=created_at,
    )


def end_of_day(now: datetime) -> datetime:
    """23:59:59.999 of `now`'s calendar day, in `now`'s timezone."""

    return now.replace(hour=23, minute=59, second=59, microsecond=999000)


def get_due_items(items: Iterable[VocabItem], now: datetime | None = None) -> list[VocabItem]:
    """Items whose next review instant has passed, in input order."""

    at = ensure_aware(now)
    return [item for item in items if item.next_review <= at]


def get_due_today(items: Iterable[VocabItem], now: datetime | None = None) -> list[VocabItem]:
    """Items due at any point up to the end of the current calendar day, in input order."""

    cutoff = end_of_day(ensure_aware(now))
    return [item for item in items if item.next_review <= cutoff]


def _mastery_for(repetitions: int) -> tuple[MasteryLevel, str]:
    for threshold, level, label in _MASTERY_TIERS:
        if repetitions >= threshold:
            return level, label
    raise InvalidArgumentError(f"repetitions must be >= 0, got {repetitions}")


def classify_mastery(item: VocabItem) -> MasteryInfo:
    level, label = _mastery_for(item.repetitions)
    return MasteryInfo(level=level, label=label)


def sort_by_mastery(items: Iterable[VocabItem]) -> list[VocabItem]:
    """More-practised, easier items first. Stable; the input is left untouched."""

    return sorted(items, key=lambda item: (-item.repetitions, -item.ease_factor))


def compute_stats(items: Sequence[VocabItem], now: datetime | None = None) -> VocabStats:
    at = ensure_aware(now)
    counts = {level: 0 for level in MasteryLevel}
    for item in items:
        level, _ = _mastery_for(item.repetitions)
        counts[level] += 1
    return VocabStats(
        total=len(items),
        due_today=len(get_due_today(items, at)),
        overdue=sum(1 for item in items if item.next_review < at),
        by_mastery=MasteryBreakdown(**{level.value: count for level, count in counts.items()}),
    )


def map_button_to_quality(button: ReviewButton | str) -> int:
    """Translate a review-screen button into an SM-2 quality.

    Raises:
        InvalidArgumentError: the button is not one of again/hard/good/easy.
    """

    try:
        resolved = ReviewButton(button)
    except ValueError as exc:
        raise InvalidArgumentError(f"unknown review button: {button!r}") from exc
    return _BUTTON_QUALITY[resolved]


def interval_text(interval: int) -> str:
    """Human readable rendering of an interval in days ("New", "3 days", "2 weeks")."""

    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 0:
        raise InvalidArgumentError(f"interval must be a non-negative integer, got {interval!r}")
    if interval == 0:
        return "New"
    if interval == 1:
        return "1 day"
    if interval < 7:
        return f"{interval} days"
    if interval < 30:
        weeks = interval // 7
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    if interval < 365:
        months = interval // 30
        return "1 month" if months == 1 else f"{months} months"
    years = interval // 365
    return "1 year" if years == 1 else f"{years} years"


__all__ = [
    "classify_mastery",
    "compute_stats",
    "create_item",
    "end_of_day",
    "get_due_items",
    "get_due_today",
    "interval_text",
    "map_button_to_quality",
    "next_ease_factor",
    "sort_by_mastery",
    "update_schedule",
]
