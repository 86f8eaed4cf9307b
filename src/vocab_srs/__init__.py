"""SM-2 spaced-repetition scheduling for vocabulary review."""

from .errors import InvalidArgumentError, NotFoundError, VocabSRSError
from .models import (
    MasteryBreakdown,
    MasteryInfo,
    MasteryLevel,
    ReviewButton,
    VocabDeck,
    VocabItem,
    VocabStats,
)
from .scheduler import (
    classify_mastery,
    compute_stats,
    create_item,
    get_due_items,
    get_due_today,
    interval_text,
    map_button_to_quality,
    sort_by_mastery,
    update_schedule,
)

__all__ = [
    "InvalidArgumentError",
    "MasteryBreakdown",
    "MasteryInfo",
    "MasteryLevel",
    "NotFoundError",
    "ReviewButton",
    "VocabDeck",
    "VocabItem",
    "VocabSRSError",
    "VocabStats",
    "classify_mastery",
    "compute_stats",
    "create_item",
    "get_due_items",
    "get_due_today",
    "interval_text",
    "map_button_to_quality",
    "sort_by_mastery",
    "update_schedule",
]
