from .vocab import (
    INITIAL_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MasteryBreakdown,
    MasteryInfo,
    MasteryLevel,
    ReviewButton,
    VocabDeck,
    VocabItem,
    VocabStats,
)

__all__ = [
    "INITIAL_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "MasteryBreakdown",
    "MasteryInfo",
    "MasteryLevel",
    "ReviewButton",
    "VocabDeck",
    "VocabItem",
    "VocabStats",
]
