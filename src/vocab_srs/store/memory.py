from __future__ import annotations

from collections.abc import Iterable
from threading import Lock
from typing import Any

from ..models.vocab import VocabDeck, VocabItem
from .common import build_snapshot, deck_from_snapshot


class InMemoryVocabStore:
    """プロセス内 dict にスナップショットを保持するストア（テスト・memory バックエンド用）。

    他のバックエンドと同じくレコード形式で保持し、読み出し時に復元する。
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, dict[str, Any]] = {}
        self._lock = Lock()

    def load(self, user_id: str) -> list[VocabItem]:
        return self.load_deck(user_id).items

    def load_deck(self, user_id: str) -> VocabDeck:
        with self._lock:
            snapshot = self._snapshots.get(user_id)
        return deck_from_snapshot(snapshot)

    def save(
        self,
        user_id: str,
        items: Iterable[VocabItem],
        *,
        total_reviews_completed: int = 0,
    ) -> None:
        snapshot = build_snapshot(items, total_reviews_completed=total_reviews_completed)
        with self._lock:
            self._snapshots[user_id] = snapshot

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._snapshots.pop(user_id, None)
