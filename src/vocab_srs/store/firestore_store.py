from __future__ import annotations

from collections.abc import Iterable

from google.cloud import firestore

from ..logging import logger
from ..models.vocab import VocabDeck, VocabItem
from .common import build_snapshot, deck_from_snapshot


class FirestoreVocabStore:
    """Firestore にユーザー毎の単語スナップショットを保存するストア。

    ドキュメント ID は user_id。items 配列全体と累計採点回数を 1 回の set() で
    書き込むため、読み手は常に保存済みの完全なリストだけを観測する。
    """

    def __init__(self, client: firestore.Client, collection: str = "vocab_snapshots") -> None:
        self._client = client
        self._snapshots = client.collection(collection)

    def load(self, user_id: str) -> list[VocabItem]:
        return self.load_deck(user_id).items

    def load_deck(self, user_id: str) -> VocabDeck:
        doc = self._snapshots.document(user_id).get()
        if not doc.exists:
            return VocabDeck()
        return deck_from_snapshot(doc.to_dict())

    def save(
        self,
        user_id: str,
        items: Iterable[VocabItem],
        *,
        total_reviews_completed: int = 0,
    ) -> None:
        snapshot = build_snapshot(items, total_reviews_completed=total_reviews_completed)
        self._snapshots.document(user_id).set(snapshot)
        logger.info(
            "vocab_snapshot_saved",
            backend="firestore",
            user_id=user_id,
            item_count=len(snapshot["items"]),
        )

    def delete(self, user_id: str) -> None:
        self._snapshots.document(user_id).delete()
