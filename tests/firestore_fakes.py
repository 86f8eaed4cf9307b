"""Firestore をテストで再現するための簡易フェイク実装。"""

from __future__ import annotations

from typing import Any

from google.cloud import firestore


class FakeDocumentSnapshot:
    def __init__(self, collection: str, doc_id: str, data: dict[str, Any] | None) -> None:
        self._collection = collection
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> dict[str, Any] | None:
        return None if self._data is None else dict(self._data)


class FakeDocumentReference:
    def __init__(self, client: "FakeFirestoreClient", collection: str, doc_id: str) -> None:
        self._client = client
        self._collection = collection
        self.id = doc_id

    def set(self, data: dict[str, Any], merge: bool = False) -> None:
        bucket = self._client._data.setdefault(self._collection, {})
        self._client.write_count += 1
        if merge and self.id in bucket:
            bucket[self.id].update(data)
        else:
            bucket[self.id] = dict(data)

    def get(self) -> FakeDocumentSnapshot:
        bucket = self._client._data.setdefault(self._collection, {})
        payload = dict(bucket[self.id]) if self.id in bucket else None
        return FakeDocumentSnapshot(self._collection, self.id, payload)

    def delete(self) -> None:
        bucket = self._client._data.setdefault(self._collection, {})
        bucket.pop(self.id, None)


class FakeCollectionReference:
    def __init__(self, client: "FakeFirestoreClient", name: str) -> None:
        self._client = client
        self._name = name

    def document(self, doc_id: str) -> FakeDocumentReference:
        return FakeDocumentReference(self._client, self._name, doc_id)

    def stream(self):  # pragma: no cover - simple iterator
        bucket = self._client._data.setdefault(self._name, {})
        for doc_id, data in list(bucket.items()):
            yield FakeDocumentSnapshot(self._name, doc_id, dict(data))


def use_fake_firestore_client(monkeypatch, client: "FakeFirestoreClient | None" = None) -> "FakeFirestoreClient":
    """google.cloud.firestore.Client をフェイクに差し替え、同一インスタンスを返す。"""

    instance = client or FakeFirestoreClient()
    monkeypatch.setattr(firestore, "Client", lambda *args, **kwargs: instance)
    return instance


class FakeFirestoreClient:
    """google.cloud.firestore.Client 互換の最小フェイク。

    - collection/document の set/get/delete だけを実装する。
    - _data は collection ごとに {doc_id: payload} を保持し、テスト毎に新規インスタンスで分離する。
    - write_count で set() の呼び出し回数を数え、1 回の保存が 1 回の書き込みであることを検証できる。
    """

    def __init__(self) -> None:
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self.write_count = 0

    def collection(self, name: str) -> FakeCollectionReference:
        return FakeCollectionReference(self, name)
