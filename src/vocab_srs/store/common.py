from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol

from pydantic import ValidationError

from ..errors import InvalidArgumentError
from ..models.vocab import VocabDeck, VocabItem

SNAPSHOT_VERSION = 1


class VocabStore(Protocol):
    """ユーザー単位で単語リスト全体を読み書きする永続化コラボレーター。

    save は常にリスト全体（と累計採点回数）を 1 回の書き込みで置き換える。部分更新は行わない。
    """

    def load(self, user_id: str) -> list[VocabItem]: ...

    def load_deck(self, user_id: str) -> VocabDeck: ...

    def save(
        self,
        user_id: str,
        items: Iterable[VocabItem],
        *,
        total_reviews_completed: int = 0,
    ) -> None: ...

    def delete(self, user_id: str) -> None: ...


def item_to_record(item: VocabItem) -> dict[str, Any]:
    """Flat JSON-compatible record with camelCase keys and ISO-8601 timestamps."""

    return item.model_dump(mode="json", by_alias=True)


def item_from_record(record: Mapping[str, Any]) -> VocabItem:
    """Rebuild an item from a stored record.

    camelCase / snake_case のどちらのキーでも受け付ける。タイムスタンプは
    オフセット付き ISO 文字列から aware datetime に復元される。
    """

    try:
        return VocabItem.model_validate(dict(record))
    except ValidationError as exc:
        raise InvalidArgumentError(f"invalid vocabulary record: {exc.errors(include_url=False)}") from exc


def build_snapshot(
    items: Iterable[VocabItem],
    *,
    total_reviews_completed: int = 0,
    now: datetime | None = None,
) -> dict[str, Any]:
    records = [item_to_record(item) for item in items]
    _ensure_unique_ids(record["id"] for record in records)
    return {
        "version": SNAPSHOT_VERSION,
        "items": records,
        "totalReviewsCompleted": _validate_review_count(total_reviews_completed),
        "updatedAt": (now or datetime.now(UTC)).isoformat(),
    }


def deck_from_snapshot(snapshot: Mapping[str, Any] | None) -> VocabDeck:
    """Rebuild a user's deck, enforcing the same invariants as `build_snapshot`.

    totalReviewsCompleted を持たない古いスナップショットは 0 として読む。
    """

    if not snapshot:
        return VocabDeck()
    records = snapshot.get("items") or []
    if not isinstance(records, list):
        raise InvalidArgumentError("snapshot 'items' must be a list")
    items = [item_from_record(record) for record in records]
    _ensure_unique_ids(item.id for item in items)
    total = _validate_review_count(snapshot.get("totalReviewsCompleted", 0))
    return VocabDeck(items=items, total_reviews_completed=total)


def dump_snapshot(items: Iterable[VocabItem], *, total_reviews_completed: int = 0) -> str:
    snapshot = build_snapshot(items, total_reviews_completed=total_reviews_completed)
    return json.dumps(snapshot, ensure_ascii=False)


def load_deck_snapshot(raw: str | None) -> VocabDeck:
    if not raw:
        return VocabDeck()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidArgumentError(f"snapshot is not valid JSON: {exc.msg}") from exc
    if not isinstance(parsed, Mapping):
        raise InvalidArgumentError("snapshot must be a JSON object")
    return deck_from_snapshot(parsed)


def load_snapshot(raw: str | None) -> list[VocabItem]:
    return load_deck_snapshot(raw).items


def _validate_review_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"totalReviewsCompleted must be a non-negative integer, got {value!r}")
    return value


def _ensure_unique_ids(ids: Iterable[str]) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            raise InvalidArgumentError(f"duplicate vocabulary item id: {item_id}")
        seen.add(item_id)
