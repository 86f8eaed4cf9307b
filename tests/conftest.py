"""Pytest configuration: import path, isolated settings and shared fixtures."""

import os
import sys
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
for path in (PROJECT_ROOT, PROJECT_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# テストでは SQLite ファイルを作らないよう memory バックエンドを既定にする。
# 個別のテストは monkeypatch で上書きできる。
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "test")

from vocab_srs.models.vocab import VocabItem  # noqa: E402

FIXED_NOW = datetime(2024, 3, 10, 9, 30, tzinfo=UTC)


class FrozenClock:
    """呼び出し毎に同じ時刻を返す時計。`advance` で任意に進められる。"""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


@pytest.fixture()
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture()
def frozen_clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def make_item() -> Callable[..., VocabItem]:
    """Build a VocabItem with sensible defaults; keyword arguments override fields."""

    counter = {"n": 0}

    def _make(**overrides: object) -> VocabItem:
        counter["n"] += 1
        fields: dict[str, object] = {
            "id": f"vocab_test_{counter['n']}",
            "word": f"word{counter['n']}",
            "translation": "translation",
            "example": "example sentence",
            "phonetic": "/ˈwɜːd/",
            "ease_factor": 2.5,
            "interval": 0,
            "repetitions": 0,
            "next_review": FIXED_NOW,
            "last_review": FIXED_NOW,
            "created_at": FIXED_NOW,
        }
        fields.update(overrides)
        return VocabItem(**fields)

    return _make
