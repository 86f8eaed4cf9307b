import json
import sqlite3
from datetime import timedelta
from pathlib import Path

import pytest

from vocab_srs import InvalidArgumentError, update_schedule
from vocab_srs.store import SQLiteVocabStore, item_to_record


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteVocabStore:
    return SQLiteVocabStore(str(tmp_path / "nested" / "vocab.sqlite3"))


def test_creates_parent_directory_and_table(tmp_path: Path):
    db_path = tmp_path / "a" / "b" / "vocab.sqlite3"
    SQLiteVocabStore(str(db_path))

    assert db_path.exists()
    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "vocab_snapshots" in tables


def test_load_unknown_user_returns_empty_list(store):
    assert store.load("nobody") == []


def test_save_then_load_restores_items(store, make_item, fixed_now):
    items = [make_item(), update_schedule(make_item(repetitions=2, interval=6), 4, now=fixed_now)]

    store.save("alice", items)

    assert store.load("alice") == items


def test_save_replaces_whole_snapshot(store, make_item):
    first, second = make_item(), make_item()
    store.save("alice", [first, second])
    store.save("alice", [second])

    assert [item.id for item in store.load("alice")] == [second.id]
    assert store.list_users()[0][:2] == ("alice", 1)


def test_users_are_stored_separately(store, make_item):
    store.save("alice", [make_item()])
    store.save("bob", [make_item(), make_item()])

    assert len(store.load("alice")) == 1
    assert [(user, count) for user, count, _ in store.list_users()] == [("alice", 1), ("bob", 2)]


def test_delete_removes_user_snapshot(store, make_item):
    store.save("alice", [make_item()])
    store.delete("alice")
    assert store.load("alice") == []


def test_snapshot_row_is_camel_case_json(store, make_item, fixed_now):
    item = make_item(next_review=fixed_now + timedelta(days=6))
    store.save("alice", [item])

    with sqlite3.connect(store.db_path) as conn:
        (raw,) = conn.execute("SELECT data FROM vocab_snapshots WHERE user_id = 'alice'").fetchone()
    payload = json.loads(raw)

    assert payload["version"] == 1
    assert payload["items"][0]["id"] == item.id
    assert "nextReview" in payload["items"][0]
    assert "updatedAt" in payload


def test_duplicate_ids_are_not_written(store, make_item):
    item = make_item()
    store.save("alice", [item])

    with pytest.raises(InvalidArgumentError):
        store.save("alice", [item, item])

    assert store.load("alice") == [item]


def test_corrupted_row_raises_invalid_argument(store):
    with sqlite3.connect(store.db_path) as conn:
        conn.execute(
            "INSERT INTO vocab_snapshots (user_id, data, item_count, updated_at) VALUES (?, ?, ?, ?)",
            ("alice", "{broken", 0, "2024-03-10T00:00:00+00:00"),
        )

    with pytest.raises(InvalidArgumentError):
        store.load("alice")


def test_total_reviews_completed_round_trips(store, make_item):
    items = [make_item()]
    store.save("alice", items, total_reviews_completed=7)

    deck = store.load_deck("alice")

    assert deck.items == items
    assert deck.total_reviews_completed == 7
    assert store.load_deck("nobody").total_reviews_completed == 0


def test_row_with_duplicate_ids_raises_invalid_argument(store, make_item):
    record = item_to_record(make_item())
    with sqlite3.connect(store.db_path) as conn:
        conn.execute(
            "INSERT INTO vocab_snapshots (user_id, data, item_count, updated_at) VALUES (?, ?, ?, ?)",
            ("alice", json.dumps({"version": 1, "items": [record, record]}), 2, "2024-03-10T00:00:00+00:00"),
        )

    with pytest.raises(InvalidArgumentError, match="duplicate"):
        store.load("alice")
