from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from ..logging import logger
from ..models.vocab import VocabDeck, VocabItem
from .common import dump_snapshot, load_deck_snapshot


class SQLiteVocabStore:
    """SQLite-backed snapshot store, one row per user.

    - data: スナップショット JSON（items 全体と累計採点回数）
    - save は upsert 1 文で行い、途中状態が読まれないようにする
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, timeout=10.0, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL;")
            yield conn
        finally:
            conn.close()

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS vocab_snapshots (
                        user_id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        item_count INTEGER NOT NULL DEFAULT 0,
                        updated_at TEXT NOT NULL
                    );
                    """
                )

    # --- public API ---
    def load(self, user_id: str) -> list[VocabItem]:
        return self.load_deck(user_id).items

    def load_deck(self, user_id: str) -> VocabDeck:
        with self._connect() as conn:
            cur = conn.execute(
                "SELECT data FROM vocab_snapshots WHERE user_id = ?;",
                (user_id,),
            )
            row = cur.fetchone()
        if row is None:
            return VocabDeck()
        return load_deck_snapshot(row["data"])

    def save(
        self,
        user_id: str,
        items: Iterable[VocabItem],
        *,
        total_reviews_completed: int = 0,
    ) -> None:
        materialised = list(items)
        data = dump_snapshot(materialised, total_reviews_completed=total_reviews_completed)
        now = datetime.now(UTC).isoformat()
        with self._connect() as conn:
            with conn:
                conn.execute(
                    """
                    INSERT INTO vocab_snapshots (user_id, data, item_count, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        data = excluded.data,
                        item_count = excluded.item_count,
                        updated_at = excluded.updated_at;
                    """,
                    (user_id, data, len(materialised), now),
                )
        logger.info("vocab_snapshot_saved", backend="sqlite", user_id=user_id, item_count=len(materialised))

    def delete(self, user_id: str) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute("DELETE FROM vocab_snapshots WHERE user_id = ?;", (user_id,))

    def list_users(self) -> list[tuple[str, int, str]]:
        """保存済みユーザーの (user_id, item_count, updated_at) を返す。"""

        with self._connect() as conn:
            cur = conn.execute(
                "SELECT user_id, item_count, updated_at FROM vocab_snapshots ORDER BY user_id ASC;"
            )
            return [
                (str(row["user_id"]), int(row["item_count"]), str(row["updated_at"]))
                for row in cur.fetchall()
            ]
