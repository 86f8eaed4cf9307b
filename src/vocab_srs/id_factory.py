"""ID 生成ユーティリティ。

単語アイテムの ID は時刻成分（エポックミリ秒）とランダム成分を組み合わせ、
同一ミリ秒内に複数追加しても衝突しないようにする。
"""

from __future__ import annotations

import secrets
import time


def generate_vocab_id() -> str:
    """単語アイテムの新規 ID を生成する。

    形式は `vocab_{epoch_ms}_{random}`。時刻部分で作成順に並び、
    48bit のランダム部分で同時刻の衝突を避ける。
    """

    return f"vocab_{time.time_ns() // 1_000_000}_{secrets.token_hex(6)}"
