from __future__ import annotations

import os
from functools import lru_cache

from google.cloud import firestore

from ..config import Settings, settings
from ..logging import logger
from .common import (
    VocabStore,
    dump_snapshot,
    item_from_record,
    item_to_record,
    load_deck_snapshot,
    load_snapshot,
)
from .firestore_store import FirestoreVocabStore
from .memory import InMemoryVocabStore
from .sqlite_store import SQLiteVocabStore

_DEFAULT_EMULATOR_HOST = "127.0.0.1:8080"


def _normalize_emulator_host(raw_host: str | None) -> str | None:
    """FIRESTORE_EMULATOR_HOST で受け取ったホスト文字列を正規化する。

    スキームなしの `localhost:8080` でもクライアントオプションに渡せるよう、
    http:// を自動付与する。空文字や None は未設定として扱う。
    """

    host = (raw_host or "").strip()
    if not host:
        return None
    if host.startswith(("http://", "https://")):
        return host
    return f"http://{host}"


def _build_firestore_client(config: Settings) -> firestore.Client:
    """Firestore クライアントを構築する。

    - FIRESTORE_EMULATOR_HOST が指定されていればエミュレータ向けのエンドポイントを使用。
    - 開発モードではホスト未指定でも 127.0.0.1:8080 のエミュレータを優先。
    - それ以外は Cloud Firestore へ接続する。
    """

    environment_name = (config.environment or "").strip().lower()
    emulator_host = _normalize_emulator_host(
        config.firestore_emulator_host
        or os.environ.get("FIRESTORE_EMULATOR_HOST")
        or (_DEFAULT_EMULATOR_HOST if environment_name != "production" else None)
    )
    if emulator_host:
        # google-cloud-firestore は FIRESTORE_EMULATOR_HOST を検知して匿名認証へ切り替える。
        os.environ.setdefault(
            "FIRESTORE_EMULATOR_HOST",
            emulator_host.replace("http://", "").replace("https://", ""),
        )
        return firestore.Client(
            project=config.firestore_project_id,
            client_options={"api_endpoint": emulator_host},
        )
    return firestore.Client(project=config.firestore_project_id)


def create_store(config: Settings | None = None) -> VocabStore:
    """設定に応じたスナップショットストアを生成する。"""

    cfg = config or settings
    if cfg.store_backend == "memory":
        store: VocabStore = InMemoryVocabStore()
    elif cfg.store_backend == "firestore":
        store = FirestoreVocabStore(
            _build_firestore_client(cfg),
            collection=cfg.firestore_collection,
        )
    else:
        store = SQLiteVocabStore(db_path=cfg.vocab_db_path)
    logger.info("vocab_store_created", backend=cfg.store_backend)
    return store


@lru_cache(maxsize=1)
def get_store() -> VocabStore:
    """アプリ全体で共有するストア。FastAPI の依存性として差し替え可能。"""

    return create_store(settings)


__all__ = [
    "FirestoreVocabStore",
    "InMemoryVocabStore",
    "SQLiteVocabStore",
    "VocabStore",
    "create_store",
    "dump_snapshot",
    "get_store",
    "item_from_record",
    "item_to_record",
    "load_deck_snapshot",
    "load_snapshot",
]
