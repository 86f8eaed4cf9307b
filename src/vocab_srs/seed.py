"""サンプル単語をユーザーの単語帳へ投入するユーティリティ。"""

from __future__ import annotations

import argparse

from .clock import Clock
from .config import settings
from .errors import InvalidArgumentError
from .logging import configure_logging, logger
from .session import VocabularySession, user_lock
from .store import SQLiteVocabStore, VocabStore, create_store

SAMPLE_VOCABULARY: tuple[dict[str, str], ...] = (
    {
        "word": "Serendipity",
        "translation": "The occurrence of events by chance in a happy or beneficial way",
        "example": "Finding that book was pure serendipity - it was exactly what I needed.",
        "phonetic": "/ˌserənˈdɪpɪti/",
    },
    {
        "word": "Eloquent",
        "translation": "Fluent or persuasive in speaking or writing",
        "example": "She gave an eloquent speech that moved the entire audience.",
        "phonetic": "/ˈeləkwənt/",
    },
    {
        "word": "Inevitable",
        "translation": "Certain to happen; unavoidable",
        "example": "Change is inevitable, so we must learn to adapt.",
        "phonetic": "/ɪnˈevɪtəbl/",
    },
    {
        "word": "Perseverance",
        "translation": "Persistence in doing something despite difficulty or delay",
        "example": "Success requires hard work and perseverance.",
        "phonetic": "/ˌpɜːrsəˈvɪrəns/",
    },
    {
        "word": "Benevolent",
        "translation": "Well-meaning and kindly",
        "example": "The benevolent king was loved by all his subjects.",
        "phonetic": "/bəˈnevələnt/",
    },
    {
        "word": "Diligent",
        "translation": "Having or showing care and conscientiousness",
        "example": "She is a diligent student who always completes her homework.",
        "phonetic": "/ˈdɪlɪdʒənt/",
    },
    {
        "word": "Ambiguous",
        "translation": "Open to more than one interpretation; unclear",
        "example": "The instructions were ambiguous and caused confusion.",
        "phonetic": "/æmˈbɪɡjuəs/",
    },
    {
        "word": "Ephemeral",
        "translation": "Lasting for a very short time",
        "example": "Fame can be ephemeral, so enjoy it while it lasts.",
        "phonetic": "/ɪˈfemərəl/",
    },
    {
        "word": "Resilient",
        "translation": "Able to withstand or recover quickly from difficult conditions",
        "example": "Children are remarkably resilient and adapt quickly to change.",
        "phonetic": "/rɪˈzɪliənt/",
    },
    {
        "word": "Profound",
        "translation": "Very great or intense; having deep insight",
        "example": "His words had a profound impact on my life.",
        "phonetic": "/prəˈfaʊnd/",
    },
)

DEFAULT_SEED_COUNT = 5


def seed_sample_vocabulary(
    store: VocabStore,
    user_id: str,
    *,
    count: int = DEFAULT_SEED_COUNT,
    force: bool = False,
    clock: Clock | None = None,
) -> int:
    """サンプル単語の先頭 `count` 件を投入し、新規に追加した件数を返す。

    count が一覧の件数を超える場合は全件を投入する。負の値は InvalidArgumentError。
    既に単語が登録されているユーザーは force=True のときだけ対象にする。
    その場合も既存の単語は学習状況を保ったまま表示テキストだけ更新される。
    """

    if count < 0:
        raise InvalidArgumentError(f"count must be >= 0, got {count}")
    entries = SAMPLE_VOCABULARY[: min(count, len(SAMPLE_VOCABULARY))]

    with user_lock(user_id):
        session = VocabularySession.open(store, user_id, clock)
        if session.items and not force:
            logger.info("seed_skipped", user_id=user_id, existing=len(session.items))
            return 0
        before = len(session.items)
        for entry in entries:
            session.add_word(**entry)
        session.save()
        added = len(session.items) - before
    logger.info("seed_completed", user_id=user_id, added=added)
    return added


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--user-id",
        default=settings.default_user_id,
        help=f"投入先のユーザーID（既定: {settings.default_user_id}）",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite DB のパス。指定時は STORE_BACKEND に関わらず SQLite へ投入する。",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_SEED_COUNT,
        help=f"投入するサンプル単語の件数（既定: {DEFAULT_SEED_COUNT}、最大: {len(SAMPLE_VOCABULARY)}）",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="既存の単語があっても投入する場合に指定。",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    configure_logging()
    store = SQLiteVocabStore(args.db_path) if args.db_path else create_store(settings)
    added = seed_sample_vocabulary(store, args.user_id, count=args.count, force=args.force)
    print(f"Seeded {added} vocabulary items for user {args.user_id!r}.")


if __name__ == "__main__":
    main()
