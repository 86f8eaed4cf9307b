"""Logging utilities.

構造化ログの初期化をまとめて提供する。スケジューラ本体は純粋関数のため
ログを出さず、セッション層・ストア層・HTTP 層がここで設定した
structlog ロガーを通じてイベントを出力する。
"""

from typing import Any

import logging
import structlog
from structlog import contextvars as structlog_contextvars
from .config import settings


_USER_CONTEXT_KEYS = ("user_id", "request_id")


def _order_context_keys(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Move user/request identifiers to the front of the rendered payload.

    同じユーザーのレビュー操作をログ上で追いやすくするため、`user_id` と
    `request_id` を event の直後に並べる。
    """

    ordered: dict[str, Any] = {}
    if "event" in event_dict:
        ordered["event"] = event_dict.pop("event")
    for key in _USER_CONTEXT_KEYS:
        if key in event_dict:
            ordered[key] = event_dict.pop(key)
    ordered.update(event_dict)
    return ordered


def configure_logging() -> None:
    """Configure structlog for application-wide logging.

    アプリ全体のロギング設定を行う。標準 logging を設定値のレベルで初期化し、
    structlog で ISO タイムスタンプと JSON 形式の出力を有効化する。
    """
    # stdlib 側の出力にプレフィックスを付けないため、フォーマットはメッセージのみ。
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog_contextvars.merge_contextvars,
            _order_context_keys,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    if settings.sentry_dsn:
        try:
            import sentry_sdk  # type: ignore
            from sentry_sdk.integrations.logging import LoggingIntegration  # type: ignore
        except ImportError:
            logger.warning("sentry_unavailable", reason="sentry_sdk not installed")
            return
        sentry_logging = LoggingIntegration(
            level=logging.INFO,
            event_level=logging.ERROR,
        )
        sentry_sdk.init(dsn=settings.sentry_dsn, integrations=[sentry_logging])


logger = structlog.get_logger()
