from typing import Annotated, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.types import NoDecode


DEFAULT_DB_PATH = ".data/vocab.sqlite3"
DEFAULT_COLLECTION = "vocab_snapshots"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - store_backend: スナップショットの保存先（sqlite/firestore/memory）
    - timezone: 「今日」の境界を決めるタイムゾーン（未設定ならシステムのローカル時刻）
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    store_backend: Literal["sqlite", "firestore", "memory"] = Field(
        default="sqlite",
        description="Snapshot storage backend / 単語スナップショットの保存先",
    )
    vocab_db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="Path to SQLite database for vocabulary snapshots / SQLite DBパス",
    )
    firestore_project_id: str | None = Field(
        default=None,
        description="Firestore project ID / Firestore のプロジェクトID",
        validation_alias=AliasChoices("firestore_project_id", "google_cloud_project"),
    )
    firestore_emulator_host: str | None = Field(
        default=None,
        description="Firestore emulator host:port / Firestore エミュレータの接続先",
    )
    firestore_collection: str = Field(
        default=DEFAULT_COLLECTION,
        description="Firestore collection holding one snapshot document per user",
    )
    timezone: str | None = Field(
        default=None,
        description=(
            "IANA timezone used for 'now' and end-of-day queries. Unset means system local / "
            "due 判定に使うタイムゾーン（未設定ならシステムのローカル時刻）"
        ),
    )
    default_user_id: str = Field(
        default="default",
        description="User ID used when a request does not name one / 既定ユーザーID",
    )
    review_queue_limit: int = Field(
        default=20,
        ge=1,
        description="Maximum number of items returned for a review queue / 復習キューの最大件数",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level / ログレベル",
    )
    allowed_cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description=(
            "Comma separated CORS origins / CORS で許可するオリジンのカンマ区切り一覧"
        ),
        validation_alias=AliasChoices("allowed_cors_origins", "cors_allowed_origins"),
    )
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN (enable if set)"
    )

    # --- Strict mode ---
    strict_mode: bool = Field(
        default=False,
        description="Fail fast on missing/invalid configuration",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("timezone", mode="after")
    @classmethod
    def _validate_timezone(cls, value: str | None) -> str | None:
        """Reject unknown IANA names at load time instead of on the first review.

        空文字は未設定として扱い、システムのローカル時刻へフォールバックする。
        """

        name = (value or "").strip()
        if not name:
            return None
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"TIMEZONE must be a valid IANA timezone name, got {name!r}") from exc
        return name

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = (value or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got {value!r}")
        return level

    @field_validator("allowed_cors_origins", mode="before")
    @classmethod
    def _normalise_allowed_cors_origins(
        cls, raw_origins: object
    ) -> tuple[str, ...] | object:  # pragma: no cover - pydantic handles typing
        """Convert environment input into a deduplicated tuple of origins.

        `.env` で管理するときに空白や重複が混ざりやすいため、
        FastAPI へ渡す前にトリムと重複排除を行う。
        """

        if raw_origins is None:
            candidates: list[str] = []
        elif isinstance(raw_origins, str):
            candidates = raw_origins.split(",")
        else:
            try:
                candidates = list(raw_origins)
            except TypeError:
                return raw_origins

        normalised: list[str] = []
        seen: set[str] = set()
        for candidate in candidates:
            if not isinstance(candidate, str):
                continue
            trimmed = candidate.strip()
            if not trimmed or trimmed in seen:
                continue
            seen.add(trimmed)
            normalised.append(trimmed)

        return tuple(normalised)

    @model_validator(mode="after")
    def _require_firestore_project_in_strict_mode(self) -> "Settings":
        """Firestore を選んだのに接続先が決まらない構成は strict mode で起動させない。"""

        if (
            self.strict_mode
            and self.store_backend == "firestore"
            and not (self.firestore_project_id or "").strip()
        ):
            raise ValueError(
                "FIRESTORE_PROJECT_ID must be set when STORE_BACKEND=firestore and STRICT_MODE=true"
            )
        return self


settings = Settings()
