from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from .config import settings
from .errors import InvalidArgumentError, NotFoundError, VocabSRSError
from .logging import configure_logging, logger
from .middleware import AccessLogMiddleware, RequestIDMiddleware
from .routers import health, vocab


def _error_response(status_code: int, exc: VocabSRSError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"message": exc.message, "reason_code": exc.reason_code}},
    )


async def _handle_invalid_argument(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    logger.warning("invalid_argument", path=request.url.path, error=exc.message)
    return _error_response(400, exc)


async def _handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning("item_not_found", path=request.url.path, item_id=exc.item_id)
    return _error_response(404, exc)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    configure_logging()
    app = FastAPI(title="Vocab SRS API", version="0.1.0")

    configured_origins = list(settings.allowed_cors_origins)
    allow_credentials = bool(configured_origins)
    if not configured_origins:
        configured_origins = ["*"]

    # ワイルドカード許可時は資格情報を無効化する。
    app.add_middleware(
        CORSMiddleware,
        allow_origins=configured_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Starlette では後から追加したミドルウェアが外側で実行される。
    # RequestID で採番した ID を AccessLog が ContextVar に束ねる。
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(InvalidArgumentError, _handle_invalid_argument)  # type: ignore[arg-type]
    app.add_exception_handler(NotFoundError, _handle_not_found)  # type: ignore[arg-type]

    app.include_router(health.router)
    app.include_router(vocab.router, prefix="/api/vocab")

    logger.info("app_created", environment=settings.environment, store_backend=settings.store_backend)
    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("vocab_srs.main:create_app", factory=True, host="0.0.0.0", port=8000)
