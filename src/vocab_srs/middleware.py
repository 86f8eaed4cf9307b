from __future__ import annotations

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from structlog import contextvars as structlog_contextvars

from .logging import logger


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assign a request ID to each incoming request and expose it in headers.

    - Sets `request.state.request_id`
    - Adds `X-Request-ID` to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one structured `request_complete` log per call.

    request_id を ContextVar に束ねるため、リクエスト処理中に出たセッション層の
    ログ（vocab_reviewed など）にも同じ request_id が付与される。
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        start = time.time()
        request_id = getattr(request.state, "request_id", None) or uuid.uuid4().hex
        structlog_contextvars.bind_contextvars(request_id=request_id)
        status_code: int | None = None
        is_error = False
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception:
            is_error = True
            status_code = 500
            raise
        finally:
            latency_ms = (time.time() - start) * 1000
            log_method = logger.error if is_error else logger.info
            log_method(
                "request_complete",
                path=request.url.path,
                method=request.method,
                status_code=status_code,
                latency_ms=round(latency_ms, 2),
                is_error=is_error,
            )
            structlog_contextvars.unbind_contextvars("request_id")
