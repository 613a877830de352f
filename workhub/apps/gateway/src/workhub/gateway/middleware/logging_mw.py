"""LoggingMiddleware -- 请求级日志上下文

每个请求生成 ULID request_id（经 X-Request-ID 响应头返回），
并把调用者身份头绑定到 structlog contextvars，便于按操作者检索日志。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

# 身份头 -> 日志字段
_ACTOR_HEADERS = {
    "X-Actor-Id": "actor_id",
    "X-Actor-Role": "actor_role",
}


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        context = {
            field: request.headers[header]
            for header, field in _ACTOR_HEADERS.items()
            if header in request.headers
        }

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            **context,
        )
        log = structlog.get_logger()

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        # 服务端错误提升为 warning，客户端错误只记 info
        emit = log.awarning if response.status_code >= 500 else log.ainfo
        await emit(
            "request_handled",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers["X-Request-ID"] = request_id
        return response
