"""引擎异常 -> HTTP 错误响应映射

响应体统一为 {"error": {"code", "message"}}；
请求结构错误（422）保持 FastAPI 默认行为。
"""

import structlog
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse
from workhub.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    TaskEngineError,
    ValidationError,
)

log = structlog.get_logger()

_STATUS_CODES: dict[type[TaskEngineError], int] = {
    ValidationError: 400,
    InvalidTransitionError: 400,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidStateError: 409,
}


class UnauthenticatedError(Exception):
    """调用者身份缺失或非法"""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def handle_engine_error(request: Request, exc: TaskEngineError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 400)
    log.info(
        "engine_error",
        code=exc.code,
        status_code=status_code,
        retryable=exc.retryable,
    )
    return error_response(status_code, exc.code, exc.message)


async def handle_unauthenticated(
    request: Request, exc: UnauthenticatedError
) -> JSONResponse:
    return error_response(401, "UNAUTHENTICATED", exc.message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskEngineError, handle_engine_error)
    app.add_exception_handler(UnauthenticatedError, handle_unauthenticated)
