"""领域异常 -> HTTP 响应映射

每类失败对应唯一的 HTTP 状态码，响应体统一为
{"error": {"code": ..., "message": ...}}。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskflow.core.exceptions import (
    DomainError,
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidArgumentError,
    InvalidStateError,
    InvariantViolationError,
)

log = structlog.get_logger()

# 按继承顺序匹配：子类在前
_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (EntityNotFoundError, 404),
    (DuplicateEntityError, 409),
    (InvalidArgumentError, 400),
    (InvalidStateError, 409),
    (InvariantViolationError, 422),
]


def status_for(error: DomainError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return 500


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """领域规则拒绝 -- 记录 warning 并返回结构化错误"""
    status_code = status_for(exc)
    log.warning(
        "domain_rule_rejected",
        code=exc.code,
        message=exc.message,
        status_code=status_code,
        **exc.details,
    )
    return error_response(status_code, exc.code, exc.message)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体 / 参数格式错误 -- 与 invalid-argument 同一形状"""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(p) for p in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    log.warning("request_validation_failed", message=message)
    return error_response(400, InvalidArgumentError.code, message)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
