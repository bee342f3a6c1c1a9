import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import BaseAPIException, InternalServerError

logger = logging.getLogger("playsync")


def _describe(request: Request) -> str:
    client = request.client.host if request.client else "-"
    return f"{request.method} {request.url.path} from {client}"


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> dict:
    return {
        "success": False,
        "error": {"code": code, "message": message, "details": details or {}},
    }


def _log_status(status_code: int, message: str) -> None:
    if status_code >= 500:
        logger.error(message)
    else:
        logger.warning(message)


async def handle_base_api_exception(request: Request, exc: BaseAPIException):
    _log_status(
        exc.status_code,
        f"[{exc.error_code}] {_describe(request)} -> {exc.status_code}: {exc.message}",
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.detail,  # type: ignore[arg-type]
        headers=getattr(exc, "headers", None),
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    """라우팅 404 / 405 등 프레임워크 오류도 같은 에러 형식으로 응답"""
    _log_status(
        exc.status_code,
        f"[HTTPException] {_describe(request)} -> {exc.status_code}: {exc.detail}",
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    """요청 본문 / 쿼리 검증 실패 -> VALIDATION_001 (입력값은 응답에 되돌리지 않음)"""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning(f"[VALIDATION_001] {_describe(request)} -> 422: {errors}")
    return JSONResponse(
        status_code=422,
        content=_error_body("VALIDATION_001", "Validation failed", {"errors": errors}),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    # 스택 트레이스는 로그에만 남기고 응답에는 노출하지 않음
    tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(
        f"[Unhandled Error] {_describe(request)}\n"
        f"{type(exc).__name__}: {str(exc)}\n{tb_str}"
    )
    internal = InternalServerError()
    return JSONResponse(status_code=internal.status_code, content=internal.detail)  # type: ignore[arg-type]
