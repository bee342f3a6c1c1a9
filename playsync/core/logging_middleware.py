import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

# playsync 로거 -> JSON 핸들러
logger = logging.getLogger("playsync")

REQUEST_ID_HEADER = "X-Request-ID"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청 1건당 시작/종료 로그 - 클라이언트 재시도 추적용 요청 ID 부여"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()
        label = f"[{request_id}] {request.method} {request.url.path}"

        logger.info(f"[Request] {label}")
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"[Unhandled Error] {label}")
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.log(
            _level_for(response.status_code),
            f"[Response] {label} -> {response.status_code} in {elapsed_ms:.1f}ms",
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
