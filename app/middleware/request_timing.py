# HTTP 요청 소요 시간 로깅

import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import settings

logger = logging.getLogger(__name__)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    REST 요청 소요 시간 측정 => X-Process-Time-Ms 헤더 + 로그
    기준 시간을 넘긴 요청은 warning (경로 계산 API 지연 확인용)
    WebSocket 연결은 대상 아님
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = None):
        super().__init__(app)
        self.slow_threshold_ms = (
            settings.SLOW_REQUEST_THRESHOLD_MS
            if slow_threshold_ms is None
            else slow_threshold_ms
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"요청 처리 중 예외: {request.method} {request.url.path}, "
                f"{elapsed_ms:.2f}ms, {e}"
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.2f}"

        if elapsed_ms > self.slow_threshold_ms:
            logger.warning(
                f"느린 요청: {request.method} {request.url.path} "
                f"status={response.status_code}, {elapsed_ms:.2f}ms "
                f"(기준: {self.slow_threshold_ms}ms)"
            )
        else:
            logger.debug(
                f"{request.method} {request.url.path} "
                f"status={response.status_code}, {elapsed_ms:.2f}ms"
            )
        return response
