"""
API 요청 로깅 미들웨어

모든 API 요청과 응답을 구조화된 형태로 로깅합니다.
"""

import time
import uuid
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger, set_request_context, clear_request_context, log_api_call

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """API 요청/응답 로깅 미들웨어"""

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # 요청 ID 생성
        request_id = str(uuid.uuid4())

        # 시작 시간 기록
        start_time = time.time()

        # 요청자 (user 헤더, 검증은 각 엔드포인트에서)
        participant = (request.headers.get("user") or "").strip() or None

        # 요청 컨텍스트 설정
        set_request_context(request_id, participant)

        if self.log_requests:
            logger.debug(
                f"Request started: {request.method} {request.url.path}",
                extra={
                    "event_type": "request_started",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "query_params": dict(request.query_params) if request.query_params else None,
                    "client_ip": self._get_client_ip(request),
                }
            )

        try:
            # 다음 미들웨어/엔드포인트 호출
            response = await call_next(request)

            # 응답 시간 계산
            duration_ms = (time.time() - start_time) * 1000

            # API 호출 요약 로깅
            log_api_call(
                logger,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                participant=participant,
                request_id=request_id,
                query_params=dict(request.query_params) if request.query_params else None,
                user_agent=request.headers.get("user-agent"),
                client_ip=self._get_client_ip(request)
            )

            return response

        except Exception as e:
            # 예외 발생 시 로깅
            duration_ms = (time.time() - start_time) * 1000

            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "event_type": "api_error",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "participant": participant,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True
            )

            raise

        finally:
            # 요청 컨텍스트 정리
            clear_request_context()

    def _get_client_ip(self, request: Request) -> Optional[str]:
        """클라이언트 IP 주소 추출"""
        # X-Forwarded-For 헤더 확인 (프록시/로드밸런서 사용 시)
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            # 첫 번째 IP가 실제 클라이언트 IP
            return forwarded_for.split(",")[0].strip()

        # 직접 연결인 경우
        if request.client is not None:
            return request.client.host

        return "unknown"
