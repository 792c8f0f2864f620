import traceback
from typing import Callable
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError, OperationFailure

from app.core.errors import (
    BaseCustomException,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    StoreError,
    create_error_response
)
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    통합 에러 처리 미들웨어

    라우터에서 변환되지 않은 모든 예외를 캐치하고 표준화된 에러 응답을 반환합니다.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
            return response

        except BaseCustomException as e:
            # 우리가 정의한 커스텀 예외들
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_dict()
            )

        except ConflictError as e:
            return self._respond("resource_conflict", str(e), status.HTTP_409_CONFLICT)

        except NotFoundError as e:
            return self._respond("resource_not_found", str(e), status.HTTP_404_NOT_FOUND)

        except PermissionDeniedError as e:
            return self._respond("authentication_error", str(e), status.HTTP_401_UNAUTHORIZED)

        except (StoreError, ConnectionFailure, ServerSelectionTimeoutError) as e:
            # MongoDB 연결/저장 실패
            logger.error(f"Store error: {type(e).__name__}: {e}")
            return self._respond(
                "store_error",
                "Document store unavailable",
                status.HTTP_503_SERVICE_UNAVAILABLE,
                {"detail": str(e) if settings.debug else None}
            )

        except OperationFailure as e:
            # MongoDB 작업 실패 (권한, 유효하지 않은 쿼리 등)
            logger.error(f"MongoDB operation error: {e}")
            return self._respond(
                "mongodb_operation_error",
                "MongoDB operation failed",
                status.HTTP_400_BAD_REQUEST,
                {"detail": str(e) if settings.debug else None}
            )

        except Exception as e:
            # 예상하지 못한 모든 에러들
            error_detail = None
            if settings.debug:
                error_detail = {
                    "exception": str(e),
                    "type": type(e).__name__,
                    "traceback": traceback.format_exc()
                }

            logger.exception(f"Unhandled exception: {type(e).__name__}: {e}")

            return self._respond(
                "internal_server_error",
                "An unexpected error occurred",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_detail
            )

    @staticmethod
    def _respond(error: str, message: str, status_code: int, details=None) -> JSONResponse:
        error_response = create_error_response(error, message, status_code, details)
        return JSONResponse(
            status_code=error_response.status_code,
            content=error_response.model_dump()
        )


def create_http_exception_handler():
    """FastAPI HTTPException 핸들러 생성"""
    async def http_exception_handler(request: Request, exc):
        """HTTPException을 표준 형식으로 변환"""

        # 우리의 커스텀 예외인 경우 그대로 반환
        if isinstance(exc, BaseCustomException):
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_dict()
            )

        # 일반 HTTPException인 경우 표준 형식으로 변환
        error_response = create_error_response(
            "http_error",
            exc.detail if isinstance(exc.detail, str) else "HTTP error occurred",
            exc.status_code,
            {"detail": exc.detail} if not isinstance(exc.detail, str) else None
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump()
        )

    return http_exception_handler
