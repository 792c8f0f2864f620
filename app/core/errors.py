from typing import Optional, Dict, Any, List
from fastapi import HTTPException, status
from pydantic import BaseModel


# =============================================================================
# 도메인 예외 (서비스/스토어 계층, HTTP와 무관)
# =============================================================================

class ChatDomainError(Exception):
    """채팅 도메인 예외의 기본 클래스"""


class ConflictError(ChatDomainError):
    """이미 존재하는 참가자로 입장 시도"""


class NotFoundError(ChatDomainError):
    """존재하지 않는 참가자/메시지에 대한 작업"""


class StoreError(ChatDomainError):
    """저장소(MongoDB) 작업 실패"""


class PermissionDeniedError(ChatDomainError):
    """작성자가 아닌 사용자의 메시지 수정/삭제 시도"""


# =============================================================================
# 응답 모델
# =============================================================================

class ErrorResponse(BaseModel):
    """표준 에러 응답 모델"""
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
    status_code: int


class ValidationError(BaseModel):
    """검증 에러 세부사항"""
    field: str
    message: str
    value: Optional[Any] = None


# =============================================================================
# 커스텀 HTTP 예외 클래스들
# =============================================================================

class BaseCustomException(HTTPException):
    """기본 커스텀 예외 클래스"""
    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error = error
        self.message = message
        self.details = details
        self.status_code = status_code  # status_code를 먼저 설정
        super().__init__(status_code=status_code, detail=self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        """예외를 딕셔너리로 변환"""
        return {
            "error": self.error,
            "message": self.message,
            "details": self.details,
            "status_code": self.status_code
        }


class ValidationException(BaseCustomException):
    """입력 검증 실패 예외"""
    def __init__(
        self,
        message: str = "Validation failed",
        validation_errors: Optional[List[ValidationError]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.validation_errors = validation_errors or []
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error="validation_error",
            message=message,
            details=details
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error,
            "message": self.message,
            "validation_errors": [error.model_dump() for error in self.validation_errors],
            "status_code": self.status_code
        }


class AuthenticationException(BaseCustomException):
    """요청자가 리소스 소유자가 아님"""
    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="authentication_error",
            message=message,
            details=details
        )


class ResourceNotFoundException(BaseCustomException):
    """리소스를 찾을 수 없음 예외"""
    def __init__(
        self,
        resource: str = "Resource",
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if message is None:
            message = f"{resource} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="resource_not_found",
            message=message,
            details=details or {"resource": resource}
        )


class ConflictException(BaseCustomException):
    """리소스 충돌 예외"""
    def __init__(
        self,
        message: str = "Resource conflict",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="resource_conflict",
            message=message,
            details=details
        )


class ServiceUnavailableException(BaseCustomException):
    """저장소 장애 등으로 요청을 처리할 수 없음"""
    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="service_unavailable",
            message=message,
            details=details
        )


# =============================================================================
# 에러 헬퍼 함수들
# =============================================================================

def create_error_response(
    error: str,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None
) -> ErrorResponse:
    """표준 에러 응답 생성"""
    return ErrorResponse(
        error=error,
        message=message,
        status_code=status_code,
        details=details
    )


# =============================================================================
# 자주 사용되는 에러 팩토리 함수들
# =============================================================================

def participant_not_found_error(name: Optional[str] = None):
    """참가자를 찾을 수 없음 에러"""
    details = {"name": name} if name else None
    return ResourceNotFoundException("Participant", details=details)


def message_not_found_error(message_id: Optional[str] = None):
    """메시지를 찾을 수 없음 에러"""
    details = {"message_id": message_id} if message_id else None
    return ResourceNotFoundException("Message", details=details)


def not_message_author_error():
    """메시지 작성자가 아님"""
    return AuthenticationException("Only the author can change this message")


def unknown_sender_error(name: Optional[str]):
    """참가자로 등록되지 않은 발신자"""
    return ValidationException(
        "Sender is not a participant",
        validation_errors=[
            ValidationError(field="user", message="Sender must be a current participant", value=name)
        ]
    )
