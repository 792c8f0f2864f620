from typing import Optional, Any

from .errors import ValidationException, ValidationError


class Validator:
    """입력 검증을 위한 유틸리티 클래스"""

    @staticmethod
    def validate_required(value: Any, field_name: str) -> Any:
        """필수 필드 검증"""
        if value is None or (isinstance(value, str) and value.strip() == ""):
            raise ValidationException(
                f"{field_name} is required",
                validation_errors=[
                    ValidationError(field=field_name, message="This field is required", value=value)
                ]
            )
        return value

    @staticmethod
    def validate_user_header(user: Optional[str], field_name: str = "user") -> str:
        """요청자 식별 헤더 검증 (앞뒤 공백 제거)"""
        Validator.validate_required(user, field_name)
        return user.strip()
