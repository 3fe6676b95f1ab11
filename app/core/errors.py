"""도메인 예외와 에러 코드 정의.

모든 실패는 `TripboardError` 계열로 올라오며, `app.main`의 예외 핸들러가
`{"error": <code>, "message": <detail>}` 형태로 변환합니다.

Usage:
    from app.core.errors import ErrorCode, ValidationError

    raise ValidationError("startDate must be before endDate", code=ErrorCode.INVALID_RANGE)
"""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """클라이언트에 노출되는 기계 판독용 에러 분류."""

    # 인증
    UNAUTHORIZED = "UNAUTHORIZED"

    # 접근 제어 (존재 여부를 드러내지 않도록 404로 통일)
    NOT_FOUND = "NOT_FOUND"

    # 입력 검증
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_DATE = "INVALID_DATE"
    INVALID_RANGE = "INVALID_RANGE"
    INVALID_MEMBERS = "INVALID_MEMBERS"
    UNKNOWN_USER = "UNKNOWN_USER"
    INVALID_ITEM = "INVALID_ITEM"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    INVALID_FIELD = "INVALID_FIELD"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 프레임워크 HTTP 오류 (405 등)
    HTTP_ERROR = "HTTP_ERROR"

    # 시스템
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TripboardError(Exception):
    """모든 도메인 예외의 기반 클래스."""

    status_code: int = 500
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code.value, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(TripboardError):
    """Bearer 토큰이 없거나 검증에 실패했습니다."""

    status_code = 401
    default_code = ErrorCode.UNAUTHORIZED


class NotFoundError(TripboardError):
    """대상이 없거나 호출자가 멤버가 아닙니다."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class ValidationError(TripboardError):
    """입력 검증 실패. 어떤 쓰기보다도 먼저 발생합니다."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR


class StoreUnavailableError(TripboardError):
    """저장소 연결 또는 초기화 실패."""

    status_code = 503
    default_code = ErrorCode.STORE_UNAVAILABLE
