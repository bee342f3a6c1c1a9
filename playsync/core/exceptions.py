"""
API 예외 계층

모든 예외는 같은 응답 형식으로 직렬화됩니다.
    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}

서비스는 이 예외만 던지고, 저장소/게이트웨이 예외는 서비스에서 변환합니다.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for API errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_001"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code or self.error_code
        self.message = message or self.default_message
        self.details = details or {}

        super().__init__(
            status_code=status_code or self.status_code,
            detail={
                "success": False,
                "error": {
                    "code": self.error_code,
                    "message": self.message,
                    "details": self.details,
                },
            },
            headers=headers,
        )

    def __str__(self) -> str:
        return self.message


class AuthenticationError(BaseAPIException):
    """누락/위조/만료된 액세스 토큰"""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTH_001"
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class OAuthError(BaseAPIException):
    """Google 토큰 교환 / 사용자 정보 조회 실패"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "OAUTH_001"
    default_message = "OAuth error"


class ValidationError(BaseAPIException):
    """잘못된 문서 형식, 금액, 상품 ID"""

    status_code = 422
    error_code = "VALIDATION_001"
    default_message = "Validation failed"


class ConflictError(BaseAPIException):
    """이미 처리된 결제 토큰"""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT_001"
    default_message = "Resource conflict"


class InsufficientBalanceError(BaseAPIException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "BALANCE_001"
    default_message = "Insufficient balance"

    def __init__(self, current: int, requested: int, message: Optional[str] = None):
        self.current = current
        self.requested = requested
        super().__init__(message, {"current": current, "requested": requested})


class UpstreamVerificationError(BaseAPIException):
    """결제 검증 실패(402) 또는 검증 서버 장애(503, 재시도 가능)"""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    error_code = "VERIFY_001"
    default_message = "Purchase verification failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict] = None,
        retryable: bool = False,
    ):
        self.retryable = retryable
        if retryable:
            super().__init__(
                message,
                details,
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                error_code="VERIFY_002",
            )
        else:
            super().__init__(message, details)


class StoreError(BaseAPIException):
    """저장소 오류 - 감싸고 있던 트랜잭션은 이미 롤백됨"""

    error_code = "STORE_001"
    default_message = "Storage operation failed"


class InternalServerError(BaseAPIException):
    pass
