"""
API 공통 예외 정의

- 모든 예외는 HTTPException을 상속하므로 라우터/서비스 어디서 raise 해도
  middlewares/error_handler.py 에서 {"ok": false, "error": ..., "code": ...} 형태로 응답된다.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """애플리케이션 기본 예외"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str = "ERROR",
        headers: Optional[Dict[str, str]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.extra = extra or {}


class ValidationFailed(AppError):
    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
            error_code="VALIDATION_ERROR",
            extra=extra,
        )


class MissingAnswers(ValidationFailed):
    """설문 미응답 문항 존재"""

    def __init__(self, missing: List[str]):
        super().__init__(
            "Missing answers in the questionnaire",
            extra={"missing_questions": missing},
        )
        self.missing = missing


class InvalidAnswers(ValidationFailed):
    """1~5 정수가 아닌 응답 값"""

    def __init__(self, invalid: List[str]):
        super().__init__(
            "Answers must be integers between 1 and 5",
            extra={"invalid_questions": invalid},
        )
        self.invalid = invalid


class NotAuthenticated(AppError):
    def __init__(
        self,
        detail: str = "Not authenticated",
        reason: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="NOT_AUTHENTICATED",
            headers=headers,
            extra={"reason": reason} if reason else None,
        )


class InvalidCredentials(AppError):
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_CREDENTIALS",
        )


class Forbidden(AppError):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN",
        )


class NotFound(AppError):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND",
        )


class Conflict(AppError):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT",
        )


class UpstreamError(AppError):
    """외부 의존 서비스(예측기) 실패"""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code="UPSTREAM_ERROR",
        )


class ServerMisconfigured(AppError):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="SERVER_MISCONFIGURED",
        )
