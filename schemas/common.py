"""
schemas/common.py

- 프로젝트 전반에서 재사용할 공용 응답 스키마
- Pydantic v2 기준
- 모든 응답은 ok 필드를 가진다 (성공 true / 실패 false)
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field, ConfigDict


class ErrorResponse(BaseModel):
    """
    전역 에러 핸들러(middlewares/error_handler.py)가 내려주는 에러 응답
    - 추가 필드(missing_questions 등)는 extra로 허용
    """
    ok: bool = False
    error: str = Field(..., description="사람이 읽을 수 있는 에러 메시지")
    code: str = Field(..., description="에러 식별 코드 (예: VALIDATION_ERROR, UPSTREAM_ERROR)")
    details: Optional[List[Any]] = None

    model_config = ConfigDict(extra="allow")


# 라우터 responses= 인자에 공통으로 붙이는 에러 문서
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}
