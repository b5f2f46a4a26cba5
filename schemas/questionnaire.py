from typing import Any, Dict

from pydantic import BaseModel, EmailStr, Field


# ✅ 학생 설문 제출: {문항 텍스트: 1~5}
#    값 검증(누락/범위)은 services.questionnaire.validate_answers 에서 문항 목록과 함께 수행
class AnswersSubmit(BaseModel):
    answers: Dict[str, Any]


# ✅ 외부 폼 인입 (설문 버전 + 학생 이메일)
class IntakeSubmit(BaseModel):
    student_email: EmailStr
    questionnaire_version: str = Field(..., min_length=1)
    answers: Dict[str, Any]
