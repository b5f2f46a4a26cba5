from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Role = Literal["student", "teacher"]


# ✅ 로그인 요청: 학생은 학번, 교사는 교직원 번호를 identifier로 사용
class LoginRequest(BaseModel):
    role: Role
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)


# ✅ 회원가입 - 그룹 정보 (교사가 새 그룹 생성 시)
class GroupInput(BaseModel):
    name: str = Field(..., min_length=1)         # 과목명
    section: Optional[str] = None                # 분반 코드
    cohort: Optional[str] = None                 # 기수


# ✅ 회원가입 - 학생 분기
class StudentRegistration(BaseModel):
    enrollment_number: str = Field(..., min_length=1)
    group_id: int = Field(..., gt=0)


# ✅ 회원가입 - 교사 분기 (create: 새 그룹 생성 / join: 기존 그룹 참여)
class TeacherRegistration(BaseModel):
    option: Literal["create", "join"]
    employee_number: str = Field(..., min_length=1)
    group: Optional[GroupInput] = None
    group_id: Optional[int] = Field(default=None, gt=0)


class RegisterRequest(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    role: Role
    consent: bool
    student: Optional[StudentRegistration] = None
    teacher: Optional[TeacherRegistration] = None
