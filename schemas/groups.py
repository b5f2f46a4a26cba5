from typing import Optional

from pydantic import BaseModel, Field


# ✅ 교사 그룹 생성 요청
class GroupCreate(BaseModel):
    name: str = ""                               # 과목명 (공백이면 400)
    section: Optional[str] = None                # 분반 코드 (예: 7BM1)
    cohort: Optional[str] = None                 # 기수 / 학기


# ✅ 그룹 참여 요청 (교사/학생 공통)
class GroupJoin(BaseModel):
    group_id: int = Field(..., gt=0)
