from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from models.course_groups import CourseGroup

router = APIRouter(prefix="/groups", tags=["그룹"])


# ✅ [READ] 전체 그룹 목록 (회원가입 화면용, 공개)
@router.get("")
def list_groups(db: Session = Depends(get_db)):
    groups = (
        db.query(CourseGroup)
        .order_by(CourseGroup.cohort.asc(), CourseGroup.name.asc(), CourseGroup.id.asc())
        .all()
    )
    return {"ok": True, "groups": [g.to_dict() for g in groups]}
