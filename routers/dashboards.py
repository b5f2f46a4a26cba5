"""
역할별 홈 화면 데이터 (/student, /teacher)

두 경로는 AuthGateMiddleware 가 보호하므로 여기까지 왔다면 세션/역할이 이미 확인된 상태다.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database.db import get_db
from models.course_groups import CourseGroup, Enrollment, TeacherAssignment
from models.users import User
from services.group_summary import group_counts
from services.questionnaire import get_active_questionnaire, get_response
from utils.errors import NotAuthenticated

router = APIRouter(tags=["대시보드"])


def _gate_user(request: Request, db: Session) -> User:
    sess = request.state.session
    user = db.get(User, sess.uid)
    if user is None:
        raise NotAuthenticated("Session user not found", reason="user-not-found")
    return user


# ✅ 학생 홈: 이름/이메일, 수강 그룹, 설문 응답 여부
@router.get("/student")
def student_home(request: Request, db: Session = Depends(get_db)):
    user = _gate_user(request, db)
    groups = (
        db.query(CourseGroup)
        .join(Enrollment, Enrollment.group_id == CourseGroup.id)
        .filter(Enrollment.student_id == user.id)
        .order_by(Enrollment.id.asc())
        .all()
    )

    questionnaire = get_active_questionnaire(db)
    answered = bool(questionnaire and get_response(db, questionnaire.id, user.id))

    return {
        "ok": True,
        "alias": user.full_name or user.email or "Student",
        "email": user.email,
        "groups": [g.to_dict() for g in groups],
        "questionnaire": {
            "active": questionnaire is not None,
            "answered": answered,
        },
    }


# ✅ 교사 홈: 담당 그룹 목록
@router.get("/teacher")
def teacher_home(request: Request, db: Session = Depends(get_db)):
    user = _gate_user(request, db)
    groups = (
        db.query(CourseGroup)
        .join(TeacherAssignment, TeacherAssignment.group_id == CourseGroup.id)
        .filter(TeacherAssignment.teacher_id == user.id)
        .order_by(CourseGroup.id.asc())
        .all()
    )
    return {
        "ok": True,
        "alias": user.full_name or user.email or "Teacher",
        "groups": [{**g.to_dict(), **group_counts(db, g.id)} for g in groups],
    }
