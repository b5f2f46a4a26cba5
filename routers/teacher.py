import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_teacher
from models.course_groups import CourseGroup, TeacherAssignment
from models.users import ROLE_STUDENT, User
from schemas.common import ERROR_RESPONSES
from schemas.groups import GroupCreate, GroupJoin
from services.enrollment import is_enrolled
from services.group_summary import assign_teacher, build_group_roster, group_counts, is_assigned, profile_detail
from services.profiles import latest_profile_for_student
from services.session_codec import SessionClaims
from utils.errors import Forbidden, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teacher", tags=["교사"], responses=ERROR_RESPONSES)


def _group_dto(db: Session, group: CourseGroup) -> dict:
    return {**group.to_dict(), **group_counts(db, group.id)}


def _assigned_group(db: Session, teacher_id: int, group_id: int) -> CourseGroup:
    # 담당 여부를 먼저 확인 → 존재하지 않는 그룹도 403
    if not is_assigned(db, teacher_id, group_id):
        raise Forbidden("You are not assigned to this group")
    group = db.get(CourseGroup, group_id)
    if group is None:
        raise NotFound("Group not found")
    return group


# ==========================================================
# [1단계] 담당 그룹 CRUD
# ==========================================================

# ✅ [READ] 담당 그룹 목록 (학생 수 / 프로필 수 포함)
@router.get("/groups")
def list_my_groups(sess: SessionClaims = Depends(require_teacher), db: Session = Depends(get_db)):
    groups = (
        db.query(CourseGroup)
        .join(TeacherAssignment, TeacherAssignment.group_id == CourseGroup.id)
        .filter(TeacherAssignment.teacher_id == sess.uid)
        .order_by(CourseGroup.id.asc())
        .all()
    )
    return {"ok": True, "groups": [_group_dto(db, g) for g in groups]}


# ✅ [CREATE] 새 그룹 생성 + 담당 교사로 연결
@router.post("/groups", status_code=status.HTTP_201_CREATED)
def create_group(body: GroupCreate, sess: SessionClaims = Depends(require_teacher), db: Session = Depends(get_db)):
    name = (body.name or "").strip()
    if not name:
        raise ValidationFailed("Group name is required")

    group = CourseGroup(
        name=name,
        section=(body.section or "").strip() or None,
        cohort=(body.cohort or "").strip() or None,
    )
    db.add(group)
    db.flush()
    db.add(TeacherAssignment(teacher_id=sess.uid, group_id=group.id))
    db.commit()
    db.refresh(group)

    logger.info(f"그룹 생성: group={group.id} teacher={sess.uid}")
    return {"ok": True, "group": {**group.to_dict(), "student_count": 0, "profile_count": 0}}


# ✅ [JOIN] 기존 그룹 담당 참여 (이미 담당이면 그대로)
@router.post("/groups/join")
def join_group_as_teacher(body: GroupJoin, sess: SessionClaims = Depends(require_teacher), db: Session = Depends(get_db)):
    group = db.get(CourseGroup, body.group_id)
    if group is None:
        raise NotFound("The group does not exist")

    if assign_teacher(db, sess.uid, group.id):
        logger.info(f"그룹 담당 참여: group={group.id} teacher={sess.uid}")

    return {"ok": True, "group": _group_dto(db, group)}


# ==========================================================
# [2단계] 그룹 현황 / 학생 상세
# ==========================================================

# ✅ [SUMMARY] 그룹 학생 목록 + 특성 수준 집계
@router.get("/groups/{group_id}/students")
def group_students(group_id: int, sess: SessionClaims = Depends(require_teacher), db: Session = Depends(get_db)):
    group = _assigned_group(db, sess.uid, group_id)
    return {"ok": True, **build_group_roster(db, group)}


# ✅ [DETAIL] 학생 특성 점수 + 추천
@router.get("/groups/{group_id}/students/{student_id}")
def student_detail(
    group_id: int,
    student_id: int,
    sess: SessionClaims = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    group = _assigned_group(db, sess.uid, group_id)

    student = db.get(User, student_id)
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound("Student not found")
    if not is_enrolled(db, student.id, group.id):
        raise NotFound("Student is not enrolled in this group")

    profile = latest_profile_for_student(db, student.id, group_id=group.id)

    return {
        "ok": True,
        "group": group.to_dict(),
        "student": {
            "id": student.id,
            "email": student.email,
            "full_name": student.full_name or "No name registered",
        },
        "profile": profile_detail(profile) if profile is not None else None,
        "recommendations": [r.to_dict() for r in profile.recommendations] if profile is not None else [],
    }
