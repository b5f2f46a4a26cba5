import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import get_db
from models.course_groups import CourseGroup, Enrollment, TeacherAssignment
from models.users import ROLE_STUDENT, ROLE_TEACHER, StudentProfile, TeacherProfile, User
from schemas.auth import LoginRequest, RegisterRequest
from schemas.common import ERROR_RESPONSES
from services.session_codec import SessionClaims, clear_session_cookie, read_session, set_session_cookie
from utils.errors import Conflict, InvalidCredentials, NotAuthenticated, NotFound, ValidationFailed
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["인증"], responses=ERROR_RESPONSES)

HOME_PATHS = {ROLE_STUDENT: "/student", ROLE_TEACHER: "/teacher"}


# ==========================================================
# [로그인 / 로그아웃 / 세션 조회]
# ==========================================================

# ✅ [LOGIN] 학생은 학번, 교사는 교직원 번호로 로그인
@router.post("/login")
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)):
    if body.role == ROLE_STUDENT:
        profile = db.query(StudentProfile).filter(StudentProfile.enrollment_number == body.identifier).first()
        not_found = "Student not found"
    else:
        profile = db.query(TeacherProfile).filter(TeacherProfile.employee_number == body.identifier).first()
        not_found = "Teacher not found"

    if profile is None or profile.user.role != body.role:
        raise NotFound(not_found)

    user = profile.user
    if not verify_password(body.password, user.password_hash):
        logger.warning(f"로그인 실패(비밀번호 불일치): uid={user.id}")
        raise InvalidCredentials()

    set_session_cookie(response, SessionClaims(uid=user.id, role=user.role))
    logger.info(f"로그인 성공: uid={user.id} role={user.role}")
    return {"ok": True, "role": user.role, "next": HOME_PATHS[user.role]}


# ✅ [LOGOUT] 세션 쿠키 삭제
@router.post("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}


# ✅ [ME] 현재 세션 사용자 정보
@router.get("/me")
def me(request: Request, db: Session = Depends(get_db)):
    sess = read_session(request)
    if sess is None:
        raise NotAuthenticated("No active session", reason="no-session")

    user = db.get(User, sess.uid)
    if user is None:
        raise NotAuthenticated("Session user not found", reason="user-not-found")

    profile = user.student_profile if user.role == ROLE_STUDENT else user.teacher_profile
    identifier = None
    if profile is not None:
        identifier = profile.enrollment_number if user.role == ROLE_STUDENT else profile.employee_number

    return {
        "ok": True,
        "session": sess.to_dict(),
        "user": {
            "id": user.id,
            "email": user.email,
            "role": user.role,
            "first_name": profile.first_name if profile else None,
            "last_name": profile.last_name if profile else None,
            "identifier": identifier,
        },
    }


# ==========================================================
# [회원가입] 학생 / 교사 분기
# ==========================================================

# ✅ [REGISTER]
# - 학생: 학생 프로필 + 첫 그룹 수강 등록
# - 교사: 교사 프로필 + 새 그룹 생성(create) 또는 기존 그룹 참여(join)
@router.post("/register")
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    if not body.consent:
        raise ValidationFailed("Consent is required to register")

    if db.query(User).filter(User.email == body.email).first() is not None:
        raise Conflict("Email is already registered")

    user = User(email=body.email, password_hash=hash_password(body.password), role=body.role)

    if body.role == ROLE_STUDENT:
        if body.student is None:
            raise ValidationFailed("Missing student registration data")

        group = db.get(CourseGroup, body.student.group_id)
        if group is None:
            raise NotFound("Group ID not found")

        if db.query(StudentProfile).filter(
            StudentProfile.enrollment_number == body.student.enrollment_number
        ).first() is not None:
            raise Conflict("Enrollment number is already registered")

        db.add(user)
        db.flush()
        db.add(StudentProfile(
            user_id=user.id,
            first_name=body.first_name,
            last_name=body.last_name,
            enrollment_number=body.student.enrollment_number,
        ))
        db.add(Enrollment(group_id=group.id, student_id=user.id))
        _commit_registration(db)

        logger.info(f"학생 가입: uid={user.id} group={group.id}")
        return {
            "ok": True,
            "role": ROLE_STUDENT,
            "user_id": user.id,
            "group_id": group.id,
            "next": "/student/questionnaire",
        }

    # ===== teacher =====
    if body.teacher is None:
        raise ValidationFailed("Missing teacher registration data")

    if db.query(TeacherProfile).filter(
        TeacherProfile.employee_number == body.teacher.employee_number
    ).first() is not None:
        raise Conflict("Employee number is already registered")

    if body.teacher.option == "create":
        group_input = body.teacher.group
        group = CourseGroup(
            name=(group_input.name.strip() if group_input else "") or "Group",
            section=group_input.section if group_input else None,
            cohort=group_input.cohort if group_input else None,
        )
        db.add(group)
    else:
        if not body.teacher.group_id:
            raise ValidationFailed("A group ID is required to join a group")
        group = db.get(CourseGroup, body.teacher.group_id)
        if group is None:
            raise NotFound("Group ID not found")

    db.add(user)
    db.flush()
    db.add(TeacherProfile(
        user_id=user.id,
        first_name=body.first_name,
        last_name=body.last_name,
        employee_number=body.teacher.employee_number,
    ))
    db.add(TeacherAssignment(teacher_id=user.id, group_id=group.id))
    _commit_registration(db)

    logger.info(f"교사 가입: uid={user.id} group={group.id} option={body.teacher.option}")
    return {
        "ok": True,
        "role": ROLE_TEACHER,
        "user_id": user.id,
        "group_id": group.id,
        "next": "/teacher",
    }


def _commit_registration(db: Session):
    # 동시 가입으로 이메일/학번/교직원 번호 유니크 제약 위반 시 409
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Account data is already registered")
