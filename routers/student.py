import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_student
from models.course_groups import CourseGroup, Enrollment
from models.profiles import Profile
from models.questionnaires import Response
from schemas.common import ERROR_RESPONSES
from schemas.groups import GroupJoin
from schemas.questionnaire import AnswersSubmit
from services.enrollment import join_group
from services.predictor_client import PredictorHttpClient, get_predictor
from services.questionnaire import get_active_questionnaire, get_response
from services.recommendations import generate_recommendations
from services.session_codec import SessionClaims
from services.submissions import submit_answers
from utils.errors import ServerMisconfigured

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student", tags=["학생"], responses=ERROR_RESPONSES)


# ==========================================================
# [설문]
# ==========================================================

# ✅ [STATUS] 활성 설문 응답 여부
@router.get("/questionnaire/status")
def questionnaire_status(sess: SessionClaims = Depends(require_student), db: Session = Depends(get_db)):
    questionnaire = get_active_questionnaire(db)
    if questionnaire is None:
        return {"ok": True, "answered": False, "reason": "no-active-questionnaire"}

    existing = get_response(db, questionnaire.id, sess.uid)
    if existing is None:
        return {"ok": True, "answered": False}

    return {
        "ok": True,
        "answered": True,
        "response_id": existing.id,
        "evaluated_at": existing.evaluated_at.isoformat() if existing.evaluated_at else None,
    }


# ✅ [SUBMIT] 설문 제출 → 예측 → 프로필 저장 → (백그라운드) 추천 생성
@router.post("/questionnaire")
def submit_questionnaire(
    body: AnswersSubmit,
    background_tasks: BackgroundTasks,
    sess: SessionClaims = Depends(require_student),
    db: Session = Depends(get_db),
    predictor: PredictorHttpClient = Depends(get_predictor),
):
    questionnaire = get_active_questionnaire(db)
    if questionnaire is None:
        logger.error("활성 설문이 설정되어 있지 않음")
        raise ServerMisconfigured("No active questionnaire is configured")

    response, profile, clones = submit_answers(db, sess.uid, questionnaire, body.answers, predictor)

    # 응답을 기다리지 않는 추천 생성 (실패해도 제출은 성공)
    background_tasks.add_task(
        generate_recommendations, sess.uid, profile.id, copy_to=[c.id for c in clones]
    )

    return {
        "ok": True,
        "message": "Questionnaire saved. Your results are being processed.",
        "response_id": response.id,
        "profile_id": profile.id,
        "cloned_profile_ids": [c.id for c in clones],
    }


# ==========================================================
# [그룹]
# ==========================================================

# ✅ [READ] 내가 수강 중인 그룹 목록
@router.get("/groups")
def my_groups(sess: SessionClaims = Depends(require_student), db: Session = Depends(get_db)):
    rows = (
        db.query(CourseGroup)
        .join(Enrollment, Enrollment.group_id == CourseGroup.id)
        .filter(Enrollment.student_id == sess.uid)
        .order_by(Enrollment.created_at.asc(), Enrollment.id.asc())
        .all()
    )
    profiled_groups = {
        group_id
        for (group_id,) in db.query(Profile.group_id)
        .join(Response, Profile.response_id == Response.id)
        .filter(Response.student_id == sess.uid)
        .distinct()
        .all()
    }
    return {
        "ok": True,
        "groups": [
            {**g.to_dict(), "has_profile": g.id in profiled_groups}
            for g in rows
        ],
    }


# ✅ [JOIN] 추가 그룹 가입 (기존 프로필/추천이 있으면 복제)
@router.post("/groups/join")
def join(body: GroupJoin, sess: SessionClaims = Depends(require_student), db: Session = Depends(get_db)):
    result = join_group(db, sess.uid, body.group_id)

    if result.profile_cloned:
        message = "You joined the group and your existing profile and recommendations were carried over."
    else:
        message = "You joined the group. Your profile will be generated when you answer the questionnaire."

    return {
        "ok": True,
        "group": result.group.to_dict(),
        "profile_cloned": result.profile_cloned,
        "message": message,
    }
