import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.security import require_intake_token
from models.questionnaires import Questionnaire
from models.users import ROLE_STUDENT, User
from schemas.common import ERROR_RESPONSES
from schemas.questionnaire import IntakeSubmit
from services.predictor_client import PredictorHttpClient, get_predictor
from services.questionnaire import validate_answers
from services.recommendations import generate_recommendations
from services.submissions import primary_enrollment, submit_answers
from utils.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/hooks", tags=["외부 설문 인입"], responses=ERROR_RESPONSES)


def _questionnaire_by_version(db: Session, version: str) -> Questionnaire:
    """버전으로 설문 조회, 없으면 활성 설문으로 추가 (커밋은 submit_answers 에서 함께)"""
    questionnaire = db.query(Questionnaire).filter(Questionnaire.version == version).first()
    if questionnaire is not None:
        return questionnaire

    questionnaire = Questionnaire(version=version, active=True)
    db.add(questionnaire)
    try:
        db.flush()
    except IntegrityError:
        # 동시 인입으로 같은 버전이 먼저 생성된 경우
        db.rollback()
        return db.query(Questionnaire).filter(Questionnaire.version == version).one()
    logger.info(f"설문 버전 추가: {version} (id={questionnaire.id})")
    return questionnaire


# ✅ [INTAKE] 외부 폼 도구에서 학생 이메일 + 설문 버전으로 응답 전달
# - 같은 설문 재인입 시 원시 응답을 교체(upsert)하고 새 프로필 생성
# - 응답/수강 검증을 통과한 뒤에만 새 설문 버전을 추가하고, 실패 시 함께 롤백
@router.post("/questionnaire")
def intake_questionnaire(
    body: IntakeSubmit,
    background_tasks: BackgroundTasks,
    _client: dict = Depends(require_intake_token),
    db: Session = Depends(get_db),
    predictor: PredictorHttpClient = Depends(get_predictor),
):
    student = db.query(User).filter(User.email == body.student_email).first()
    if student is None or student.role != ROLE_STUDENT:
        raise NotFound("Student not found")

    validate_answers(body.answers)
    if primary_enrollment(db, student.id) is None:
        raise ValidationFailed("The student is not enrolled in any group")

    try:
        questionnaire = _questionnaire_by_version(db, body.questionnaire_version)
        response, profile, clones = submit_answers(
            db, student.id, questionnaire, body.answers, predictor, replace_existing=True
        )
    except Exception:
        db.rollback()
        raise

    background_tasks.add_task(
        generate_recommendations, student.id, profile.id, copy_to=[c.id for c in clones]
    )

    return {"ok": True, "response_id": response.id, "profile_id": profile.id}
