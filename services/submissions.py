"""
설문 제출 처리 (학생 제출 / 외부 인입 공통)

1) 응답 검증 → 2) 수강 그룹 확인 → 3) 예측기 호출 → 4) Response + Profile 저장
5) 아직 프로필이 없는 나머지 수강 그룹에는 같은 결과를 복제 (같은 커밋)
예측기 실패 시 아무것도 저장하지 않는다.
"""
import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from models.course_groups import Enrollment
from models.profiles import Profile
from models.questionnaires import Questionnaire, Response
from services.predictor_client import PredictorError, PredictorHttpClient
from services.profiles import build_profile, clone_profile, latest_profile_for_student
from services.questionnaire import get_response, raw_answers_record, validate_answers
from utils.errors import Conflict, UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)


def student_enrollments(db: Session, student_id: int) -> List[Enrollment]:
    """등록 순서대로 (첫 번째가 주 수강 그룹)"""
    return (
        db.query(Enrollment)
        .filter(Enrollment.student_id == student_id)
        .order_by(Enrollment.created_at.asc(), Enrollment.id.asc())
        .all()
    )


def primary_enrollment(db: Session, student_id: int) -> Optional[Enrollment]:
    """가장 먼저 등록한 수강 그룹"""
    enrollments = student_enrollments(db, student_id)
    return enrollments[0] if enrollments else None


def submit_answers(
    db: Session,
    student_id: int,
    questionnaire: Questionnaire,
    answers: Any,
    predictor: PredictorHttpClient,
    replace_existing: bool = False,
) -> Tuple[Response, Profile, List[Profile]]:
    """
    replace_existing=False: 같은 설문 재제출은 409
    replace_existing=True : 기존 Response의 원시 응답을 교체(upsert)하고 새 Profile 생성

    반환: (Response, 주 그룹 Profile, 나머지 그룹에 복제된 Profile 목록)
    """
    ordered = validate_answers(answers)

    existing = get_response(db, questionnaire.id, student_id)
    if existing is not None and not replace_existing:
        raise Conflict("The questionnaire has already been answered")

    enrollments = student_enrollments(db, student_id)
    if not enrollments:
        raise ValidationFailed("The student is not enrolled in any group")
    primary, others = enrollments[0], enrollments[1:]

    # 프로필 대기 중인 그룹 (답변 전에 가입한 그룹)
    pending_group_ids = [
        e.group_id for e in others
        if latest_profile_for_student(db, student_id, group_id=e.group_id) is None
    ]

    try:
        prediction = predictor.predict(ordered, student_id, questionnaire.id)
    except PredictorError as e:
        logger.error(f"예측 실패: student={student_id} questionnaire={questionnaire.id}: {e}")
        raise UpstreamError("Error processing answers in the prediction model")

    record = raw_answers_record(ordered, answers)
    if existing is not None:
        existing.raw_answers = record
        response = existing
    else:
        response = Response(
            questionnaire_id=questionnaire.id,
            student_id=student_id,
            raw_answers=record,
        )
        db.add(response)

    profile = build_profile(response, primary.group_id, prediction)
    db.add(profile)
    db.flush()

    clones = [clone_profile(db, profile, group_id) for group_id in pending_group_ids]

    db.commit()
    db.refresh(response)
    db.refresh(profile)

    logger.info(
        f"설문 저장 완료: student={student_id} response={response.id} "
        f"profile={profile.id} group={profile.group_id} cloned_groups={pending_group_ids}"
    )
    return response, profile, clones
