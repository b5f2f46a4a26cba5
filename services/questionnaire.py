"""
설문(30문항) 정의와 응답 검증

QUESTION_KEYS 순서는 예측 모델 학습 데이터셋 순서(EXT1..10, CSN1..10, AGR1..10)와
동일해야 하며, 예측기 호출 시 입력 dict 순서가 아니라 이 순서로 정렬한다.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from models.questionnaires import Questionnaire, Response
from utils.errors import InvalidAnswers, MissingAnswers, ValidationFailed

logger = logging.getLogger(__name__)

QUESTION_KEYS = [
    # 외향성 (extraversion)
    "Soy el alma de la fiesta",
    "No hablo mucho",
    "Me siento cómodo rodeado de muchas personas",
    "Prefiero mantenerme en segundo plano (intento no destacar)",
    "Inicio conversaciones",
    "Tengo poco que decir",
    "Le hablo a muchas personas en fiestas",
    "No me gusta llamar la atención",
    "No me molesta ser el centro de atención",
    "Soy callado cuando estoy con desconocidos",
    # 성실성 (conscientiousness)
    "Siempre estoy preparado",
    "Dejo mis pertenencias por todos lados",
    "Pongo atención a los detalles",
    "Desordeno las cosas",
    "Hago mis tareas de inmediato",
    "A menudo olvido regresar las cosas a su lugar",
    "Me gusta el orden",
    "Evito cumplir con mis deberes",
    "Sigo una agenda",
    "Soy exigente con mi trabajo",
    # 친화성 (agreeableness)
    "Siento preocupación por los demás",
    "Me intereso por las personas",
    "Insulto a las personas",
    "Simpatizo con los sentimientos de los demás",
    "No me interesan los problemas de los demás",
    "Tengo un corazón sensible",
    "Realmente no me intereso por los demás",
    "Dedico tiempo a los demás",
    "Siento las emociones de los demás",
    "Hago que las personas se sientan cómodas",
]

MIN_RATING = 1
MAX_RATING = 5


def _is_valid_rating(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_RATING <= value <= MAX_RATING


def validate_answers(answers: Any) -> List[int]:
    """
    모든 문항 응답 여부와 값(1~5 정수)을 검사하고 정규 순서의 응답 목록을 반환.
    - 미응답(키 없음/None) → MissingAnswers (누락 문항을 정규 순서로 나열)
    - 범위 밖/정수 아님 → InvalidAnswers
    - 알 수 없는 키는 무시
    """
    if not isinstance(answers, dict):
        raise ValidationFailed("Invalid answers payload")

    missing = [k for k in QUESTION_KEYS if answers.get(k) is None]
    if missing:
        raise MissingAnswers(missing)

    invalid = [k for k in QUESTION_KEYS if not _is_valid_rating(answers[k])]
    if invalid:
        raise InvalidAnswers(invalid)

    return [answers[k] for k in QUESTION_KEYS]


def raw_answers_record(ordered: List[int], answers: Dict[str, int]) -> dict:
    return {
        "ordered": ordered,
        "by_question": {k: answers[k] for k in QUESTION_KEYS},
    }


# ==========================================================
# [조회 헬퍼]
# ==========================================================

def get_active_questionnaire(db: Session) -> Optional[Questionnaire]:
    # 단일 활성 보장이 없으므로 가장 최근에 만든 활성 설문을 사용
    return (
        db.query(Questionnaire)
        .filter(Questionnaire.active.is_(True))
        .order_by(Questionnaire.created_at.desc(), Questionnaire.id.desc())
        .first()
    )


def get_response(db: Session, questionnaire_id: int, student_id: int) -> Optional[Response]:
    return (
        db.query(Response)
        .filter(Response.questionnaire_id == questionnaire_id, Response.student_id == student_id)
        .first()
    )
