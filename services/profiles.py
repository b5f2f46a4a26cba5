"""
프로필 생성 / 복제

- 예측 결과 → Profile 행 (그룹 단위)
- 다른 그룹 가입 시 가장 최근 Profile + 추천을 새 그룹으로 복제
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from config.settings import settings
from models.profiles import TRAITS, Profile, Recommendation
from models.questionnaires import Response
from services.predictor_client import Prediction
from services.scoring import resolve_level

logger = logging.getLogger(__name__)

# 현재 예측기가 산출하는 특성
MEASURED_TRAITS = ("extraversion", "conscientiousness", "agreeableness")

# 복제 시 그대로 복사하는 컬럼
_PROFILE_COPY_FIELDS = (
    tuple(f"{trait}_score" for trait in TRAITS)
    + tuple(f"{trait}_level" for trait in TRAITS)
    + ("model_version",)
)


def build_profile(response: Response, group_id: int, prediction: Prediction) -> Profile:
    """예측 결과로 Profile 객체 생성 (세션 add/commit은 호출 측 책임)"""
    fields = {}
    for trait in MEASURED_TRAITS:
        score = getattr(prediction, trait)
        fields[f"{trait}_score"] = score
        fields[f"{trait}_level"] = resolve_level(prediction.levels.get(trait), score)

    # emotional_stability / openness 는 현재 모델이 계산하지 않으므로 null 유지
    return Profile(
        response=response,
        group_id=group_id,
        emotional_stability_score=None,
        openness_score=None,
        emotional_stability_level=None,
        openness_level=None,
        model_version=prediction.model_version or settings.DEFAULT_MODEL_VERSION,
        **fields,
    )


def latest_profile_for_student(db: Session, student_id: int, group_id: Optional[int] = None) -> Optional[Profile]:
    query = (
        db.query(Profile)
        .join(Response, Profile.response_id == Response.id)
        .filter(Response.student_id == student_id)
    )
    if group_id is not None:
        query = query.filter(Profile.group_id == group_id)
    return query.order_by(Profile.created_at.desc(), Profile.id.desc()).first()


def clone_profile(db: Session, source: Profile, group_id: int) -> Profile:
    """같은 Response를 공유하는 새 Profile + 추천 복사 (새 id, 같은 내용)"""
    clone = Profile(
        response_id=source.response_id,
        group_id=group_id,
        **{name: getattr(source, name) for name in _PROFILE_COPY_FIELDS},
    )
    db.add(clone)
    db.flush()

    for rec in source.recommendations:
        db.add(Recommendation(
            profile_id=clone.id,
            trait=rec.trait,
            strategy=rec.strategy,
            soft_skill=rec.soft_skill,
            source=rec.source,
        ))

    logger.info(
        f"프로필 복제: source={source.id} → new={clone.id} "
        f"(group={group_id}, recommendations={len(source.recommendations)})"
    )
    return clone
