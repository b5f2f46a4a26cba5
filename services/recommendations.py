"""
추천 문구 생성 (외부 워크플로 웹훅)

- 프로필 커밋 이후 백그라운드로 실행되며 요청은 결과를 기다리지 않는다.
- URL 미설정, HTTP 실패, 잘못된 응답은 모두 로그만 남기고 삼킨다.
  (설문 제출 성공 여부와 무관)
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config.settings import settings
from database import db as database
from models.profiles import Profile, Recommendation

logger = logging.getLogger(__name__)

# 추천 저장 순서
RECOMMENDATION_TRAITS = ("extraversion", "agreeableness", "conscientiousness")


class MalformedWorkflowPayload(ValueError):
    pass


class RecommendationWorkflowClient:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url if url is not None else settings.RECOMMENDATIONS_WEBHOOK_URL
        self.timeout = timeout if timeout is not None else settings.RECOMMENDATIONS_TIMEOUT
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def request(self, payload: dict) -> Any:
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            r = client.post(self.url, json=payload)
            r.raise_for_status()
            return r.json()


workflow_client = RecommendationWorkflowClient()


# ==========================================================
# [payload 구성 / 응답 정규화]
# ==========================================================

def build_payload(student_id: int, profile: Profile) -> dict:
    return {
        "studentId": student_id,
        "perfilId": profile.id,
        "grupoId": profile.group_id,
        "traits": {
            "extraversion": {
                "score": profile.extraversion_score,
                "level": profile.extraversion_level,
            },
            "conscientiousness": {
                "score": profile.conscientiousness_score,
                "level": profile.conscientiousness_level,
            },
            "agreeableness": {
                "score": profile.agreeableness_score,
                "level": profile.agreeableness_level,
            },
        },
    }


def normalize_workflow_payload(raw: Any) -> Dict[str, Any]:
    """
    워크플로 응답 형태
    - JSON 문자열
    - {"output": "<JSON 문자열>"}
    - 객체 그대로
    """
    try:
        if isinstance(raw, str):
            data = json.loads(raw)
        elif isinstance(raw, dict) and isinstance(raw.get("output"), str):
            data = json.loads(raw["output"])
        else:
            data = raw
    except ValueError as e:
        raise MalformedWorkflowPayload(f"invalid JSON in workflow response: {e}")

    if not isinstance(data, dict):
        raise MalformedWorkflowPayload(f"unexpected workflow payload type: {type(data).__name__}")
    return data


def extract_recommendations(payload: Dict[str, Any]) -> List[Dict[str, str]]:
    """특성별 recommendations 배열을 빈 줄로 이어 한 건씩 (내용 없는 특성은 제외)"""
    rows = []
    for trait in RECOMMENDATION_TRAITS:
        entry = payload.get(trait)
        recs = entry.get("recommendations") if isinstance(entry, dict) else None
        if not isinstance(recs, list):
            continue
        texts = [r.strip() for r in recs if isinstance(r, str) and r.strip()]
        if texts:
            rows.append({"trait": trait, "strategy": "\n\n".join(texts)})
    return rows


# ==========================================================
# [백그라운드 작업]
# ==========================================================

def generate_recommendations(
    student_id: int,
    profile_id: int,
    client: Optional[RecommendationWorkflowClient] = None,
    copy_to: Sequence[int] = (),
) -> int:
    """
    추천 생성 후 (원본 프로필 기준) 저장된 행 수 반환. 어떤 실패도 예외로 올리지 않는다.
    요청 세션과 별개로 자체 DB 세션을 연다.
    copy_to: 같은 제출로 복제된 프로필 id (같은 추천을 그대로 저장)
    """
    client = client or workflow_client
    if not client.enabled:
        logger.warning("[recommendations] RECOMMENDATIONS_WEBHOOK_URL 미설정 → 추천 생성 생략")
        return 0

    db = database.SessionLocal()
    try:
        profile = db.get(Profile, profile_id)
        if profile is None:
            logger.error(f"[recommendations] 프로필 없음: profile_id={profile_id}")
            return 0

        try:
            raw = client.request(build_payload(student_id, profile))
        except httpx.HTTPStatusError as e:
            logger.error(
                f"[recommendations] 워크플로 HTTP 오류: {e.response.status_code} {e.response.text}"
            )
            return 0
        except httpx.HTTPError as e:
            logger.error(f"[recommendations] 워크플로 호출 실패: {e}")
            return 0
        except ValueError as e:
            logger.error(f"[recommendations] 워크플로 응답 JSON 아님: {e}")
            return 0

        try:
            rows = extract_recommendations(normalize_workflow_payload(raw))
        except MalformedWorkflowPayload as e:
            logger.error(f"[recommendations] 잘못된 워크플로 응답: {e}")
            return 0

        if not rows:
            logger.error(f"[recommendations] 사용할 수 있는 추천 없음: {raw!r}")
            return 0

        for target_id in (profile.id, *copy_to):
            for row in rows:
                db.add(Recommendation(
                    profile_id=target_id,
                    trait=row["trait"],
                    strategy=row["strategy"],
                    soft_skill=None,
                    source=settings.RECOMMENDATION_SOURCE,
                ))
        db.commit()
        logger.info(
            f"[recommendations] 저장 완료: profile={profile.id} rows={len(rows)} copies={list(copy_to)}"
        )
        return len(rows)
    except Exception:
        db.rollback()
        logger.exception(f"[recommendations] 추천 저장 실패: profile_id={profile_id}")
        return 0
    finally:
        db.close()
