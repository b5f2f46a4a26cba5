import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from config.settings import settings

logger = logging.getLogger(__name__)


class PredictorError(Exception):
    """성격 특성 예측 서비스 연동 예외"""
    pass


class Prediction(BaseModel):
    """예측기 응답 (숫자가 아닌 점수는 None 처리)"""
    extraversion: Optional[float] = None
    conscientiousness: Optional[float] = None
    agreeableness: Optional[float] = None
    emotional_stability: Optional[float] = None
    openness: Optional[float] = None
    levels: Dict[str, Any] = Field(default_factory=dict)
    model_version: Optional[str] = None

    @field_validator(
        "extraversion", "conscientiousness", "agreeableness",
        "emotional_stability", "openness",
        mode="before",
    )
    @classmethod
    def _numbers_only(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return v

    @field_validator("levels", mode="before")
    @classmethod
    def _levels_dict(cls, v):
        return v if isinstance(v, dict) else {}

    @field_validator("model_version", mode="before")
    @classmethod
    def _version_str(cls, v):
        return v if isinstance(v, str) and v else None


class PredictorHttpClient:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url or settings.PREDICTOR_URL
        self.timeout = timeout if timeout is not None else settings.PREDICTOR_TIMEOUT
        self.transport = transport

    def predict(self, ordered_answers: List[int], student_id: int, questionnaire_id: int) -> Prediction:
        payload = {
            "respuestas": ordered_answers,   # 예측 서비스가 기대하는 필드명
            "studentId": student_id,
            "questionnaireId": questionnaire_id,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.post(self.url, json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.TimeoutException:
            logger.error("예측기 응답 시간 초과")
            raise PredictorError("Predictor timed out")
        except httpx.HTTPStatusError as e:
            logger.error(f"예측기 오류 (HTTP {e.response.status_code}): {e.response.text}")
            raise PredictorError(f"Predictor returned HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"예측기 연결 실패: {e}")
            raise PredictorError(f"Predictor request failed: {e}")
        except ValueError as e:
            logger.error(f"예측기 응답 JSON 파싱 실패: {e}")
            raise PredictorError("Predictor returned invalid JSON")

        if not isinstance(data, dict):
            logger.error(f"예측기 응답 형식 오류: {data!r}")
            raise PredictorError("Predictor returned an unexpected payload")

        logger.info(f"예측 결과 수신: student={student_id} {data}")
        return Prediction.model_validate(data)


predictor_client = PredictorHttpClient()


def get_predictor() -> PredictorHttpClient:
    """FastAPI Depends 용 (테스트에서 dependency_overrides 로 교체)"""
    return predictor_client
