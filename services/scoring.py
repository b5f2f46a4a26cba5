"""
특성 점수 → 수준(low / medium / high) 변환

- 예측기가 수준 문자열을 주면 그것을 우선 사용 ("BAJO", "medio", "Alto", "high" ...)
- 없으면 점수 구간으로 판정: 20 미만 low, 20~29 medium, 30 이상 high
"""
from typing import Any, Optional

LEVEL_LOW = "low"
LEVEL_MEDIUM = "medium"
LEVEL_HIGH = "high"
LEVELS = (LEVEL_LOW, LEVEL_MEDIUM, LEVEL_HIGH)

LOW_UPPER_BOUND = 20
MEDIUM_UPPER_BOUND = 30

# 접두어 → 수준 (대소문자 무시)
_LEVEL_PREFIXES = (
    ("baj", LEVEL_LOW),
    ("low", LEVEL_LOW),
    ("med", LEVEL_MEDIUM),
    ("alt", LEVEL_HIGH),
    ("high", LEVEL_HIGH),
)


def level_from_score(score: Optional[float]) -> Optional[str]:
    if score is None:
        return None
    if score < LOW_UPPER_BOUND:
        return LEVEL_LOW
    if score < MEDIUM_UPPER_BOUND:
        return LEVEL_MEDIUM
    return LEVEL_HIGH


def normalize_level(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    value = raw.strip().lower()
    for prefix, level in _LEVEL_PREFIXES:
        if value.startswith(prefix):
            return level
    return None


def resolve_level(raw: Any, score: Optional[float]) -> Optional[str]:
    return normalize_level(raw) or level_from_score(score)
