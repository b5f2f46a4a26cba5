"""
세션 쿠키 인코딩/디코딩

- 클레임: {uid, role}
- 토큰: itsdangerous URLSafeSerializer (base64url JSON + "." + 서명)
  → 값 자체는 되돌릴 수 있지만 서명이 맞지 않으면 decode가 None을 반환한다.
- 만료 필드는 없음 (쿠키 max-age 로만 수명 제한)
"""
from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadData, URLSafeSerializer
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from models.users import ROLES

SESSION_SALT = "psess"

serializer = URLSafeSerializer(settings.SESSION_SECRET, salt=SESSION_SALT)


@dataclass(frozen=True)
class SessionClaims:
    uid: int
    role: str

    def to_dict(self) -> dict:
        return {"uid": self.uid, "role": self.role}


def _serializer(secret: Optional[str]) -> URLSafeSerializer:
    if not secret:
        return serializer
    return URLSafeSerializer(secret, salt=SESSION_SALT)


def encode(claims: SessionClaims, secret: Optional[str] = None) -> str:
    return _serializer(secret).dumps(claims.to_dict())


def decode(token: Optional[str], secret: Optional[str] = None) -> Optional[SessionClaims]:
    """잘못된 토큰이면 예외 대신 None"""
    if not token:
        return None

    try:
        data = _serializer(secret).loads(token)
    except BadData:
        # 서명 불일치(BadSignature) / 페이로드 해석 실패(BadPayload)
        return None

    if not isinstance(data, dict):
        return None
    uid, role = data.get("uid"), data.get("role")
    if not isinstance(uid, int) or isinstance(uid, bool) or role not in ROLES:
        return None
    return SessionClaims(uid=uid, role=role)


# ==========================================================
# [쿠키 입출력]
# ==========================================================

def read_session(request: Request) -> Optional[SessionClaims]:
    return decode(request.cookies.get(settings.SESSION_COOKIE_NAME))


def set_session_cookie(response: Response, claims: SessionClaims) -> Response:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=encode(claims),
        max_age=settings.SESSION_MAX_AGE,   # 7일
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response


def clear_session_cookie(response: Response) -> Response:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value="",
        max_age=0,                           # 즉시 삭제
        path="/",
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return response
