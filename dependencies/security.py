from typing import Optional, Annotated
from fastapi import Header, Request
from config.settings import settings
from models.users import ROLE_STUDENT, ROLE_TEACHER
from services.session_codec import SessionClaims, read_session
from utils.errors import Forbidden, NotAuthenticated, ServerMisconfigured
import hmac

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


# ==========================================================
# [세션 기반 역할 검사] /api/student, /api/teacher 라우터용
# ==========================================================

def current_session(request: Request) -> SessionClaims:
    sess = read_session(request)
    if sess is None:
        raise NotAuthenticated("Not authenticated. Please log in.", reason="no-session")
    return sess


def _require_role(request: Request, role: str) -> SessionClaims:
    sess = current_session(request)
    if sess.role != role:
        raise Forbidden(f"This resource requires the '{role}' role")
    return sess


def require_student(request: Request) -> SessionClaims:
    return _require_role(request, ROLE_STUDENT)


def require_teacher(request: Request) -> SessionClaims:
    return _require_role(request, ROLE_TEACHER)


# ==========================================================
# [외부 설문 인입 토큰] Authorization: Bearer <INTAKE_TOKEN>
# ==========================================================

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _bearer_token(authorization: Optional[str]) -> str:
    """'Bearer <token>' 헤더에서 토큰만 추출 (형식 오류는 401)"""
    if not authorization:
        raise NotAuthenticated("Missing Authorization header", headers=_BEARER_CHALLENGE)

    scheme, _, token = authorization.partition(" ")
    if not token.strip():
        raise NotAuthenticated("Invalid Authorization header format", headers=_BEARER_CHALLENGE)
    if scheme.lower() != "bearer":
        raise NotAuthenticated("Invalid auth scheme", headers=_BEARER_CHALLENGE)
    return token.strip()


def require_intake_token(authorization: AuthHeader = None):
    if not settings.INTAKE_TOKEN:
        raise ServerMisconfigured("Intake token not configured")

    # 타이밍 안전 비교
    token = _bearer_token(authorization)
    if not hmac.compare_digest(token.encode("utf-8"), settings.INTAKE_TOKEN.encode("utf-8")):
        raise NotAuthenticated("Invalid intake token", headers=_BEARER_CHALLENGE)

    return {"client": "intake"}
