import logging
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from config.settings import settings
from models.users import ROLE_STUDENT, ROLE_TEACHER
from services.session_codec import read_session

logger = logging.getLogger(__name__)

# 보호 경로 prefix → 필요한 역할
PROTECTED_PREFIXES = {
    "/student": ROLE_STUDENT,
    "/teacher": ROLE_TEACHER,
}


def required_role(path: str):
    for prefix, role in PROTECTED_PREFIXES.items():
        if path == prefix or path.startswith(prefix + "/"):
            return role
    return None


class AuthGateMiddleware(BaseHTTPMiddleware):
    """
    보호 경로 진입 전 세션 검사
    1) 세션 없음/해석 불가 → 로그인 페이지로 (원래 경로를 ?next= 로 보존)
    2) 역할 불일치 → 로그인 페이지로 (상세 사유 노출 없음)
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        role = required_role(path)
        if role is None:
            return await call_next(request)

        sess = read_session(request)
        if sess is None:
            query = urlencode({"next": path})
            return RedirectResponse(f"{settings.LOGIN_PATH}?{query}", status_code=307)

        if sess.role != role:
            logger.info(f"역할 불일치로 리다이렉트: uid={sess.uid} role={sess.role} path={path}")
            return RedirectResponse(settings.LOGIN_PATH, status_code=307)

        request.state.session = sess
        return await call_next(request)
