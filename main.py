import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from database.db import init_db

# ✅ 로깅 설정 (레벨은 .env 의 LOG_LEVEL)
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# HTTP 라이브러리 디버그 로그 비활성화
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


# ✅ 미들웨어 임포트
from middlewares.auth_gate import AuthGateMiddleware
from middlewares.error_handler import add_error_handlers
from middlewares.timing import TimingMiddleware

# ✅ 라우터 임포트
from routers import auth, dashboards, groups, intake, student, teacher


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Personality Profile API...")
    init_db()
    yield
    logger.info("Shutting down Personality Profile API...")


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# ✅ 보호 경로(/student, /teacher) 세션 게이트
app.add_middleware(AuthGateMiddleware)

# ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
app.add_middleware(TimingMiddleware)

# ✅ CORS 설정 (가장 바깥에 등록, 쿠키 세션이므로 allow_credentials 필요)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
add_error_handlers(app)

# ✅ /api 프리픽스 라우터 등록
app.include_router(auth.router,     prefix="/api")
app.include_router(groups.router,   prefix="/api")
app.include_router(student.router,  prefix="/api")
app.include_router(teacher.router,  prefix="/api")
app.include_router(intake.router,   prefix="/api")

# ✅ 역할별 홈 (게이트 보호 경로)
app.include_router(dashboards.router)


# ✅ 헬스체크 엔드포인트
@app.get("/health")
def health_check():
    return {"ok": True, "status": "ok", "message": "API is running"}


# ✅ 루트 엔드포인트
@app.get("/")
def root():
    return {"ok": True, "name": settings.APP_TITLE, "version": settings.APP_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
