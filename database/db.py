import logging
from typing import Generator

from sqlalchemy import create_engine               # SQLAlchemy 엔진 생성 도구
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config.settings import settings               # ✅ 환경변수 설정 파일 불러오기

logger = logging.getLogger(__name__)


def _build_engine(url: str):
    # ✅ sqlite(테스트/로컬)는 스레드 공유 + 단일 커넥션으로 고정
    #    (in-memory DB는 커넥션마다 별도 DB가 되므로 StaticPool 필요)
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, pool_pre_ping=True, pool_recycle=3600)


# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성
engine = _build_engine(settings.DATABASE_URL)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """요청 단위 DB 세션 (FastAPI Depends 용)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """모든 모델 테이블 생성 (마이그레이션 도구는 범위 밖)"""
    import models  # noqa: F401  모델 등록용

    Base.metadata.create_all(bind=engine)
    logger.info("DB 테이블 확인/생성 완료")
