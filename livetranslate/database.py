"""
데이터베이스 설정 및 세션 팩토리
"""

from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base 클래스
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """SQLAlchemy 엔진 생성 (SQLite 메모리 DB는 단일 커넥션 공유)"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(
        database_url,
        pool_pre_ping=True,  # 연결 체크
        pool_size=10,
        max_overflow=20,
    )


def build_session_factory(database_url: Optional[str]) -> Optional[sessionmaker]:
    """DATABASE_URL이 없으면 None을 반환 (저장소는 '사용 불가' 상태로 동작)"""
    if not database_url:
        return None
    engine = build_engine(database_url)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(session_factory: Optional[sessionmaker]) -> None:
    """모델 테이블 생성"""
    if session_factory is None:
        return
    # 모델 모듈을 import 해야 metadata에 테이블이 등록됨
    from livetranslate.models import user, session, transcript, summary  # noqa: F401

    Base.metadata.create_all(bind=session_factory.kw["bind"])
