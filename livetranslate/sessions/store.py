"""
세션/전사/요약 저장소

저장소 자체는 소유권을 검사하지 않습니다. 소유권 확인은 오케스트레이터 책임입니다.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from functools import wraps
from typing import Callable, Iterator, List, Optional
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from livetranslate.config.exception import StorageUnavailable
from livetranslate.database import init_db
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.models.session import SessionStatus, TranslationSession
from livetranslate.models.summary import Summary
from livetranslate.models.transcript import Transcript
from livetranslate.models.user import User, utcnow

logger = LoggerSingleton.get_logger(logger_name="sessions")


class StorePolicy(str, Enum):
    """DB를 사용할 수 없을 때의 동작"""
    DEGRADE = "degrade"  # 읽기: 빈 결과 반환
    FAIL = "fail"        # 쓰기: StorageUnavailable 발생


# 작업별 정책 (읽기는 조용히 비우고, 쓰기는 절대 조용히 버리지 않음)
OPERATION_POLICIES = {
    "get_session": StorePolicy.DEGRADE,
    "list_sessions": StorePolicy.DEGRADE,
    "list_transcripts": StorePolicy.DEGRADE,
    "get_summary": StorePolicy.DEGRADE,
    "create_session": StorePolicy.FAIL,
    "update_session": StorePolicy.FAIL,
    "append_transcript": StorePolicy.FAIL,
    "upsert_summary": StorePolicy.FAIL,
    "upsert_user": StorePolicy.FAIL,
}

UPDATABLE_SESSION_FIELDS = {"status", "ended_at"}


def store_operation(empty: Callable[[], object] = lambda: None):
    """OPERATION_POLICIES에 따라 DB 사용 불가 상황을 처리하는 데코레이터"""

    def decorator(fn):
        policy = OPERATION_POLICIES[fn.__name__]

        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            try:
                return fn(self, *args, **kwargs)
            except (StorageUnavailable, OperationalError, InterfaceError) as e:
                if policy is StorePolicy.DEGRADE:
                    logger.warning(f"[Database] Cannot {fn.__name__}: database not available ({e})")
                    return empty()
                logger.error(f"[Database] {fn.__name__} failed: database not available ({e})")
                if isinstance(e, StorageUnavailable):
                    raise
                raise StorageUnavailable() from e

        wrapper.policy = policy
        return wrapper

    return decorator


class SessionStore:
    """sessions / transcripts / summaries / users 테이블 접근 계층"""

    def __init__(self, session_factory: Optional[sessionmaker], schema_ready: bool = False):
        self._session_factory = session_factory
        self._schema_ready = schema_ready

    @property
    def available(self) -> bool:
        return self._session_factory is not None

    def ensure_schema(self) -> bool:
        """테이블 생성. 시작 시 DB에 연결하지 못했으면 다음 작업에서 다시 시도"""
        if self._session_factory is None:
            return False
        if not self._schema_ready:
            try:
                init_db(self._session_factory)
            except (OperationalError, InterfaceError) as e:
                logger.warning(f"[Database] Cannot create tables: database not available ({e})")
                return False
            self._schema_ready = True
        return True

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if not self.ensure_schema():
            raise StorageUnavailable()
        db = self._session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    ##### 사용자 #####

    @store_operation()
    def upsert_user(
        self,
        open_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        login_method: Optional[str] = None,
        role: Optional[str] = None,
        signed_in_at: Optional[datetime] = None,
    ) -> User:
        """없으면 생성, 있으면 전달된 필드와 마지막 로그인 시각을 갱신"""
        if not open_id:
            raise ValueError("User open_id is required for upsert")
        signed_in_at = signed_in_at or utcnow()

        with self._session() as db:
            user = db.query(User).filter(User.open_id == open_id).first()
            if user is None:
                user = User(
                    open_id=open_id,
                    name=name,
                    email=email,
                    login_method=login_method,
                    role=role or "user",
                    last_signed_in=signed_in_at,
                )
                db.add(user)
                try:
                    db.commit()
                except IntegrityError:
                    # 같은 ID로 동시에 첫 로그인한 경우
                    db.rollback()
                    user = db.query(User).filter(User.open_id == open_id).one()
                else:
                    db.refresh(user)
                    logger.info(f"User created: id={user.id}, open_id={open_id}")
                    return user

            changed = False
            for field, value in (("name", name), ("email", email), ("login_method", login_method), ("role", role)):
                if value is not None and getattr(user, field) != value:
                    setattr(user, field, value)
                    changed = True
            if _as_aware(user.last_signed_in) < _as_aware(signed_in_at):
                user.last_signed_in = signed_in_at
                changed = True
            if changed:
                db.commit()
                db.refresh(user)
            return user

    ##### 세션 #####

    @store_operation()
    def create_session(
        self,
        owner_id: int,
        title: str,
        source_language: str,
        target_language: str,
        scenario: Optional[str] = None,
    ) -> int:
        with self._session() as db:
            record = TranslationSession(
                user_id=owner_id,
                title=title,
                source_language=source_language,
                target_language=target_language,
                scenario=scenario,
                status=SessionStatus.ACTIVE.value,
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            return record.id

    @store_operation()
    def get_session(self, session_id: int) -> Optional[TranslationSession]:
        with self._session() as db:
            return db.query(TranslationSession).filter(TranslationSession.id == session_id).first()

    @store_operation(empty=list)
    def list_sessions(self, owner_id: int) -> List[TranslationSession]:
        with self._session() as db:
            return (
                db.query(TranslationSession)
                .filter(TranslationSession.user_id == owner_id)
                .order_by(TranslationSession.started_at.asc(), TranslationSession.id.asc())
                .all()
            )

    @store_operation()
    def update_session(self, session_id: int, **fields) -> None:
        """상태 전환에만 쓰이는 부분 업데이트 (단일 UPDATE 문)"""
        unknown = set(fields) - UPDATABLE_SESSION_FIELDS
        if unknown:
            raise ValueError(f"Cannot update session fields: {sorted(unknown)}")
        if "status" in fields:
            fields["status"] = SessionStatus(fields["status"]).value
        fields["updated_at"] = utcnow()

        with self._session() as db:
            db.query(TranslationSession).filter(TranslationSession.id == session_id).update(
                fields, synchronize_session=False
            )
            db.commit()

    ##### 전사 #####

    @store_operation()
    def append_transcript(
        self,
        session_id: int,
        original_text: str,
        translated_text: str,
        confidence: Optional[int] = None,
    ) -> Transcript:
        with self._session() as db:
            record = Transcript(
                session_id=session_id,
                original_text=original_text,
                translated_text=translated_text,
                confidence=confidence,
            )
            db.add(record)
            db.commit()
            db.refresh(record)
            return record

    @store_operation(empty=list)
    def list_transcripts(self, session_id: int) -> List[Transcript]:
        with self._session() as db:
            return (
                db.query(Transcript)
                .filter(Transcript.session_id == session_id)
                .order_by(Transcript.timestamp.asc(), Transcript.id.asc())
                .all()
            )

    ##### 요약 #####

    @store_operation()
    def get_summary(self, session_id: int) -> Optional[Summary]:
        with self._session() as db:
            return db.query(Summary).filter(Summary.session_id == session_id).first()

    @store_operation()
    def upsert_summary(self, session_id: int, summary_text: str) -> Summary:
        """요약 저장. 이미 있으면 (유니크 제약 충돌 포함) 기존 요약을 그대로 반환"""
        with self._session() as db:
            existing = db.query(Summary).filter(Summary.session_id == session_id).first()
            if existing is not None:
                return existing

            record = Summary(session_id=session_id, summary_text=summary_text)
            db.add(record)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.info(f"Summary already stored concurrently: session_id={session_id}")
                return db.query(Summary).filter(Summary.session_id == session_id).one()
            db.refresh(record)
            return record


def _as_aware(value: datetime) -> datetime:
    # SQLite는 tzinfo를 버리므로 비교 전에 UTC로 맞춤
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
