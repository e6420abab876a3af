"""
번역 세션 모델
"""

import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from livetranslate.database import Base
from livetranslate.models.user import utcnow


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"

    @property
    def is_closed(self) -> bool:
        return self is not SessionStatus.ACTIVE

    def can_transition_to(self, target: "SessionStatus") -> bool:
        """active → completed → archived 순서로만 이동 (같은 상태 재설정은 허용)"""
        order = list(SessionStatus)
        return order.index(target) >= order.index(self)


class TranslationSession(Base):
    """사용자가 시작한 하나의 번역 세션"""
    __tablename__ = "sessions"
    __table_args__ = (
        CheckConstraint(
            "status in ('active','completed','archived')",
            name="ck_sessions_status",
        ),
        # ended_at은 종료(completed/archived) 상태에서만 채워짐
        CheckConstraint(
            "(status = 'active' AND ended_at IS NULL) OR "
            "(status <> 'active' AND ended_at IS NOT NULL)",
            name="ck_sessions_ended_at",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    source_language = Column(String(10), nullable=False)  # 예: zh-Hant, en
    target_language = Column(String(10), nullable=False)
    scenario = Column(String(100), nullable=True)  # 예: medical, legal, business
    status = Column(String(20), nullable=False, default=SessionStatus.ACTIVE.value)

    started_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # 관계
    user = relationship("User", back_populates="sessions")
    transcripts = relationship("Transcript", back_populates="session", order_by="Transcript.timestamp")
    summary = relationship("Summary", back_populates="session", uselist=False)

    def __repr__(self):
        return f"<TranslationSession(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
