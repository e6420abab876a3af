"""
사용자(User) 모델
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from livetranslate.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """외부 인증 ID 기준으로 첫 로그인 시 생성되는 사용자"""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role in ('user','admin')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    open_id = Column(String(64), unique=True, nullable=False, index=True)  # 외부 인증 식별자
    name = Column(Text, nullable=True)
    email = Column(String(320), nullable=True)
    login_method = Column(String(64), nullable=True)
    role = Column(String(10), nullable=False, default="user")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    last_signed_in = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # 관계
    sessions = relationship("TranslationSession", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, open_id={self.open_id}, role={self.role})>"
