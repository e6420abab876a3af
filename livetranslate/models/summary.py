"""
세션 요약 모델
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from livetranslate.database import Base
from livetranslate.models.user import utcnow


class Summary(Base):
    """세션당 최대 하나의 AI 요약 (생성 후 변경 불가)"""
    __tablename__ = "summaries"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), unique=True, nullable=False)
    summary_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    session = relationship("TranslationSession", back_populates="summary")

    def __repr__(self):
        return f"<Summary(id={self.id}, session_id={self.session_id})>"
