"""
전사(Transcript) 모델 - 인식된 발화 하나와 그 번역
"""

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from livetranslate.database import Base
from livetranslate.models.user import utcnow


class Transcript(Base):
    """세션별 발화 기록 테이블 (추가 전용)"""
    __tablename__ = "transcripts"
    __table_args__ = (
        CheckConstraint(
            "confidence IS NULL OR (confidence >= 0 AND confidence <= 100)",
            name="ck_transcripts_confidence",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    original_text = Column(Text, nullable=False)
    translated_text = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    confidence = Column(Integer, nullable=True)  # 음성 인식 신뢰도 0-100 (번역 신뢰도 아님)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    session = relationship("TranslationSession", back_populates="transcripts")

    def __repr__(self):
        return f"<Transcript(id={self.id}, session_id={self.session_id})>"
