"""
전사/번역 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class TranslateRequest(BaseModel):
    text: str = Field(..., min_length=1, description="인식된 원문")
    confidence: Optional[int] = Field(None, ge=0, le=100, description="음성 인식 신뢰도 (0-100)")


class TranslateResponse(BaseModel):
    translated_text: str
    confidence: Optional[float] = None  # 번역 공급자 신뢰도 (저장되지 않음)


class TranscriptResponse(BaseModel):
    id: int
    session_id: int
    original_text: str
    translated_text: str
    timestamp: datetime
    confidence: Optional[int] = None

    class Config:
        from_attributes = True
