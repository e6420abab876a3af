"""
번역 세션 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class SessionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="세션 제목")
    source_language: str = Field(..., min_length=1, max_length=10, description="원문 언어 코드")
    target_language: str = Field(..., min_length=1, max_length=10, description="번역 언어 코드")
    scenario: Optional[str] = Field(None, max_length=100, description="도메인 시나리오 (medical, legal ...)")


class SessionCreated(BaseModel):
    session_id: int


class SessionResponse(BaseModel):
    id: int
    user_id: int
    title: str
    source_language: str
    target_language: str
    scenario: Optional[str] = None
    status: Literal["active", "completed", "archived"]
    started_at: datetime
    ended_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SessionListResponse(BaseModel):
    total: int
    sessions: List[SessionResponse]


class SessionEnded(BaseModel):
    success: bool = True
