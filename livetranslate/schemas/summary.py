"""
요약 / 카탈로그 스키마
"""

from pydantic import BaseModel
from datetime import datetime


class SummaryResponse(BaseModel):
    id: int
    session_id: int
    summary_text: str
    created_at: datetime

    class Config:
        from_attributes = True


class SummaryGenerated(BaseModel):
    summary: str


class CatalogItem(BaseModel):
    code: str
    name: str


class SpeechTokenResponse(BaseModel):
    token: str
    region: str
