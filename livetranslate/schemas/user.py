"""
User 관련 Pydantic 스키마
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserResponse(BaseModel):
    id: int
    open_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    created_at: datetime
    last_signed_in: datetime

    class Config:
        from_attributes = True
