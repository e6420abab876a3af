"""
인증 관련 API 라우터 (로그인 흐름은 외부 인증 서비스가 담당)
"""

from fastapi import APIRouter, Depends
from livetranslate.auth.dependencies import get_current_user
from livetranslate.models.user import User
from livetranslate.schemas.user import UserResponse
from livetranslate.logs.logging_util import LoggerSingleton

# 로거 설정
logger = LoggerSingleton.get_logger(logger_name="auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """
    현재 로그인한 사용자 정보 조회

    Args:
        current_user: 현재 사용자 (JWT 토큰에서 추출)

    Returns:
        UserResponse: 사용자 정보
    """
    logger.info(f"User info requested: user_id={current_user.id}")
    return current_user
