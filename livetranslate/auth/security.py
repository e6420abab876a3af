"""
JWT 토큰 유틸리티

토큰은 외부 인증(OAuth) 단계에서 발급되며, 이 서비스는 검증만 합니다.
sub 클레임에 외부 인증 ID(open_id)를 담습니다.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from livetranslate.config.settings import Settings
from livetranslate.logs.logging_util import LoggerSingleton

logger = LoggerSingleton.get_logger(logger_name="auth")

ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24 * 7  # 7일


def create_access_token(
    settings: Settings,
    open_id: str,
    *,
    name: Optional[str] = None,
    email: Optional[str] = None,
    login_method: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """JWT 액세스 토큰 생성"""
    now = datetime.now(timezone.utc)
    to_encode: Dict[str, Any] = {
        "sub": open_id,
        "iat": int(now.timestamp()),
        "exp": now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    for claim, value in (("name", name), ("email", email), ("login_method", login_method)):
        if value is not None:
            to_encode[claim] = value

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Optional[dict]:
    """JWT 토큰 디코딩 및 검증 (실패 시 None)"""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"JWT decode failed: {str(e)}")
        return None
