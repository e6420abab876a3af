"""
인증 관련 의존성 주입
"""

from datetime import datetime, timezone
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from livetranslate.auth.security import decode_access_token
from livetranslate.config.dependencies import get_session_store, get_settings
from livetranslate.config.exception import Unauthorized
from livetranslate.config.settings import Settings
from livetranslate.models.user import User
from livetranslate.sessions.store import SessionStore

# Bearer 토큰 스키마 (토큰이 없으면 직접 401 처리)
security = HTTPBearer(auto_error=False)


def authenticate_token(token: str, settings: Settings, store: SessionStore) -> User:
    """
    JWT 토큰에서 사용자를 확인하고, 처음 보는 ID면 생성합니다.

    토큰 발급 시각(iat)이 마지막 로그인 시각보다 새로우면 새 로그인으로 보고 갱신합니다.
    외부 ID가 OWNER_OPEN_ID 와 같으면 admin 역할을 부여합니다.

    Raises:
        AppException: 토큰이 유효하지 않은 경우 (401)
    """
    payload = decode_access_token(settings, token)
    if payload is None:
        raise Unauthorized("Invalid authentication credentials", code="INVALID_TOKEN")

    open_id = payload.get("sub")
    if not open_id or not isinstance(open_id, str):
        raise Unauthorized("Invalid authentication credentials", code="INVALID_TOKEN")

    issued_at = payload.get("iat")
    signed_in_at = (
        datetime.fromtimestamp(issued_at, tz=timezone.utc)
        if isinstance(issued_at, (int, float))
        else None
    )
    role = "admin" if settings.owner_open_id and open_id == settings.owner_open_id else None

    return store.upsert_user(
        open_id,
        name=payload.get("name"),
        email=payload.get("email"),
        login_method=payload.get("login_method"),
        role=role,
        signed_in_at=signed_in_at,
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
) -> User:
    """Bearer 토큰으로 현재 사용자 조회"""
    if credentials is None:
        raise Unauthorized()
    return authenticate_token(credentials.credentials, settings, store)
