from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel
from typing import Any, Dict, Optional
import logging


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class AppException(Exception):
    """애플리케이션 전역에서 사용하는 커스텀 예외.

    - code: 서비스 내 식별 가능한 에러 코드 (예: SESSION_NOT_FOUND)
    - status_code: HTTP 상태 코드
    - message: 사용자에게 전달할 짧은 메시지
    - details: 사용자에게 노출해도 되는 추가 정보 (옵션)
    - log_level: 기록 레벨 (logging.INFO, WARNING, ERROR 등)

    공급자 응답 본문이나 스택트레이스는 details에 넣지 않고 서버 로그에만 남깁니다.
    """

    def __init__(
        self,
        *,
        code: str,
        status_code: int,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        log_level: int = logging.ERROR,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        self.log_level = log_level

    def to_response(self) -> JSONResponse:
        payload = ErrorResponse(code=self.code, message=self.message, details=self.details or None)
        return JSONResponse(status_code=self.status_code, content=payload.model_dump())


class ServiceNotConfigured(AppException):
    """공급자 자격증명이 설정되지 않은 경우 (쓰기/호출 작업은 절대 조용히 넘어가지 않음)"""

    def __init__(self, service: str) -> None:
        super().__init__(
            code="SERVICE_NOT_CONFIGURED",
            status_code=503,
            message=f"{service} is not configured",
            details={"service": service},
            log_level=logging.ERROR,
        )


class UpstreamFailed(AppException):
    """음성/번역/요약 공급자 호출 실패. 재시도나 부분 결과 없음."""

    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(code=code, status_code=502, message=message, log_level=logging.ERROR)


class StorageUnavailable(AppException):
    """데이터베이스에 연결할 수 없는 상태에서의 쓰기 작업"""

    def __init__(self, message: str = "Database not available") -> None:
        super().__init__(
            code="STORAGE_UNAVAILABLE",
            status_code=503,
            message=message,
            log_level=logging.ERROR,
        )


def register_exception_handlers(app) -> None:
    """FastAPI 앱에 전역 예외 핸들러를 등록합니다."""
    logger = logging.getLogger("exception")

    @app.exception_handler(AppException)
    async def handle_app_exception(request: Request, exc: AppException):
        logger.log(exc.log_level, f"AppException: {exc.code} - {exc.message} | path={request.url.path}")
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("ValidationError on %s: %s", request.url.path, exc.errors())
        payload = ErrorResponse(
            code="REQUEST_VALIDATION_ERROR",
            message="Invalid request",
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=422, content=payload.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s: %s", request.url.path, str(exc))
        payload = ErrorResponse(
            code="INTERNAL_SERVER_ERROR",
            message="Internal server error",
            details=None,
        )
        return JSONResponse(status_code=500, content=payload.model_dump())


# 편의 유틸리티: 자주 쓰는 예외 생성기
def BadRequest(message: str, *, code: str = "BAD_REQUEST", details: Optional[Dict[str, Any]] = None) -> AppException:
    return AppException(code=code, status_code=400, message=message, details=details, log_level=logging.WARNING)


def Unauthorized(message: str = "Authentication required", *, code: str = "UNAUTHORIZED", details: Optional[Dict[str, Any]] = None) -> AppException:
    return AppException(code=code, status_code=401, message=message, details=details, log_level=logging.WARNING)


def NotFound(message: str = "Resource not found", *, code: str = "NOT_FOUND", details: Optional[Dict[str, Any]] = None) -> AppException:
    return AppException(code=code, status_code=404, message=message, details=details, log_level=logging.INFO)


def Conflict(message: str = "Conflict", *, code: str = "CONFLICT", details: Optional[Dict[str, Any]] = None) -> AppException:
    return AppException(code=code, status_code=409, message=message, details=details, log_level=logging.WARNING)
