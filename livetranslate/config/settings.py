#####################################################
#                                                   #
#                 서비스 설정 정의                     #
#                                                   #
#####################################################

from dataclasses import dataclass
from typing import Optional
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

INSECURE_JWT_SECRET = "your-secret-key-change-in-production"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(frozen=True)
class Settings:
    """프로세스 시작 시 한 번 만들어 클라이언트 컨테이너를 통해 주입하는 설정 객체"""

    database_url: Optional[str] = None

    # Azure Speech (브라우저/서버 SDK용 토큰 발급)
    speech_key: Optional[str] = None
    speech_region: Optional[str] = None

    # Azure Translator
    translator_key: Optional[str] = None
    translator_endpoint: Optional[str] = None
    translator_region: Optional[str] = None

    # 요약 LLM (Azure OpenAI 우선, 없으면 OpenAI)
    azure_openai_key: Optional[str] = None
    azure_openai_endpoint: Optional[str] = None
    azure_openai_deployment: Optional[str] = None
    azure_openai_api_version: str = "2024-06-01"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    summary_language: str = "Traditional Chinese"

    # 인증
    jwt_secret_key: str = INSECURE_JWT_SECRET
    jwt_algorithm: str = "HS256"
    owner_open_id: Optional[str] = None

    http_timeout: float = 10.0
    log_level: str = "INFO"

    @property
    def speech_configured(self) -> bool:
        return bool(self.speech_key and self.speech_region)

    @property
    def translator_configured(self) -> bool:
        return bool(self.translator_key and self.translator_endpoint)

    @property
    def summary_model(self) -> str:
        # Azure OpenAI는 model 자리에 배포 이름을 넘깁니다
        if self.azure_openai_endpoint and self.azure_openai_deployment:
            return self.azure_openai_deployment
        return self.openai_model

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        database_url = _env("DATABASE_URL")
        # Railway PostgreSQL은 postgres://로 시작하는데, SQLAlchemy는 postgresql://을 사용
        if database_url and database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql://", 1)

        jwt_secret_key = _env("JWT_SECRET_KEY")
        if not jwt_secret_key:
            logger.error("JWT_SECRET_KEY not set! Using default key. This is INSECURE!")
            jwt_secret_key = INSECURE_JWT_SECRET

        return cls(
            database_url=database_url,
            speech_key=_env("AZURE_SPEECH_KEY"),
            speech_region=_env("AZURE_SPEECH_REGION"),
            translator_key=_env("AZURE_TRANSLATOR_KEY"),
            translator_endpoint=_env("AZURE_TRANSLATOR_ENDPOINT"),
            translator_region=_env("AZURE_TRANSLATOR_REGION"),
            azure_openai_key=_env("AZURE_OPENAI_KEY"),
            azure_openai_endpoint=_env("AZURE_OPENAI_ENDPOINT"),
            azure_openai_deployment=_env("AZURE_OPENAI_DEPLOYMENT"),
            azure_openai_api_version=_env("AZURE_OPENAI_API_VERSION", "2024-06-01"),
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_model=_env("OPENAI_MODEL", "gpt-4o-mini"),
            summary_language=_env("SUMMARY_LANGUAGE", "Traditional Chinese"),
            jwt_secret_key=jwt_secret_key,
            jwt_algorithm=_env("JWT_ALGORITHM", "HS256"),
            owner_open_id=_env("OWNER_OPEN_ID"),
            http_timeout=float(_env("HTTP_TIMEOUT_SECONDS", "10")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )
