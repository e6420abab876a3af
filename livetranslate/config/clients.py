#####################################################
#                                                   #
#               클라이언트 의존성 정의                 #
#                                                   #
#####################################################

from typing import Optional
import httpx
from langsmith.wrappers import wrap_openai
from openai import AsyncAzureOpenAI, AsyncOpenAI
from livetranslate.config.settings import Settings
from livetranslate.database import build_session_factory
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.sessions.orchestrator import SessionOrchestrator
from livetranslate.sessions.store import SessionStore
from livetranslate.speech.token import SpeechTokenIssuer
from livetranslate.summary.generator import SummaryGenerator
from livetranslate.translation.gateway import TranslationGateway

logger = LoggerSingleton.get_logger(logger_name="app")


# 모든 클라이언트 인스턴스를 담을 컨테이너 클래스
class ClientContainer:
    def __init__(self):
        self.settings: Optional[Settings] = None
        self.http_client: Optional[httpx.AsyncClient] = None
        self.openai_client = None
        self.session_store: Optional[SessionStore] = None
        self.translation_gateway: Optional[TranslationGateway] = None
        self.speech_token_issuer: Optional[SpeechTokenIssuer] = None
        self.summary_generator: Optional[SummaryGenerator] = None
        self.orchestrator: Optional[SessionOrchestrator] = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
        if self.openai_client is not None:
            await self.openai_client.close()


def build_openai_client(settings: Settings):
    """Azure OpenAI 설정이 있으면 우선 사용, 없으면 OpenAI, 둘 다 없으면 None"""
    if settings.azure_openai_endpoint and settings.azure_openai_key and settings.azure_openai_deployment:
        client = AsyncAzureOpenAI(
            api_key=settings.azure_openai_key,
            azure_endpoint=settings.azure_openai_endpoint,
            api_version=settings.azure_openai_api_version,
        )
    elif settings.openai_api_key:
        client = AsyncOpenAI(api_key=settings.openai_api_key)
    else:
        logger.warning("No summary LLM configured; summary generation will be unavailable")
        return None
    # LANGSMITH_TRACING 환경변수가 켜져 있으면 요약 호출이 추적됨
    return wrap_openai(client)


# 클라이언트들을 초기화하는 함수
def initialize_clients(settings: Settings) -> ClientContainer:
    container = ClientContainer()
    container.settings = settings
    LoggerSingleton.set_level(settings.log_level)
    container.http_client = httpx.AsyncClient(timeout=settings.http_timeout)
    container.openai_client = build_openai_client(settings)

    session_factory = build_session_factory(settings.database_url)
    container.session_store = SessionStore(session_factory)
    if session_factory is None:
        logger.warning("DATABASE_URL not set; reads return empty results and writes fail")
    elif not container.session_store.ensure_schema():
        # 연결 실패로 앱을 멈추지 않음. 테이블 생성은 이후 작업에서 다시 시도
        logger.warning("Database not reachable at startup; continuing without storage until it recovers")

    container.translation_gateway = TranslationGateway(settings, container.http_client)
    container.speech_token_issuer = SpeechTokenIssuer(settings, container.http_client)
    container.summary_generator = SummaryGenerator(
        container.openai_client,
        model=settings.summary_model,
        language=settings.summary_language,
    )
    container.orchestrator = SessionOrchestrator(
        container.session_store,
        container.translation_gateway,
        container.summary_generator,
    )
    return container
