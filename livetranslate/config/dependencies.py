#####################################################
#                                                   #
#                의존성 주입 함수 정의                 #
#                                                   #
#####################################################

from typing import Callable, Optional
from starlette.requests import HTTPConnection
from livetranslate.config.settings import Settings
from livetranslate.sessions.orchestrator import SessionOrchestrator
from livetranslate.sessions.store import SessionStore
from livetranslate.speech.capture import SpeechCaptureAdapter
from livetranslate.speech.token import SpeechCredential, SpeechTokenIssuer

##### 클라이언트 의존성 주입 함수 정의 #####
# app.py lifespan 에서 초기화된 클라이언트를 반환
# HTTP 요청과 WebSocket 모두에서 쓰이므로 HTTPConnection 으로 받음


def get_settings(conn: HTTPConnection) -> Settings:
    return conn.app.state.client_container.settings


def get_session_store(conn: HTTPConnection) -> SessionStore:
    return conn.app.state.client_container.session_store


def get_orchestrator(conn: HTTPConnection) -> SessionOrchestrator:
    return conn.app.state.client_container.orchestrator


def get_speech_token_issuer(conn: HTTPConnection) -> SpeechTokenIssuer:
    return conn.app.state.client_container.speech_token_issuer


# 서버 측 음성 캡처 어댑터 생성기
def get_capture_factory() -> Callable[[Optional[SpeechCredential]], SpeechCaptureAdapter]:
    return SpeechCaptureAdapter
