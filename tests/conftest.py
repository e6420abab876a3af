import json
from types import SimpleNamespace

import azure.cognitiveservices.speech as speechsdk
import pytest
from fastapi.testclient import TestClient

from livetranslate.app import app
from livetranslate.auth.security import create_access_token
from livetranslate.config.clients import ClientContainer
from livetranslate.config.settings import Settings
from livetranslate.database import build_session_factory, init_db
from livetranslate.sessions.orchestrator import SessionOrchestrator
from livetranslate.sessions.store import SessionStore
from livetranslate.speech.token import SpeechCredential
from livetranslate.translation.gateway import TranslationResult


class FakeTranslator:
    def __init__(self, translations=None, confidence=None):
        self.translations = translations or {}
        self.confidence = confidence
        self.calls = []

    async def translate(self, text, source_language, target_language, scenario=None):
        self.calls.append((text, source_language, target_language, scenario))
        return TranslationResult(
            translated_text=self.translations.get(text, f"<{target_language}>{text}"),
            confidence=self.confidence,
        )


class FakeSummarizer:
    def __init__(self, text="Key points: greeting."):
        self.text = text
        self.calls = []

    async def summarize(self, transcript_lines):
        self.calls.append(list(transcript_lines))
        return self.text


class FakeTokenIssuer:
    def __init__(self):
        self.issued = 0

    async def issue(self):
        self.issued += 1
        return SpeechCredential(token="speech-token", region="eastasia")


##### 음성 SDK 대역 #####

class FakeSignal:
    def __init__(self):
        self.handlers = []

    def connect(self, handler):
        self.handlers.append(handler)

    def fire(self, evt):
        for handler in self.handlers:
            handler(evt)


class FakeFuture:
    def __init__(self, action=None):
        self.action = action

    def get(self):
        if self.action:
            self.action()


class FakeProperties:
    def __init__(self, payload):
        self.payload = payload

    def get(self, key, default=""):
        return self.payload if self.payload is not None else default


class FakeRecognizer:
    def __init__(self):
        self.recognizing = FakeSignal()
        self.recognized = FakeSignal()
        self.canceled = FakeSignal()
        self.session_stopped = FakeSignal()
        self.started = False
        self.stopped = False

    def start_continuous_recognition_async(self):
        return FakeFuture(lambda: setattr(self, "started", True))

    def stop_continuous_recognition_async(self):
        return FakeFuture(lambda: setattr(self, "stopped", True))

    def emit_interim(self, text):
        result = SimpleNamespace(reason=speechsdk.ResultReason.RecognizingSpeech, text=text)
        self.recognizing.fire(SimpleNamespace(result=result))

    def emit_final(self, text, confidence=None):
        payload = json.dumps({"NBest": [{"Confidence": confidence}]}) if confidence is not None else "not json"
        result = SimpleNamespace(
            reason=speechsdk.ResultReason.RecognizedSpeech,
            text=text,
            properties=FakeProperties(payload),
        )
        self.recognized.fire(SimpleNamespace(result=result))

    def emit_no_match(self):
        result = SimpleNamespace(reason=speechsdk.ResultReason.NoMatch, text="", properties=FakeProperties(None))
        self.recognized.fire(SimpleNamespace(result=result))

    def emit_cancel(self, error_details):
        details = SimpleNamespace(reason=speechsdk.CancellationReason.Error, error_details=error_details)
        self.canceled.fire(SimpleNamespace(cancellation_details=details))


class FakeAudioStream:
    def __init__(self, on_write=None):
        self.chunks = []
        self.closed = False
        self.on_write = on_write

    def write(self, chunk):
        self.chunks.append(chunk)
        if self.on_write:
            self.on_write(chunk)

    def close(self):
        self.closed = True


class FakeRecognizerFactory:
    """인식기 생성 인자를 기록하고, 오디오가 들어오면 script(recognizer, chunk)를 실행"""

    def __init__(self, script=None):
        self.script = script
        self.calls = []
        self.recognizer = None
        self.audio_stream = None

    def __call__(self, credential, language):
        self.calls.append((credential, language))
        self.recognizer = FakeRecognizer()
        recognizer = self.recognizer
        on_write = (lambda chunk: self.script(recognizer, chunk)) if self.script else None
        self.audio_stream = FakeAudioStream(on_write)
        return self.recognizer, self.audio_stream


##### 픽스처 #####

@pytest.fixture
def settings():
    return Settings(
        jwt_secret_key="test-secret",
        speech_key="speech-key",
        speech_region="eastasia",
        translator_key="translator-key",
        translator_endpoint="https://translator.test",
        translator_region="eastasia",
    )


@pytest.fixture
def store():
    session_factory = build_session_factory("sqlite://")
    init_db(session_factory)
    return SessionStore(session_factory)


@pytest.fixture
def owner(store):
    return store.upsert_user("owner-open-id", name="Owner")


@pytest.fixture
def stranger(store):
    return store.upsert_user("stranger-open-id", name="Stranger")


@pytest.fixture
def translator():
    return FakeTranslator(translations={"Hello": "你好"}, confidence=0.91)


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def orchestrator(store, translator, summarizer):
    return SessionOrchestrator(store, translator, summarizer)


@pytest.fixture
def container(settings, store, translator, summarizer, orchestrator):
    container = ClientContainer()
    container.settings = settings
    container.session_store = store
    container.translation_gateway = translator
    container.summary_generator = summarizer
    container.speech_token_issuer = FakeTokenIssuer()
    container.orchestrator = orchestrator
    return container


@pytest.fixture
def client(container):
    app.state.client_container = container
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(settings):
    def make(open_id="owner-open-id", **claims):
        token = create_access_token(settings, open_id, **claims)
        return {"Authorization": f"Bearer {token}"}

    return make
