"""
연속 음성 인식 스트림 어댑터

SDK의 콜백(recognizing / recognized / canceled / session_stopped)을
명시적인 비동기 이벤트 스트림으로 바꿉니다.

    adapter = SpeechCaptureAdapter(credential)
    await adapter.start("zh-Hant")
    adapter.push_audio(pcm_chunk)
    async for event in adapter.events():
        ...
    await adapter.stop()

이벤트는 Interim → ... → Final 순으로 발화 단위로 도착하며, 스트림 끝에는
항상 Ended 하나가 옵니다. 취소(네트워크 끊김, 토큰 만료)는 Error 후 Ended 로
끝나고 자동 재연결은 하지 않습니다.
"""

from __future__ import annotations

import asyncio
import json
import math
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional, Tuple, Union
import azure.cognitiveservices.speech as speechsdk
from livetranslate.config.exception import UpstreamFailed, Unauthorized
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.speech.token import SpeechCredential

logger = LoggerSingleton.get_logger(logger_name="speech")

# 번역 언어 코드 → 음성 인식 SDK 지역 코드
DIALECT_MAP = {
    "zh-Hant": "zh-TW",
}


@dataclass(frozen=True)
class Interim:
    text: str


@dataclass(frozen=True)
class Final:
    text: str
    confidence: Optional[int] = None


@dataclass(frozen=True)
class Error:
    reason: str


@dataclass(frozen=True)
class Ended:
    pass


RecognitionEvent = Union[Interim, Final, Error, Ended]

RecognizerFactory = Callable[[SpeechCredential, str], Tuple[Any, Any]]


def map_dialect(language_code: str) -> str:
    return DIALECT_MAP.get(language_code, language_code)


def parse_confidence(payload: Optional[str]) -> Optional[int]:
    """상세 JSON 결과의 NBest[0].Confidence(0~1)를 0~100 정수로 변환.

    파싱 실패는 오류가 아니라 '신뢰도 없음'(None)으로 처리합니다.
    """
    try:
        raw = json.loads(payload)["NBest"][0]["Confidence"]
    except (TypeError, ValueError, KeyError, IndexError) as e:
        logger.debug(f"Failed to parse confidence: {e}")
        return None

    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        return None
    # 0.5 단위는 올림 (Math.round 와 동일)
    return math.floor(min(1.0, max(0.0, raw)) * 100 + 0.5)


def build_azure_recognizer(credential: SpeechCredential, language: str) -> Tuple[Any, Any]:
    """토큰 기반 SpeechConfig + push 오디오 스트림(16kHz 16bit mono PCM)으로 인식기 생성"""
    speech_config = speechsdk.SpeechConfig(auth_token=credential.token, region=credential.region)
    speech_config.speech_recognition_language = language
    # NBest 신뢰도가 포함된 상세 결과
    speech_config.output_format = speechsdk.OutputFormat.Detailed

    audio_stream = speechsdk.audio.PushAudioInputStream()
    audio_config = speechsdk.audio.AudioConfig(stream=audio_stream)
    recognizer = speechsdk.SpeechRecognizer(speech_config=speech_config, audio_config=audio_config)
    return recognizer, audio_stream


class SpeechCaptureAdapter:
    """한 번만 시작/소비할 수 있는 연속 인식 스트림"""

    def __init__(
        self,
        credential: Optional[SpeechCredential],
        recognizer_factory: RecognizerFactory = build_azure_recognizer,
    ):
        self.credential = credential
        self._recognizer_factory = recognizer_factory
        self._recognizer = None
        self._audio_stream = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._started = False
        self._stopping = False
        self._closed = False
        self._consumed = False

    async def start(self, language_code: str) -> None:
        if self._started:
            raise RuntimeError("Capture stream already started; streams are not restartable")
        if self.credential is None or not self.credential.token:
            logger.error("Speech token not available")
            raise Unauthorized("Speech token not available", code="SPEECH_NOT_AUTHORIZED")

        language = map_dialect(language_code)
        self._loop = asyncio.get_running_loop()
        self._recognizer, self._audio_stream = self._recognizer_factory(self.credential, language)

        self._recognizer.recognizing.connect(self._on_recognizing)
        self._recognizer.recognized.connect(self._on_recognized)
        self._recognizer.canceled.connect(self._on_canceled)
        self._recognizer.session_stopped.connect(self._on_session_stopped)
        self._started = True

        try:
            await asyncio.to_thread(lambda: self._recognizer.start_continuous_recognition_async().get())
        except Exception as e:
            logger.exception("Failed to start recognition")
            self._put(Error(reason=str(e)))
            self._put(Ended())
            self._release()
            raise UpstreamFailed("Failed to start speech recognition", code="SPEECH_START_FAILED") from e

        logger.info(f"Speech recognition started: language={language}")

    def push_audio(self, chunk: bytes) -> None:
        if not self._started:
            raise RuntimeError("Capture stream not started")
        if self._stopping or self._closed or self._audio_stream is None:
            return
        self._audio_stream.write(chunk)

    def events(self) -> AsyncIterator[RecognitionEvent]:
        if self._consumed:
            raise RuntimeError("Recognition events can only be consumed once")
        self._consumed = True
        return self._drain()

    async def _drain(self) -> AsyncIterator[RecognitionEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if isinstance(event, Ended):
                return

    async def stop(self) -> None:
        """인식 중지. 시작 전이거나 이미 중지된 경우 아무 것도 하지 않음"""
        if not self._started or self._stopping:
            return
        self._stopping = True

        recognizer = self._recognizer
        if recognizer is not None and not self._closed:
            try:
                await asyncio.to_thread(lambda: recognizer.stop_continuous_recognition_async().get())
            except Exception:
                logger.exception("Failed to stop recognition")

        self._release()
        self._put(Ended())
        logger.info("Speech recognition stopped")

    def _release(self) -> None:
        if self._audio_stream is not None:
            try:
                self._audio_stream.close()
            except Exception:
                logger.exception("Failed to close audio stream")
        self._audio_stream = None
        self._recognizer = None

    ##### SDK 콜백 (SDK 스레드에서 호출됨) #####

    def _on_recognizing(self, evt) -> None:
        if evt.result.reason == speechsdk.ResultReason.RecognizingSpeech:
            self._dispatch(Interim(text=evt.result.text))

    def _on_recognized(self, evt) -> None:
        result = evt.result
        if result.reason == speechsdk.ResultReason.RecognizedSpeech:
            payload = result.properties.get(speechsdk.PropertyId.SpeechServiceResponse_JsonResult)
            self._dispatch(Final(text=result.text, confidence=parse_confidence(payload)))
        elif result.reason == speechsdk.ResultReason.NoMatch:
            logger.debug("No speech recognized")

    def _on_canceled(self, evt) -> None:
        details = evt.cancellation_details
        if details.reason == speechsdk.CancellationReason.Error:
            logger.error(f"Recognition canceled: {details.error_details}")
            self._dispatch(Error(reason=details.error_details or "Recognition canceled"))
        self._dispatch(Ended())

    def _on_session_stopped(self, evt) -> None:
        self._dispatch(Ended())

    def _dispatch(self, event: RecognitionEvent) -> None:
        if self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._put, event)
        except RuntimeError:
            # 이벤트 루프가 이미 닫힘
            logger.debug(f"Dropped recognition event after loop shutdown: {event}")

    def _put(self, event: RecognitionEvent) -> None:
        # 종료 신호 이후에는 어떤 이벤트도 내보내지 않음
        if self._closed:
            return
        # 중지 중에는 진행 중이던 발화를 버림
        if self._stopping and not isinstance(event, Ended):
            return
        self._queue.put_nowait(event)
        if isinstance(event, Ended):
            self._closed = True
