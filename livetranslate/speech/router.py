#####################################################
#                                                   #
#               실시간 음성 캡처 라우터                 #
#                                                   #
#####################################################

import asyncio
from typing import Callable, Optional
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from livetranslate.auth.dependencies import authenticate_token
from livetranslate.config.dependencies import (
    get_capture_factory,
    get_orchestrator,
    get_session_store,
    get_settings,
    get_speech_token_issuer,
)
from livetranslate.config.exception import AppException
from livetranslate.config.settings import Settings
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.sessions.orchestrator import SessionOrchestrator
from livetranslate.sessions.store import SessionStore
from livetranslate.speech.capture import Ended, Error, Final, Interim, SpeechCaptureAdapter
from livetranslate.speech.token import SpeechCredential, SpeechTokenIssuer

# 로거 설정
logger = LoggerSingleton.get_logger(logger_name="speech")

router = APIRouter(prefix="/speech", tags=["Speech"])

STOP_MESSAGE = "stop"


def close_code_for(exc: AppException) -> int:
    # 4xx 오류는 4000번대 애플리케이션 종료 코드로 전달
    if 400 <= exc.status_code < 500:
        return 4000 + exc.status_code
    return 1011


@router.websocket("/sessions/{session_id}/stream")
async def stream_speech(
    websocket: WebSocket,
    session_id: int,
    token: str = Query(...),
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
    issuer: SpeechTokenIssuer = Depends(get_speech_token_issuer),
    capture_factory: Callable[[Optional[SpeechCredential]], SpeechCaptureAdapter] = Depends(get_capture_factory),
):
    """브라우저가 보낸 PCM 프레임을 인식해 interim / final(번역 포함) / error / ended 메시지로 돌려줌

    - 바이너리 프레임: 16kHz 16bit mono PCM 오디오
    - 텍스트 프레임 "stop": 캡처 종료
    """
    await websocket.accept()
    try:
        user = authenticate_token(token, settings, store)
        session = orchestrator.get_session(user.id, session_id)
        credential = await issuer.issue()
        adapter = capture_factory(credential)
        await adapter.start(session.source_language)
    except AppException as e:
        logger.warning(f"Speech stream rejected: session_id={session_id}, code={e.code}")
        await websocket.send_json({"type": "error", "code": e.code, "message": e.message})
        await websocket.close(code=close_code_for(e))
        return

    logger.info(f"Speech stream opened: session_id={session_id}, user_id={user.id}")

    async def pump_audio() -> None:
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                if message.get("bytes"):
                    adapter.push_audio(message["bytes"])
                elif (message.get("text") or "").strip() == STOP_MESSAGE:
                    break
        finally:
            await adapter.stop()

    receiver = asyncio.create_task(pump_audio())
    try:
        async for event in adapter.events():
            if isinstance(event, Interim):
                await websocket.send_json({"type": "interim", "text": event.text})
            elif isinstance(event, Final):
                if not event.text.strip():
                    continue
                try:
                    result = await orchestrator.submit_utterance(user.id, session_id, event.text, event.confidence)
                except AppException as e:
                    # 사용자가 직접 다시 시도하도록 오류만 알리고 스트림은 유지
                    await websocket.send_json({"type": "error", "code": e.code, "message": e.message})
                    continue
                await websocket.send_json({
                    "type": "final",
                    "text": event.text,
                    "confidence": event.confidence,
                    "translated_text": result.translated_text,
                })
            elif isinstance(event, Error):
                await websocket.send_json({"type": "error", "code": "SPEECH_CANCELED", "message": event.reason})
            elif isinstance(event, Ended):
                await websocket.send_json({"type": "ended"})
        await websocket.close()
    except WebSocketDisconnect:
        logger.info(f"Speech stream client disconnected: session_id={session_id}")
    finally:
        await adapter.stop()
        receiver.cancel()
        await asyncio.gather(receiver, return_exceptions=True)
        logger.info(f"Speech stream closed: session_id={session_id}")
