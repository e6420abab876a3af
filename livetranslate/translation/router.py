#####################################################
#                                                   #
#                  번역 세션 라우터                    #
#                                                   #
#####################################################

from datetime import date
from typing import List, Optional
from urllib.parse import quote
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from livetranslate.auth.dependencies import get_current_user
from livetranslate.config.dependencies import get_orchestrator, get_speech_token_issuer
from livetranslate.config.exception import NotFound
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.models.transcript import Transcript
from livetranslate.models.user import User
from livetranslate.schemas.session import (
    SessionCreate,
    SessionCreated,
    SessionEnded,
    SessionListResponse,
    SessionResponse,
)
from livetranslate.schemas.summary import CatalogItem, SpeechTokenResponse, SummaryGenerated, SummaryResponse
from livetranslate.schemas.transcript import TranscriptResponse, TranslateRequest, TranslateResponse
from livetranslate.sessions.orchestrator import SessionOrchestrator
from livetranslate.speech.token import SpeechTokenIssuer
from livetranslate.translation.catalog import SUPPORTED_LANGUAGES, SUPPORTED_SCENARIOS

# 로거 설정
logger = LoggerSingleton.get_logger(logger_name="translation")

router = APIRouter(prefix="/translation", tags=["Translation"])


def format_transcript_export(transcripts: List[Transcript]) -> str:
    """다운로드용 전사 텍스트 ([시각] / 원문 / 번역 블록)"""
    blocks = [
        f"[{t.timestamp.strftime('%H:%M:%S')}]\n原文: {t.original_text}\n譯文: {t.translated_text}\n"
        for t in transcripts
    ]
    return "\n".join(blocks)


def _attachment(content: str, title: str, kind: str) -> PlainTextResponse:
    filename = f"{title}_{kind}_{date.today().isoformat()}.txt"
    return PlainTextResponse(
        content,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.get("/languages", response_model=List[CatalogItem])
def get_supported_languages():
    return SUPPORTED_LANGUAGES


@router.get("/scenarios", response_model=List[CatalogItem])
def get_supported_scenarios():
    return SUPPORTED_SCENARIOS


@router.get("/speech-token", response_model=SpeechTokenResponse)
async def get_speech_token(
    current_user: User = Depends(get_current_user),
    issuer: SpeechTokenIssuer = Depends(get_speech_token_issuer),
):
    """클라이언트 음성 SDK용 단기 토큰 발급"""
    logger.info(f"GET /translation/speech-token called: user_id={current_user.id}")
    credential = await issuer.issue()
    return SpeechTokenResponse(token=credential.token, region=credential.region)


@router.post("/sessions", response_model=SessionCreated, status_code=status.HTTP_201_CREATED)
def create_session(
    data: SessionCreate,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """새 번역 세션 생성 (active 상태)"""
    session_id = orchestrator.create_session(
        current_user.id,
        data.title,
        data.source_language,
        data.target_language,
        data.scenario,
    )
    return SessionCreated(session_id=session_id)


@router.get("/sessions", response_model=SessionListResponse)
def get_user_sessions(
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """내 세션 목록 (시작 시각 오름차순)"""
    sessions = orchestrator.list_sessions(current_user.id)
    return SessionListResponse(
        total=len(sessions),
        sessions=[SessionResponse.model_validate(s) for s in sessions],
    )


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.get_session(current_user.id, session_id)


@router.post("/sessions/{session_id}/translate", response_model=TranslateResponse)
async def translate_text(
    session_id: int,
    data: TranslateRequest,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """인식된 발화를 번역하고 전사로 저장"""
    result = await orchestrator.submit_utterance(current_user.id, session_id, data.text, data.confidence)
    return TranslateResponse(translated_text=result.translated_text, confidence=result.confidence)


@router.get("/sessions/{session_id}/transcripts", response_model=List[TranscriptResponse])
def get_transcripts(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.list_transcripts(current_user.id, session_id)


@router.get("/sessions/{session_id}/transcripts/export", response_class=PlainTextResponse)
def export_transcripts(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """전사 텍스트 파일 다운로드"""
    session = orchestrator.get_session(current_user.id, session_id)
    transcripts = orchestrator.list_transcripts(current_user.id, session_id)
    return _attachment(format_transcript_export(transcripts), session.title, "逐字稿")


@router.post("/sessions/{session_id}/end", response_model=SessionEnded)
def end_session(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    orchestrator.end_session(current_user.id, session_id)
    return SessionEnded()


@router.post("/sessions/{session_id}/summary", response_model=SummaryGenerated)
async def generate_summary(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """요약 생성 (이미 있으면 기존 요약 반환)"""
    summary = await orchestrator.generate_summary(current_user.id, session_id)
    return SummaryGenerated(summary=summary.summary_text)


@router.get("/sessions/{session_id}/summary", response_model=Optional[SummaryResponse])
def get_summary(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """요약 조회. 세션은 있지만 요약이 아직 없으면 null"""
    return orchestrator.get_summary(current_user.id, session_id)


@router.get("/sessions/{session_id}/summary/export", response_class=PlainTextResponse)
def export_summary(
    session_id: int,
    current_user: User = Depends(get_current_user),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """요약 텍스트 파일 다운로드"""
    session = orchestrator.get_session(current_user.id, session_id)
    summary = orchestrator.get_summary(current_user.id, session_id)
    if summary is None:
        raise NotFound("Summary not found", code="SUMMARY_NOT_FOUND")
    return _attachment(summary.summary_text, session.title, "摘要")
