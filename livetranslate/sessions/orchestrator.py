"""
번역 세션 수명주기 오케스트레이터

캡처 → 번역 → 저장 → 요약 흐름을 묶고, 세션 ID를 받는 모든 작업에서
동일한 소유권 검사를 수행합니다.
"""

from typing import List, Optional
from livetranslate.config.exception import AppException, BadRequest, Conflict, NotFound, UpstreamFailed
from livetranslate.logs.logging_util import LoggerSingleton
from livetranslate.models.session import SessionStatus, TranslationSession
from livetranslate.models.summary import Summary
from livetranslate.models.transcript import Transcript
from livetranslate.models.user import utcnow
from livetranslate.sessions.store import SessionStore
from livetranslate.summary.generator import SummaryGenerator
from livetranslate.translation.gateway import TranslationGateway, TranslationResult

logger = LoggerSingleton.get_logger(logger_name="sessions")


def format_summary_line(transcript: Transcript) -> str:
    return f"{transcript.original_text} → {transcript.translated_text}"


class SessionOrchestrator:
    def __init__(self, store: SessionStore, translator: TranslationGateway, summarizer: SummaryGenerator):
        self.store = store
        self.translator = translator
        self.summarizer = summarizer

    def _owned_session(self, requester_id: int, session_id: int) -> TranslationSession:
        """세션이 없거나 요청자 소유가 아니면 구분 없이 404"""
        session = self.store.get_session(session_id)
        if session is None or session.user_id != requester_id:
            logger.warning(f"Session not found or unauthorized: id={session_id}, user_id={requester_id}")
            raise NotFound("Session not found", code="SESSION_NOT_FOUND")
        return session

    def create_session(
        self,
        requester_id: int,
        title: str,
        source_language: str,
        target_language: str,
        scenario: Optional[str] = None,
    ) -> int:
        title = (title or "").strip()
        if not title:
            raise BadRequest("Title is required", code="TITLE_REQUIRED")

        session_id = self.store.create_session(
            requester_id, title, source_language, target_language, scenario or None
        )
        logger.info(
            f"Session created: id={session_id}, user_id={requester_id}, "
            f"{source_language}->{target_language}, scenario={scenario}"
        )
        return session_id

    def get_session(self, requester_id: int, session_id: int) -> TranslationSession:
        return self._owned_session(requester_id, session_id)

    def list_sessions(self, requester_id: int) -> List[TranslationSession]:
        return self.store.list_sessions(requester_id)

    def list_transcripts(self, requester_id: int, session_id: int) -> List[Transcript]:
        self._owned_session(requester_id, session_id)
        return self.store.list_transcripts(session_id)

    async def submit_utterance(
        self,
        requester_id: int,
        session_id: int,
        text: str,
        confidence: Optional[int] = None,
    ) -> TranslationResult:
        """발화 하나를 번역해 전사로 저장.

        저장되는 confidence는 호출자가 넘긴 음성 인식 신뢰도이며,
        번역 공급자가 돌려준 신뢰도는 응답으로만 전달합니다.
        """
        session = self._owned_session(requester_id, session_id)
        if SessionStatus(session.status).is_closed:
            # 종료된 세션에는 전사를 추가하지 않음
            raise Conflict("Session is not active", code="SESSION_NOT_ACTIVE")
        if not text or not text.strip():
            raise BadRequest("Text is required", code="TEXT_REQUIRED")

        result = await self.translator.translate(
            text,
            session.source_language,
            session.target_language,
            session.scenario or None,
        )
        self.store.append_transcript(session_id, text, result.translated_text, confidence)
        logger.info(f"Transcript appended: session_id={session_id}, confidence={confidence}")
        return result

    def end_session(self, requester_id: int, session_id: int) -> None:
        session = self._owned_session(requester_id, session_id)
        current = SessionStatus(session.status)
        if not current.can_transition_to(SessionStatus.COMPLETED):
            raise Conflict("Session is archived", code="SESSION_ARCHIVED")

        # 상태와 종료 시각을 한 문장으로 갱신 (반복 호출 시 종료 시각 재기록)
        self.store.update_session(session_id, status=SessionStatus.COMPLETED, ended_at=utcnow())
        logger.info(f"Session ended: id={session_id}, previous_status={current.value}")

    def get_summary(self, requester_id: int, session_id: int) -> Optional[Summary]:
        self._owned_session(requester_id, session_id)
        return self.store.get_summary(session_id)

    async def generate_summary(self, requester_id: int, session_id: int) -> Summary:
        self._owned_session(requester_id, session_id)

        existing = self.store.get_summary(session_id)
        if existing is not None:
            return existing

        transcripts = self.store.list_transcripts(session_id)
        if not transcripts:
            raise BadRequest("No transcripts found for this session", code="NO_TRANSCRIPTS")

        try:
            summary_text = await self.summarizer.summarize([format_summary_line(t) for t in transcripts])
        except AppException:
            raise
        except Exception as e:
            logger.exception(f"Failed to generate summary: session_id={session_id}")
            raise UpstreamFailed("Summary generation failed", code="SUMMARY_FAILED") from e

        # 빈 요약은 저장하면 영구히 굳어지므로 실패로 처리
        if not summary_text.strip():
            logger.error(f"Summary provider returned empty text: session_id={session_id}")
            raise UpstreamFailed("Summary generation failed", code="SUMMARY_FAILED")

        summary = self.store.upsert_summary(session_id, summary_text)
        logger.info(f"Summary stored: session_id={session_id}, summary_id={summary.id}")
        return summary
