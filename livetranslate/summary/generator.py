"""
세션 요약 생성 (LLM 단일 호출)
"""

from typing import Optional, Sequence
from openai import AsyncOpenAI, OpenAIError
from livetranslate.config.exception import ServiceNotConfigured, UpstreamFailed
from livetranslate.logs.logging_util import LoggerSingleton

logger = LoggerSingleton.get_logger(logger_name="summary")

SUMMARY_SYSTEM_PROMPT = (
    "You are a professional meeting summary assistant. Based on the provided transcript, "
    "produce a concise, structured summary with three sections: key discussion points, "
    "important decisions, and action items. Respond in {language}."
)


def build_messages(transcript_lines: Sequence[str], language: str) -> list:
    full_text = "\n".join(transcript_lines)
    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT.format(language=language)},
        {"role": "user", "content": f"Please summarize the following transcript:\n\n{full_text}"},
    ]


class SummaryGenerator:
    """스트리밍/멀티턴/재시도 없음. 비어있거나 형식이 깨진 응답은 빈 문자열."""

    def __init__(self, client: Optional[AsyncOpenAI], *, model: str, language: str):
        self.client = client
        self.model = model
        self.language = language

    async def summarize(self, transcript_lines: Sequence[str]) -> str:
        if self.client is None:
            logger.error("Summary LLM is not configured (AZURE_OPENAI_* or OPENAI_API_KEY)")
            raise ServiceNotConfigured("Summary service")

        logger.info(f"Generating summary for {len(transcript_lines)} transcripts")
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(transcript_lines, self.language),
            )
        except OpenAIError as e:
            logger.exception(f"Summary generation failed: {e}")
            raise UpstreamFailed("Summary generation failed", code="SUMMARY_FAILED") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            logger.warning(f"Malformed summary response: {response!r}")
            return ""

        if not isinstance(content, str):
            logger.warning("Summary response has no text content")
            return ""
        logger.info("Summary generated successfully")
        return content
