#####################################################
#                                                   #
#              번역 공급자 게이트웨이                   #
#                                                   #
#####################################################

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
from livetranslate.config.exception import ServiceNotConfigured, UpstreamFailed
from livetranslate.config.settings import Settings
from livetranslate.logs.logging_util import LoggerSingleton

logger = LoggerSingleton.get_logger(logger_name="translation")

API_VERSION = "3.0"


@dataclass(frozen=True)
class TranslationResult:
    translated_text: str
    confidence: Optional[float] = None  # 번역 공급자 신뢰도 (전사에 저장하지 않음)


class TranslationGateway:
    """텍스트 한 건을 번역하는 상태 없는 래퍼. 재시도/캐시 없음."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    def _headers(self) -> Dict[str, str]:
        if not self.settings.translator_configured:
            logger.error("AZURE_TRANSLATOR_KEY / AZURE_TRANSLATOR_ENDPOINT is not set")
            raise ServiceNotConfigured("Translation service")
        headers = {
            "Ocp-Apim-Subscription-Key": self.settings.translator_key,
            "Content-Type": "application/json",
        }
        if self.settings.translator_region:
            headers["Ocp-Apim-Subscription-Region"] = self.settings.translator_region
        return headers

    async def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        scenario: Optional[str] = None,
    ) -> TranslationResult:
        headers = self._headers()
        url = f"{self.settings.translator_endpoint.rstrip('/')}/translate"
        params: Dict[str, Any] = {"api-version": API_VERSION, "from": source_language, "to": target_language}
        if scenario:
            # 도메인 특화 번역을 위해 시나리오를 category로 전달
            params["category"] = scenario

        try:
            response = await self._post(url, params=params, headers=headers, payload=[{"text": text}])
            if response.status_code >= 400:
                logger.error(f"Translation failed {response.status_code}: {response.text}")
                raise UpstreamFailed("Translation failed", code="TRANSLATION_FAILED")
            data = response.json()
            translation = (data[0].get("translations") or [{}])[0]
            result = TranslationResult(
                translated_text=translation.get("text") or "",
                confidence=translation.get("confidence"),
            )
        except UpstreamFailed:
            raise
        except (httpx.HTTPError, json.JSONDecodeError, UnicodeDecodeError, IndexError, KeyError, TypeError, AttributeError) as e:
            logger.exception(f"Translation failed: {e}")
            raise UpstreamFailed("Translation failed", code="TRANSLATION_FAILED") from e

        return result

    async def _post(self, url: str, *, params, headers, payload) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.post(url, params=params, headers=headers, json=payload)
        async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
            return await client.post(url, params=params, headers=headers, json=payload)
