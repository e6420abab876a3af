"""
음성 서비스 단기 토큰 발급

API 키는 서버에만 두고, 클라이언트(브라우저 SDK 또는 서버 캡처)는 지역 단위 토큰만 받습니다.
토큰 갱신은 하지 않으며 세션당 한 번 발급합니다.
"""

from dataclasses import dataclass
from typing import Optional
import httpx
from livetranslate.config.exception import ServiceNotConfigured, UpstreamFailed
from livetranslate.config.settings import Settings
from livetranslate.logs.logging_util import LoggerSingleton

logger = LoggerSingleton.get_logger(logger_name="speech")

TOKEN_ENDPOINT_TEMPLATE = "https://{region}.api.cognitive.microsoft.com/sts/v1.0/issueToken"


@dataclass(frozen=True)
class SpeechCredential:
    token: str
    region: str


class SpeechTokenIssuer:
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    async def issue(self) -> SpeechCredential:
        if not self.settings.speech_key:
            logger.error("AZURE_SPEECH_KEY is not set")
            raise ServiceNotConfigured("Speech service")
        if not self.settings.speech_region:
            logger.error("AZURE_SPEECH_REGION is not set")
            raise ServiceNotConfigured("Speech service region")

        region = self.settings.speech_region
        endpoint = TOKEN_ENDPOINT_TEMPLATE.format(region=region)
        headers = {"Ocp-Apim-Subscription-Key": self.settings.speech_key}
        logger.info(f"Requesting speech token from: {endpoint}")

        try:
            if self.http_client is not None:
                response = await self.http_client.post(endpoint, headers=headers, timeout=self.settings.http_timeout)
            else:
                async with httpx.AsyncClient(timeout=self.settings.http_timeout) as client:
                    response = await client.post(endpoint, headers=headers)
        except httpx.ConnectError as e:
            logger.error(f"Failed to get speech token: invalid region {region} ({e})")
            raise UpstreamFailed("Failed to get speech token", code="SPEECH_TOKEN_FAILED") from e
        except httpx.HTTPError as e:
            logger.exception(f"Failed to get speech token: {e}")
            raise UpstreamFailed("Failed to get speech token", code="SPEECH_TOKEN_FAILED") from e

        if response.status_code == 401:
            logger.error("Failed to get speech token: invalid speech service API key")
        elif response.status_code == 403:
            logger.error("Failed to get speech token: speech service access denied")
        if response.status_code >= 400:
            logger.error(f"Speech token response {response.status_code}: {response.text}")
            raise UpstreamFailed("Failed to get speech token", code="SPEECH_TOKEN_FAILED")

        token = response.text.strip()
        if not token:
            logger.error("Speech token endpoint returned an empty body")
            raise UpstreamFailed("Failed to get speech token", code="SPEECH_TOKEN_FAILED")
        return SpeechCredential(token=token, region=region)
