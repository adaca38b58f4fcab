from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from speech_api.errors import UpstreamSynthesisError

LOGGER = structlog.get_logger(__name__)

AUDIO_MIME_TYPE = "audio/mpeg"


class ElevenLabsClient:
    """Thin client for the ElevenLabs text-to-speech endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_base: str,
        api_key: str,
        model_id: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self._client = client
        self._api_base = api_base.rstrip("/")
        self._api_key = api_key
        self._model_id = model_id
        self._timeout = timeout

    def endpoint(self, voice_id: str) -> str:
        return f"{self._api_base}/{voice_id}"

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        url = self.endpoint(voice_id)
        body: Dict[str, Any] = {"text": text}
        if self._model_id:
            body["model_id"] = self._model_id
        headers = {
            "Content-Type": "application/json",
            "Accept": AUDIO_MIME_TYPE,
            "xi-api-key": self._api_key,
        }

        try:
            response = await self._client.post(url, json=body, headers=headers, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise UpstreamSynthesisError(
                "Speech synthesis timed out",
                detail=f"{type(exc).__name__} after {self._timeout}s calling {url}",
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamSynthesisError(
                "Speech synthesis provider unreachable",
                detail=f"{type(exc).__name__}: {exc}",
            ) from exc

        if response.status_code < 200 or response.status_code >= 300:
            LOGGER.warning(
                "tts.provider_error",
                voice_id=voice_id,
                status_code=response.status_code,
            )
            raise UpstreamSynthesisError(
                "Speech synthesis failed",
                detail=f"Provider returned HTTP {response.status_code}: {_error_excerpt(response)}",
                upstream_status=response.status_code,
            )

        audio = response.content
        if not audio:
            raise UpstreamSynthesisError("Speech synthesis returned no audio", detail="Empty response body")
        return audio


def _error_excerpt(response: httpx.Response, limit: int = 200) -> str:
    try:
        text = response.text
    except UnicodeDecodeError:
        return "<binary>"
    return text[:limit]
