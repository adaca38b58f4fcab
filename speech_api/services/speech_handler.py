"""Request pipeline: validate, synthesize, store, sign, record history.

Each step runs only after the previous one succeeded. History is written
last and its failure never changes the outcome returned to the caller.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

import structlog
from pydantic import ValidationError as PydanticValidationError

from speech_api.config import Settings
from speech_api.errors import ConfigurationError, PersistenceError, SpeechError, ValidationError
from speech_api.schemas.history import ANONYMOUS_CALLER, HistoryRecord, HistoryStatus
from speech_api.schemas.speech import SpeechRequest, SpeechResponse
from speech_api.services.synthesis_client import AUDIO_MIME_TYPE

LOGGER = structlog.get_logger(__name__)

ANY_ORIGIN = "*"
CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Methods": "OPTIONS,POST,GET",
    "Access-Control-Allow-Headers": "Content-Type,Authorization,X-Request-ID",
}

SUCCESS_MESSAGE = "Audio file saved."
INTERNAL_ERROR_MESSAGE = "Internal server error"
REDACTED = "***"


def cors_headers(allow_origins: Sequence[str] = (ANY_ORIGIN,), origin: Optional[str] = None) -> Dict[str, str]:
    """CORS headers for a response to ``origin``.

    ``*`` is sent only when every origin is allowed; otherwise an allowed
    origin is echoed back and any other origin gets no Allow-Origin header.
    """
    headers = dict(CORS_HEADERS)
    if ANY_ORIGIN in allow_origins:
        headers["Access-Control-Allow-Origin"] = ANY_ORIGIN
    elif origin and origin in allow_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


@dataclass(frozen=True)
class SpeechConfig:
    api_key: str
    bucket: str
    default_voice_id: str = ""
    signed_url_expiry: int = 3600
    default_language: str = "english"
    require_caller_id: bool = False
    allow_origins: Tuple[str, ...] = (ANY_ORIGIN,)
    history_timeout: float = 5.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SpeechConfig":
        return cls(
            api_key=settings.elevenlabs_api_key,
            bucket=settings.minio_bucket_audio,
            default_voice_id=settings.elevenlabs_default_voice_id,
            signed_url_expiry=settings.signed_url_expiry,
            default_language=settings.default_language,
            require_caller_id=settings.require_caller_id,
            allow_origins=tuple(settings.cors_allow_origins),
            history_timeout=settings.history_timeout,
        )


@dataclass
class HandlerResult:
    status_code: int
    body: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=dict)


class SpeechRequestHandler:
    """Turns one speech request into one stored audio object and a URL.

    ``synthesizer`` needs ``synthesize(text, voice_id) -> bytes``; ``store``
    needs ``new_key()``, ``put(key, data, content_type)``, ``public_url(key)``
    and ``signed_url(key, expires)``; ``history`` is optional and needs
    ``create(record)``.
    """

    def __init__(self, config: SpeechConfig, synthesizer, store, history=None) -> None:
        self._config = config
        self._synthesizer = synthesizer
        self._store = store
        self._history = history

    @staticmethod
    def preflight(allow_origins: Sequence[str] = (ANY_ORIGIN,), origin: Optional[str] = None) -> HandlerResult:
        return HandlerResult(status_code=200, headers=cors_headers(allow_origins, origin))

    async def handle(self, method: str, body: bytes | str | None, origin: Optional[str] = None) -> HandlerResult:
        if method.upper() == "OPTIONS":
            return self.preflight(self._config.allow_origins, origin)

        result = await self._run(body)
        result.headers.update(cors_headers(self._config.allow_origins, origin))
        return result

    async def _run(self, body: bytes | str | None) -> HandlerResult:
        try:
            request = self._parse(body)
            voice_id = self._resolve_voice(request)
            return await self._process(request, voice_id)
        except ValidationError as exc:
            LOGGER.info("tts.rejected", reason=exc.message)
            return self._error_result(exc)
        except SpeechError as exc:
            LOGGER.error(
                "tts.failed",
                error_type=type(exc).__name__,
                error=self._scrub(exc.detail),
            )
            return self._error_result(exc)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("tts.unexpected_error", error_type=type(exc).__name__)
            return HandlerResult(
                status_code=500,
                body={
                    "message": INTERNAL_ERROR_MESSAGE,
                    "error": self._scrub(f"{type(exc).__name__}: {exc}"),
                },
            )

    def _parse(self, body: bytes | str | None) -> SpeechRequest:
        if body is None or not body.strip():
            raise ValidationError("Request body is required.")
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValidationError("Request body must be valid JSON.") from exc
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object.")

        try:
            request = SpeechRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(_describe_validation_error(exc)) from exc

        if self._config.require_caller_id and not request.caller_id:
            raise ValidationError("userId is required.")
        return request

    def _resolve_voice(self, request: SpeechRequest) -> str:
        if not self._config.api_key:
            raise ConfigurationError(
                "Speech synthesis is not configured",
                detail="ELEVENLABS_API_KEY is not set",
            )
        if not self._config.bucket:
            raise ConfigurationError(
                "Audio storage is not configured",
                detail="MINIO_BUCKET_AUDIO is not set",
            )
        voice_id = request.voice_id or self._config.default_voice_id
        if not voice_id:
            raise ConfigurationError(
                "No voice selected",
                detail="voiceId was not provided and ELEVENLABS_DEFAULT_VOICE_ID is not set",
            )
        return voice_id

    async def _process(self, request: SpeechRequest, voice_id: str) -> HandlerResult:
        audio = await self._synthesizer.synthesize(request.text, voice_id)

        key = self._store.new_key()
        await self._store.put(key, audio, AUDIO_MIME_TYPE)
        url = self._store.public_url(key)

        signed_url = None
        if self._config.signed_url_expiry > 0:
            signed_url = await self._store.signed_url(key, self._config.signed_url_expiry)

        LOGGER.info(
            "tts.synthesized",
            key=key,
            voice_id=voice_id,
            audio_bytes=len(audio),
            caller_id=request.caller_id or ANONYMOUS_CALLER,
        )

        history = await self._record_history(request, voice_id, url)
        response = SpeechResponse(message=SUCCESS_MESSAGE, url=url, signed_url=signed_url, history=history)
        return HandlerResult(
            status_code=200,
            body=response.model_dump(by_alias=True, exclude_none=True),
        )

    async def _record_history(self, request: SpeechRequest, voice_id: str, url: str) -> Optional[Dict[str, Any]]:
        if self._history is None:
            return None

        record = HistoryRecord(
            text=request.text,
            audio_url=url,
            caller_id=request.caller_id or ANONYMOUS_CALLER,
            voice_id=voice_id,
            language=self._config.default_language,
            status=HistoryStatus.SUCCESS,
        )
        try:
            await self._write_history(record)
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning(
                "history.persist_failed",
                record_id=record.id,
                error=self._scrub(getattr(exc, "detail", None) or f"{type(exc).__name__}: {exc}"),
            )
            return None
        return record.to_payload()

    async def _write_history(self, record: HistoryRecord) -> None:
        timeout = self._config.history_timeout
        try:
            await asyncio.wait_for(self._history.create(record), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise PersistenceError(
                "Failed to record history",
                detail=f"history write exceeded {timeout:g}s",
            ) from exc

    def _error_result(self, exc: SpeechError) -> HandlerResult:
        body: Dict[str, Any] = {"message": exc.message}
        if exc.status_code >= 500:
            body["error"] = self._scrub(exc.detail)
        return HandlerResult(status_code=exc.status_code, body=body)

    def _scrub(self, text: str) -> str:
        if self._config.api_key:
            return text.replace(self._config.api_key, REDACTED)
        return text


def _describe_validation_error(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = first.get("loc") or ()
    field_name = str(location[0]) if location else ""
    if field_name == "text":
        return "Text is required."
    return f"Invalid value for '{field_name}': {first.get('msg', 'invalid')}"
