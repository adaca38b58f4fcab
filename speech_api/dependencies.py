"""Process-wide service wiring and FastAPI dependency providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import HTTPException, Request, status

from speech_api.config import Settings
from speech_api.services import db_client
from speech_api.services.audio_store import AudioStore, create_minio_client, derive_public_base_url
from speech_api.services.history_store import HistoryStore
from speech_api.services.http_client import get_http_client
from speech_api.services.speech_handler import SpeechConfig, SpeechRequestHandler
from speech_api.services.synthesis_client import ElevenLabsClient

LOGGER = structlog.get_logger(__name__)


@dataclass
class Services:
    handler: SpeechRequestHandler
    store: AudioStore
    history: Optional[HistoryStore] = None


async def build_services(settings: Settings) -> Services:
    http_client = await get_http_client()
    synthesizer = ElevenLabsClient(
        http_client,
        api_base=settings.elevenlabs_api_base,
        api_key=settings.elevenlabs_api_key,
        model_id=settings.elevenlabs_model_id,
        timeout=settings.elevenlabs_timeout,
    )

    store = AudioStore(
        create_minio_client(settings),
        bucket=settings.minio_bucket_audio,
        public_base_url=derive_public_base_url(settings),
    )
    if settings.minio_create_bucket and settings.minio_bucket_audio:
        try:
            await store.ensure_bucket()
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("storage.bucket_check_failed", bucket=store.bucket, error=str(exc))

    history = await _build_history_store(settings)
    handler = SpeechRequestHandler(SpeechConfig.from_settings(settings), synthesizer, store, history)
    return Services(handler=handler, store=store, history=history)


async def _build_history_store(settings: Settings) -> Optional[HistoryStore]:
    if not settings.history_enabled:
        return None
    try:
        pool = await db_client.get_db_pool(settings)
        history = HistoryStore(pool, table=settings.history_table, acquire_timeout=settings.history_timeout)
        await history.ensure_schema()
    except Exception as exc:  # noqa: BLE001
        LOGGER.warning("history.unavailable", error=f"{type(exc).__name__}: {exc}")
        return None
    return history


def _services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service is starting up")
    return services


def get_speech_handler(request: Request) -> SpeechRequestHandler:
    return _services(request).handler


def get_history_store(request: Request) -> HistoryStore:
    history = _services(request).history
    if history is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="History is not enabled")
    return history
