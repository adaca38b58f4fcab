import asyncio
import time
from typing import Dict, Optional, Tuple

from speech_api.config import Settings
from speech_api.services.audio_store import AudioStore
from speech_api.services.history_store import HistoryStore


async def _check_provider(settings: Settings) -> Tuple[str, Dict]:
    # Configuration only; probing the provider would spend API quota.
    if not settings.elevenlabs_api_key:
        return "elevenlabs", {"status": "down", "details": {"error": "ELEVENLABS_API_KEY is not set"}}
    return "elevenlabs", {"status": "up", "details": {"api_base": settings.elevenlabs_api_base}}


async def _check_storage(store: Optional[AudioStore]) -> Tuple[str, Dict]:
    if store is None or not store.bucket:
        return "storage", {"status": "down", "details": {"error": "audio bucket not configured"}}
    start = time.perf_counter()
    try:
        exists = await store.ping()
        latency_ms = int((time.perf_counter() - start) * 1000)
        if not exists:
            return "storage", {
                "status": "degraded",
                "latency_ms": latency_ms,
                "details": {"error": f"bucket {store.bucket} does not exist"},
            }
        return "storage", {"status": "up", "latency_ms": latency_ms}
    except Exception as exc:  # noqa: BLE001
        return "storage", {"status": "down", "details": {"error": str(exc)}}


async def _check_history(settings: Settings, history: Optional[HistoryStore]) -> Tuple[str, Dict]:
    if not settings.history_enabled:
        return "postgres", {"status": "disabled"}
    if history is None:
        return "postgres", {"status": "down", "details": {"error": "history store unavailable"}}
    start = time.perf_counter()
    try:
        await history.ping()
        latency_ms = int((time.perf_counter() - start) * 1000)
        return "postgres", {"status": "up", "latency_ms": latency_ms}
    except Exception as exc:  # noqa: BLE001
        return "postgres", {"status": "down", "details": {"error": str(exc)}}


async def gather_health(
    settings: Settings,
    store: Optional[AudioStore],
    history: Optional[HistoryStore],
) -> Dict[str, Dict]:
    results = await asyncio.gather(
        _check_provider(settings),
        _check_storage(store),
        _check_history(settings, history),
    )
    return {name: result for name, result in results}
