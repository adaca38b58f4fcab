from typing import List, Optional

import pytest

from speech_api.errors import StorageError
from speech_api.schemas.history import HistoryRecord
from speech_api.services.audio_store import AudioStore
from speech_api.services.speech_handler import SpeechConfig, SpeechRequestHandler

API_KEY = "sk-test-0123456789"
PUBLIC_BASE = "https://storage.example.com"


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"\x01\x02", error: Optional[Exception] = None) -> None:
        self.audio = audio
        self.error = error
        self.calls: List[tuple] = []

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.error is not None:
            raise self.error
        return self.audio


class FakeStore:
    bucket = "audio"
    new_key = staticmethod(AudioStore.new_key)

    def __init__(self, fail_put: bool = False) -> None:
        self.fail_put = fail_put
        self.objects: dict = {}
        self.put_calls: List[str] = []

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        self.put_calls.append(key)
        if self.fail_put:
            raise StorageError("Failed to store audio", detail="bucket unreachable")
        self.objects[key] = (data, content_type)

    def public_url(self, key: str) -> str:
        return f"{PUBLIC_BASE}/{self.bucket}/{key}"

    async def signed_url(self, key: str, expires: int = 3600) -> str:
        return f"{PUBLIC_BASE}/{self.bucket}/{key}?X-Amz-Expires={expires}"


class FakeHistory:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.records: List[HistoryRecord] = []

    async def create(self, record: HistoryRecord) -> HistoryRecord:
        if self.error is not None:
            raise self.error
        self.records.append(record)
        return record

    async def list(self, caller_id: Optional[str] = None, limit: int = 50) -> List[HistoryRecord]:
        matching = [r for r in self.records if caller_id is None or r.caller_id == caller_id]
        return list(reversed(matching))[:limit]


@pytest.fixture()
def config() -> SpeechConfig:
    return SpeechConfig(api_key=API_KEY, bucket="audio", default_voice_id="default-voice")


@pytest.fixture()
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def history() -> FakeHistory:
    return FakeHistory()


@pytest.fixture()
def handler(config, synthesizer, store, history) -> SpeechRequestHandler:
    return SpeechRequestHandler(config, synthesizer, store, history)
