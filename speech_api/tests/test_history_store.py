import uuid
from datetime import datetime, timezone

import pytest

from speech_api.errors import PersistenceError
from speech_api.schemas.history import HistoryRecord, HistoryStatus
from speech_api.services.history_store import HistoryStore


class FakeConnection:
    def __init__(self, rows=None, error=None) -> None:
        self.rows = rows or []
        self.error = error
        self.executed = []
        self.fetched = []

    async def execute(self, query, *args):
        if self.error is not None:
            raise self.error
        self.executed.append((query, args))
        return "OK"

    async def fetch(self, query, *args):
        if self.error is not None:
            raise self.error
        self.fetched.append((query, args))
        return self.rows


class _Acquire:
    def __init__(self, conn) -> None:
        self._conn = conn

    async def __aenter__(self):
        return self._conn

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakePool:
    def __init__(self, conn: FakeConnection) -> None:
        self.conn = conn
        self.acquire_timeouts = []

    def acquire(self, timeout=None):
        self.acquire_timeouts.append(timeout)
        return _Acquire(self.conn)


@pytest.mark.asyncio
async def test_create_inserts_all_fields() -> None:
    conn = FakeConnection()
    store = HistoryStore(FakePool(conn), table="tts_history")
    record = HistoryRecord(text="Hello", audio_url="https://x/audio/a.mp3", voice_id="v1")

    await store.create(record)

    query, args = conn.executed[0]
    assert "INSERT INTO tts_history" in query
    assert args[0] == uuid.UUID(record.id)
    assert args[1:7] == ("Hello", "https://x/audio/a.mp3", "anonymous", "v1", "english", "success")
    assert args[7] == record.created_at


@pytest.mark.asyncio
async def test_create_failure_raises_persistence_error() -> None:
    store = HistoryStore(FakePool(FakeConnection(error=ConnectionRefusedError("db down"))))

    with pytest.raises(PersistenceError):
        await store.create(HistoryRecord(text="Hello", audio_url="https://x/a.mp3"))


@pytest.mark.asyncio
async def test_connection_acquire_is_bounded() -> None:
    pool = FakePool(FakeConnection())
    store = HistoryStore(pool, acquire_timeout=1.5)

    await store.create(HistoryRecord(text="Hello", audio_url="https://x/a.mp3"))
    await store.list()

    assert pool.acquire_timeouts == [1.5, 1.5]


@pytest.mark.asyncio
async def test_list_filters_by_caller_newest_first() -> None:
    created = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    row_id = uuid.uuid4()
    conn = FakeConnection(
        rows=[
            {
                "id": row_id,
                "text": "Hello",
                "audio_url": "https://x/a.mp3",
                "caller_id": "alice",
                "voice_id": "v1",
                "language": "english",
                "status": "success",
                "created_at": created,
            }
        ]
    )
    store = HistoryStore(FakePool(conn))

    records = await store.list(caller_id="alice", limit=10)

    query, args = conn.fetched[0]
    assert "WHERE caller_id = $1" in query
    assert "ORDER BY created_at DESC LIMIT $2" in query
    assert args == ("alice", 10)
    assert records[0].id == str(row_id)
    assert records[0].status is HistoryStatus.SUCCESS
    assert records[0].created_at == created


@pytest.mark.asyncio
async def test_list_without_caller_clamps_limit() -> None:
    conn = FakeConnection()
    store = HistoryStore(FakePool(conn))

    assert await store.list(limit=5000) == []

    query, args = conn.fetched[0]
    assert "WHERE" not in query
    assert args == (200,)


@pytest.mark.asyncio
async def test_ensure_schema_creates_table_and_index() -> None:
    conn = FakeConnection()
    store = HistoryStore(FakePool(conn), table="speech.tts_history")

    await store.ensure_schema()

    statements = [query for query, _ in conn.executed]
    assert "CREATE TABLE IF NOT EXISTS speech.tts_history" in statements[0]
    assert "speech_tts_history_caller_idx" in statements[1]
