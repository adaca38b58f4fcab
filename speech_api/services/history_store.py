"""History persistence for completed syntheses."""

import asyncio
import uuid
from typing import List, Optional

import asyncpg

from speech_api.errors import PersistenceError
from speech_api.schemas.history import HistoryRecord, HistoryStatus
from speech_api.services.db_client import acquire

MAX_LIST_LIMIT = 200

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class HistoryStore:
    """Reads and writes `HistoryRecord` rows in PostgreSQL.

    The table name comes from settings and is validated there as a plain
    (optionally schema-qualified) identifier before it is interpolated.
    """

    def __init__(self, pool: asyncpg.Pool, table: str = "tts_history", acquire_timeout: float = 5.0) -> None:
        self._pool = pool
        self._table = table
        self._acquire_timeout = acquire_timeout

    async def ensure_schema(self) -> None:
        async with acquire(self._pool, timeout=self._acquire_timeout) as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    id UUID PRIMARY KEY,
                    text TEXT NOT NULL,
                    audio_url TEXT NOT NULL,
                    caller_id TEXT NOT NULL,
                    voice_id TEXT,
                    language TEXT NOT NULL,
                    status TEXT NOT NULL,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
                """
            )
            await conn.execute(
                f"CREATE INDEX IF NOT EXISTS {self._table.replace('.', '_')}_caller_idx "
                f"ON {self._table} (caller_id, created_at DESC)"
            )

    async def create(self, record: HistoryRecord) -> HistoryRecord:
        try:
            async with acquire(self._pool, timeout=self._acquire_timeout) as conn:
                await conn.execute(
                    f"""
                    INSERT INTO {self._table}
                        (id, text, audio_url, caller_id, voice_id, language, status, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    uuid.UUID(record.id),
                    record.text,
                    record.audio_url,
                    record.caller_id,
                    record.voice_id,
                    record.language,
                    record.status.value,
                    record.created_at,
                )
        except _DB_ERRORS as exc:
            raise PersistenceError("Failed to record history", detail=f"{type(exc).__name__}: {exc}") from exc
        return record

    async def list(self, caller_id: Optional[str] = None, limit: int = 50) -> List[HistoryRecord]:
        limit = max(1, min(limit, MAX_LIST_LIMIT))
        query = (
            f"SELECT id, text, audio_url, caller_id, voice_id, language, status, created_at "
            f"FROM {self._table}"
        )
        args: list = []
        if caller_id:
            query += " WHERE caller_id = $1"
            args.append(caller_id)
        query += f" ORDER BY created_at DESC LIMIT ${len(args) + 1}"
        args.append(limit)

        try:
            async with acquire(self._pool, timeout=self._acquire_timeout) as conn:
                rows = await conn.fetch(query, *args)
        except _DB_ERRORS as exc:
            raise PersistenceError("Failed to load history", detail=f"{type(exc).__name__}: {exc}") from exc

        return [
            HistoryRecord(
                id=str(row["id"]),
                text=row["text"],
                audio_url=row["audio_url"],
                caller_id=row["caller_id"],
                voice_id=row["voice_id"],
                language=row["language"],
                status=HistoryStatus(row["status"]),
                created_at=row["created_at"],
            )
            for row in rows
        ]

    async def ping(self) -> None:
        async with acquire(self._pool, timeout=self._acquire_timeout) as conn:
            await conn.execute("SELECT 1")
