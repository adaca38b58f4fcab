import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_CALLER = "anonymous"


class HistoryStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    audio_url: str = Field(alias="audioUrl")
    caller_id: str = Field(default=ANONYMOUS_CALLER, alias="callerId")
    voice_id: str | None = Field(default=None, alias="voiceId")
    language: str = "english"
    status: HistoryStatus = HistoryStatus.SUCCESS
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class HistoryListResponse(BaseModel):
    items: List[dict]
    count: int
