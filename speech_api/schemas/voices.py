from typing import List

from pydantic import BaseModel


class Voice(BaseModel):
    id: str
    name: str
    description: str


class VoiceListResponse(BaseModel):
    default_voice_id: str | None = None
    voices: List[Voice]
