from fastapi import APIRouter, Depends, HTTPException

from speech_api.config import Settings, get_settings
from speech_api.schemas.voices import Voice, VoiceListResponse
from speech_api.services.voice_catalog import get_voice_by_id, list_voices

router = APIRouter(prefix="/api/v1", tags=["voices"])


@router.get("/voices", response_model=VoiceListResponse)
async def voices(settings: Settings = Depends(get_settings)):
    return VoiceListResponse(
        default_voice_id=settings.elevenlabs_default_voice_id or None,
        voices=list_voices(),
    )


@router.get("/voices/{voice_id}", response_model=Voice)
async def voice_detail(voice_id: str):
    voice = get_voice_by_id(voice_id)
    if voice is None:
        raise HTTPException(status_code=404, detail="Voice not found")
    return voice
