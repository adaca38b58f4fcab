from typing import List, Optional

from speech_api.schemas.voices import Voice

VOICE_OPTIONS: List[Voice] = [
    Voice(
        id="Pw7NjARk1Tw61eca5OiP",
        name="Oswald",
        description="A friendly male voice that speaks clearly",
    ),
    Voice(
        id="ThT5KcBeYPX3keUQqHPh",
        name="Dorothy",
        description="A warm female voice that speaks gently",
    ),
]


def list_voices() -> List[Voice]:
    return list(VOICE_OPTIONS)


def get_voice_by_id(voice_id: str) -> Optional[Voice]:
    for voice in VOICE_OPTIONS:
        if voice.id == voice_id:
            return voice
    return None
