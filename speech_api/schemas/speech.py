from pydantic import BaseModel, ConfigDict, Field, field_validator


class SpeechRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    voice_id: str | None = Field(default=None, alias="voiceId")
    caller_id: str | None = Field(default=None, alias="userId")

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Text is required.")
        return stripped

    @field_validator("voice_id", "caller_id")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class SpeechResponse(BaseModel):
    message: str
    url: str
    signed_url: str | None = Field(default=None, serialization_alias="signedUrl")
    history: dict | None = None


class ErrorResponse(BaseModel):
    message: str
    error: str | None = None
