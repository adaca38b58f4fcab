import json
from functools import lru_cache
from typing import Annotated, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    stack_version: str = Field(default="1.0.0", alias="STACK_VERSION")

    cors_allow_origins: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS")

    elevenlabs_api_key: str = Field(default="", alias="ELEVENLABS_API_KEY")
    elevenlabs_api_base: str = Field(
        default="https://api.elevenlabs.io/v1/text-to-speech", alias="ELEVENLABS_API_BASE"
    )
    elevenlabs_default_voice_id: str = Field(default="", alias="ELEVENLABS_DEFAULT_VOICE_ID")
    elevenlabs_model_id: str | None = Field(default=None, alias="ELEVENLABS_MODEL_ID")
    elevenlabs_timeout: float = Field(default=30.0, alias="ELEVENLABS_TIMEOUT")

    minio_endpoint: str = Field(default="minio:9000", alias="MINIO_ENDPOINT")
    minio_access_key: str = Field(default="aistack", alias="MINIO_ROOT_USER")
    minio_secret_key: str = Field(default="changeme", alias="MINIO_ROOT_PASSWORD")
    minio_secure: bool = Field(default=False, alias="MINIO_SECURE")
    minio_region: str | None = Field(default=None, alias="MINIO_REGION")
    minio_bucket_audio: str = Field(default="", alias="MINIO_BUCKET_AUDIO")
    minio_create_bucket: bool = Field(default=False, alias="MINIO_CREATE_BUCKET")

    audio_public_base_url: str | None = Field(default=None, alias="AUDIO_PUBLIC_BASE_URL")
    signed_url_expiry: int = Field(default=3600, ge=0, le=7 * 24 * 3600, alias="SIGNED_URL_EXPIRY")

    history_enabled: bool = Field(default=True, alias="HISTORY_ENABLED")
    history_table: str = Field(default="tts_history", pattern=r"^[A-Za-z_][A-Za-z0-9_.]*$", alias="HISTORY_TABLE")
    history_timeout: float = Field(default=5.0, gt=0, alias="HISTORY_TIMEOUT")
    default_language: str = Field(default="english", alias="DEFAULT_LANGUAGE")
    require_caller_id: bool = Field(default=False, alias="REQUIRE_CALLER_ID")

    postgres_host: str = Field(default="postgres", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, alias="POSTGRES_PORT")
    postgres_db: str = Field(default="speech", alias="POSTGRES_DB")
    postgres_user: str = Field(default="speech", alias="POSTGRES_USER")
    postgres_password: str = Field(default="changeme", alias="POSTGRES_PASSWORD")

    otel_endpoint: AnyHttpUrl | None = Field(default=None, alias="OTEL_EXPORTER_OTLP_ENDPOINT")

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value):
        if value in (None, "", [], ()):
            return ["*"]
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [origin.strip() for origin in stripped.split(",") if origin.strip()]
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
