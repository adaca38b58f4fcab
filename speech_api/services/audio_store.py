"""Audio object storage on S3-compatible backends (MinIO, AWS S3)."""

from __future__ import annotations

import asyncio
import io
import uuid
from datetime import timedelta
from urllib.parse import quote, urlparse

import structlog
from minio import Minio

from speech_api.config import Settings
from speech_api.errors import StorageError

LOGGER = structlog.get_logger(__name__)

AUDIO_PREFIX = "audio/"
AUDIO_EXTENSION = ".mp3"


def create_minio_client(settings: Settings) -> Minio:
    endpoint = settings.minio_endpoint
    if endpoint.startswith("http"):
        parsed = urlparse(endpoint)
        endpoint_host = parsed.netloc
        secure = parsed.scheme == "https"
    else:
        endpoint_host = endpoint
        secure = settings.minio_secure
    return Minio(
        endpoint_host,
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=secure,
        region=settings.minio_region,
    )


def derive_public_base_url(settings: Settings) -> str:
    if settings.audio_public_base_url:
        return settings.audio_public_base_url.rstrip("/")
    endpoint = settings.minio_endpoint.rstrip("/")
    if endpoint.startswith("http"):
        return endpoint
    scheme = "https" if settings.minio_secure else "http"
    return f"{scheme}://{endpoint}"


class AudioStore:
    def __init__(self, client: Minio, bucket: str, public_base_url: str) -> None:
        self._client = client
        self.bucket = bucket
        self._public_base_url = public_base_url.rstrip("/")

    @staticmethod
    def new_key() -> str:
        return f"{AUDIO_PREFIX}{uuid.uuid4().hex}{AUDIO_EXTENSION}"

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                bucket_name=self.bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except Exception as exc:  # noqa: BLE001
            raise StorageError("Failed to store audio", detail=f"{type(exc).__name__}: {exc}") from exc

    def public_url(self, key: str) -> str:
        return f"{self._public_base_url}/{self.bucket}/{quote(key)}"

    async def signed_url(self, key: str, expires: int = 3600) -> str:
        try:
            return await asyncio.to_thread(
                self._client.presigned_get_object,
                bucket_name=self.bucket,
                object_name=key,
                expires=timedelta(seconds=expires),
            )
        except Exception as exc:  # noqa: BLE001
            raise StorageError("Failed to sign audio URL", detail=f"{type(exc).__name__}: {exc}") from exc

    async def ensure_bucket(self) -> bool:
        exists = await asyncio.to_thread(self._client.bucket_exists, bucket_name=self.bucket)
        if not exists:
            await asyncio.to_thread(self._client.make_bucket, bucket_name=self.bucket)
            LOGGER.info("storage.bucket_created", bucket=self.bucket)
        return not exists

    async def ping(self) -> bool:
        return await asyncio.to_thread(self._client.bucket_exists, bucket_name=self.bucket)
