import re
from datetime import timedelta

import pytest

from speech_api.config import Settings
from speech_api.errors import StorageError
from speech_api.services.audio_store import AudioStore, derive_public_base_url


class FakeMinio:
    def __init__(self, existing_buckets=(), fail_put: bool = False) -> None:
        self.buckets = set(existing_buckets)
        self.fail_put = fail_put
        self.objects = {}
        self.presign_calls = []

    def put_object(self, bucket_name, object_name, data, length, content_type="application/octet-stream"):
        if self.fail_put:
            raise ConnectionError("minio unreachable")
        payload = data.read()
        assert len(payload) == length
        self.objects[(bucket_name, object_name)] = (payload, content_type)

    def presigned_get_object(self, bucket_name, object_name, expires=timedelta(days=7)):
        self.presign_calls.append((bucket_name, object_name, expires))
        return f"https://minio.local/{bucket_name}/{object_name}?X-Amz-Expires={int(expires.total_seconds())}"

    def bucket_exists(self, bucket_name):
        return bucket_name in self.buckets

    def make_bucket(self, bucket_name):
        self.buckets.add(bucket_name)


def test_new_key_is_unique_and_namespaced() -> None:
    keys = {AudioStore.new_key() for _ in range(100)}

    assert len(keys) == 100
    assert all(re.fullmatch(r"audio/[0-9a-f]{32}\.mp3", key) for key in keys)


@pytest.mark.asyncio
async def test_put_writes_bytes_with_content_type() -> None:
    minio = FakeMinio()
    store = AudioStore(minio, bucket="speech", public_base_url="https://cdn.example.com/")

    await store.put("audio/abc.mp3", b"\x01\x02", "audio/mpeg")

    assert minio.objects[("speech", "audio/abc.mp3")] == (b"\x01\x02", "audio/mpeg")
    assert store.public_url("audio/abc.mp3") == "https://cdn.example.com/speech/audio/abc.mp3"


@pytest.mark.asyncio
async def test_put_failure_becomes_storage_error() -> None:
    store = AudioStore(FakeMinio(fail_put=True), bucket="speech", public_base_url="http://minio:9000")

    with pytest.raises(StorageError) as excinfo:
        await store.put("audio/abc.mp3", b"\x01", "audio/mpeg")

    assert "ConnectionError" in excinfo.value.detail


@pytest.mark.asyncio
async def test_signed_url_uses_requested_expiry() -> None:
    minio = FakeMinio()
    store = AudioStore(minio, bucket="speech", public_base_url="http://minio:9000")

    url = await store.signed_url("audio/abc.mp3", 3600)

    assert url.endswith("X-Amz-Expires=3600")
    assert minio.presign_calls == [("speech", "audio/abc.mp3", timedelta(seconds=3600))]


@pytest.mark.asyncio
async def test_ensure_bucket_creates_missing_bucket() -> None:
    minio = FakeMinio()
    store = AudioStore(minio, bucket="speech", public_base_url="http://minio:9000")

    assert await store.ensure_bucket() is True
    assert await store.ensure_bucket() is False
    assert await store.ping() is True


def test_public_base_url_derivation() -> None:
    plain = Settings(_env_file=None, MINIO_ENDPOINT="minio:9000", MINIO_SECURE=False, AUDIO_PUBLIC_BASE_URL=None)
    secure = Settings(_env_file=None, MINIO_ENDPOINT="https://s3.amazonaws.com/", AUDIO_PUBLIC_BASE_URL=None)
    explicit = Settings(_env_file=None, AUDIO_PUBLIC_BASE_URL="https://cdn.example.com/")

    assert derive_public_base_url(plain) == "http://minio:9000"
    assert derive_public_base_url(secure) == "https://s3.amazonaws.com"
    assert derive_public_base_url(explicit) == "https://cdn.example.com"
