"""Error taxonomy for the speech pipeline."""

from __future__ import annotations


class SpeechError(Exception):
    """Base error carrying a caller-facing message and HTTP status."""

    status_code = 500

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or message


class ValidationError(SpeechError):
    """Malformed body or missing/empty fields. No side effects attempted."""

    status_code = 400


class ConfigurationError(SpeechError):
    """Required credential, bucket or voice id is not configured."""


class UpstreamSynthesisError(SpeechError):
    """Raised for network failures and non-success responses from the speech provider."""

    def __init__(self, message: str, *, detail: str | None = None, upstream_status: int | None = None) -> None:
        super().__init__(message, detail=detail)
        self.upstream_status = upstream_status


class StorageError(SpeechError):
    """Content store write or URL signing failed."""


class PersistenceError(SpeechError):
    """History write failed. Logged only, never returned to the caller."""
