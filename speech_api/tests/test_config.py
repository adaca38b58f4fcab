from speech_api.config import Settings
from speech_api.services.speech_handler import SpeechConfig


def test_cors_origins_accept_comma_separated_and_json(monkeypatch) -> None:
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example.com, https://b.example.com")
    assert Settings(_env_file=None).cors_allow_origins == ["https://a.example.com", "https://b.example.com"]

    monkeypatch.setenv("CORS_ALLOW_ORIGINS", '["https://c.example.com"]')
    assert Settings(_env_file=None).cors_allow_origins == ["https://c.example.com"]

    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "")
    assert Settings(_env_file=None).cors_allow_origins == ["*"]


def test_speech_config_is_built_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("ELEVENLABS_API_KEY", "k")
    monkeypatch.setenv("ELEVENLABS_DEFAULT_VOICE_ID", "Pw7NjARk1Tw61eca5OiP")
    monkeypatch.setenv("MINIO_BUCKET_AUDIO", "speech-audio")
    monkeypatch.setenv("SIGNED_URL_EXPIRY", "600")
    monkeypatch.setenv("REQUIRE_CALLER_ID", "true")

    config = SpeechConfig.from_settings(Settings(_env_file=None))

    assert config == SpeechConfig(
        api_key="k",
        bucket="speech-audio",
        default_voice_id="Pw7NjARk1Tw61eca5OiP",
        signed_url_expiry=600,
        default_language="english",
        require_caller_id=True,
    )
