"""Tests for the ElevenLabs speech provider."""

import json

import httpx
import pytest

from aeonwise.config.app_config import AppConfig, SpeechConfig
from aeonwise.services.speech import (
    DEFAULT_VOICES,
    DisabledSpeech,
    ElevenLabsSpeech,
    SpeechAuthError,
    SpeechError,
    SpeechNotConfiguredError,
    SpeechRateLimitError,
    get_speech_provider,
)


def audio_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"ID3-audio")


class TestSynthesize:
    """Tests for ElevenLabsSpeech.synthesize."""

    def test_posts_to_voice_endpoint(self, make_speech, requests_seen):
        speech = make_speech(audio_handler)

        audio = speech.synthesize("Hello there", voice="voice-1")

        assert audio == b"ID3-audio"
        request = requests_seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://tts.test/v1/text-to-speech/voice-1"
        assert request.headers["xi-api-key"] == "test-key"
        assert request.headers["accept"] == "audio/mpeg"

    def test_payload_uses_settings(self, make_speech, requests_seen):
        speech = make_speech(audio_handler)

        speech.synthesize("Hello", stability=0.3)

        body = json.loads(requests_seen[0].content)
        assert body["text"] == "Hello"
        assert body["model_id"] == "eleven_monolingual_v1"
        assert body["voice_settings"]["stability"] == 0.3
        assert body["voice_settings"]["similarity_boost"] == 0.75

    def test_default_voice(self, make_speech, requests_seen, speech_config):
        make_speech(audio_handler).synthesize("Hello")

        assert requests_seen[0].url.path.endswith(f"/text-to-speech/{speech_config.voice_id}")

    def test_text_truncated(self, make_speech, monkeypatch):
        monkeypatch.setenv("AEONWISE_TEST_ELEVENLABS_KEY", "test-key")
        config = SpeechConfig(api_key_env="AEONWISE_TEST_ELEVENLABS_KEY", max_chars=5)
        speech = make_speech(audio_handler, config=config)

        assert speech.build_payload("abcdefghij")["text"] == "abcde"

    @pytest.mark.parametrize(
        "status,error",
        [
            (401, SpeechAuthError),
            (429, SpeechRateLimitError),
            (500, SpeechError),
        ],
    )
    def test_http_errors(self, make_speech, status, error):
        speech = make_speech(lambda request: httpx.Response(status, text="nope"))

        with pytest.raises(error):
            speech.synthesize("Hello")

    def test_network_error(self, make_speech):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(SpeechError):
            make_speech(handler).synthesize("Hello")

    def test_missing_key(self, make_speech, monkeypatch, requests_seen):
        monkeypatch.delenv("AEONWISE_TEST_ELEVENLABS_KEY")
        speech = make_speech(audio_handler)

        assert speech.is_configured is False
        with pytest.raises(SpeechNotConfiguredError):
            speech.synthesize("Hello")
        assert requests_seen == []


class TestListVoices:
    """Tests for ElevenLabsSpeech.list_voices."""

    def test_lists_remote_voices(self, make_speech):
        payload = {"voices": [{"voice_id": "v1", "name": "Nova", "category": "premade"}]}
        speech = make_speech(lambda request: httpx.Response(200, json=payload))

        assert speech.list_voices() == [{"voice_id": "v1", "name": "Nova"}]

    def test_falls_back_on_error(self, make_speech):
        speech = make_speech(lambda request: httpx.Response(500))

        assert speech.list_voices() == DEFAULT_VOICES

    def test_falls_back_without_key(self, make_speech, monkeypatch):
        monkeypatch.delenv("AEONWISE_TEST_ELEVENLABS_KEY")

        assert make_speech(audio_handler).list_voices() == DEFAULT_VOICES


class TestProviders:
    """Tests for provider selection and the disabled provider."""

    def test_disabled(self):
        speech = DisabledSpeech()

        assert speech.is_configured is False
        with pytest.raises(SpeechNotConfiguredError):
            speech.synthesize("Hello")

    def test_get_speech_provider(self):
        assert isinstance(get_speech_provider(AppConfig()), ElevenLabsSpeech)
        assert isinstance(
            get_speech_provider(AppConfig(speech=SpeechConfig(provider="disabled"))),
            DisabledSpeech,
        )
