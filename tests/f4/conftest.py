"""Fixtures for F4 tests - speech synthesis and narration cache."""

import httpx
import pytest

from aeonwise.config.app_config import SpeechConfig
from aeonwise.services.speech import ElevenLabsSpeech


@pytest.fixture
def speech_config(monkeypatch):
    """ElevenLabs settings with a key in a test-only environment variable."""
    monkeypatch.setenv("AEONWISE_TEST_ELEVENLABS_KEY", "test-key")
    return SpeechConfig(api_key_env="AEONWISE_TEST_ELEVENLABS_KEY", base_url="https://tts.test/v1")


@pytest.fixture
def requests_seen():
    """Requests captured by the mock transport."""
    return []


@pytest.fixture
def make_speech(speech_config, requests_seen):
    """Build an ElevenLabsSpeech whose HTTP calls go to a handler."""

    def _make(handler, config=None):
        def _record(request: httpx.Request) -> httpx.Response:
            requests_seen.append(request)
            return handler(request)

        http_client = httpx.Client(transport=httpx.MockTransport(_record))
        return ElevenLabsSpeech(config or speech_config, http_client=http_client)

    return _make
