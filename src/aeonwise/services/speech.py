"""Text-to-speech providers and the narration cache.

ElevenLabsSpeech talks to the ElevenLabs REST API over httpx.
NarrationService sits in front of a provider, stores generated audio
under a cache directory keyed by content hash, and degrades to "no
audio" when the provider fails.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Protocol

import httpx
import structlog

from aeonwise.config.app_config import AppConfig, SpeechConfig, load_app_config
from aeonwise.core.models import ContentSection, Lesson
from aeonwise.core.narration import lesson_script, section_script

logger = structlog.get_logger(__name__)

DEFAULT_VOICES = [
    {"voice_id": "EXAVITQu4vr4xnSDxMaL", "name": "Bella"},
    {"voice_id": "UgBBYS2sOqTuMpoF3BR0", "name": "Sarah"},
    {"voice_id": "pNInz6obpgDQGcFmaJgB", "name": "Adam"},
]


class SpeechError(Exception):
    """Error during speech synthesis."""

    pass


class SpeechNotConfiguredError(SpeechError):
    """No API key, or speech disabled."""

    pass


class SpeechAuthError(SpeechError):
    """API key rejected."""

    pass


class SpeechRateLimitError(SpeechError):
    """Provider rate limit exceeded."""

    pass


class SpeechProvider(Protocol):
    """Interface for text-to-speech backends."""

    @property
    def is_configured(self) -> bool: ...

    def synthesize(self, text: str, **settings: Any) -> bytes: ...

    def list_voices(self) -> list[dict[str, str]]: ...


class DisabledSpeech:
    """Provider used when speech is turned off."""

    @property
    def is_configured(self) -> bool:
        return False

    def synthesize(self, text: str, **settings: Any) -> bytes:
        raise SpeechNotConfiguredError("Speech synthesis is disabled")

    def list_voices(self) -> list[dict[str, str]]:
        return list(DEFAULT_VOICES)


class ElevenLabsSpeech:
    """ElevenLabs text-to-speech client."""

    def __init__(self, config: SpeechConfig | None = None, http_client: httpx.Client | None = None):
        """Initialize the client.

        Args:
            config: Speech settings (defaults from the app config)
            http_client: Client to send requests with; tests pass one
                built on httpx.MockTransport
        """
        self.config = config or load_app_config().speech
        self.api_key = self.config.get_api_key()
        self._http = http_client or httpx.Client(timeout=self.config.timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def _headers(self, accept: str = "application/json") -> dict[str, str]:
        return {
            "Accept": accept,
            "Content-Type": "application/json",
            "xi-api-key": self.api_key or "",
        }

    def build_payload(
        self,
        text: str,
        stability: float | None = None,
        clarity: float | None = None,
    ) -> dict[str, Any]:
        """JSON body for a synthesis request; text is cut to max_chars."""
        return {
            "text": text[: self.config.max_chars],
            "model_id": self.config.model_id,
            "voice_settings": {
                "stability": self.config.stability if stability is None else stability,
                "similarity_boost": self.config.clarity if clarity is None else clarity,
                "style": 0.0,
                "use_speaker_boost": True,
            },
        }

    def synthesize(
        self,
        text: str,
        voice: str | None = None,
        stability: float | None = None,
        clarity: float | None = None,
    ) -> bytes:
        """Generate MPEG audio for text.

        Raises:
            SpeechNotConfiguredError: If no API key is set
            SpeechAuthError: On HTTP 401
            SpeechRateLimitError: On HTTP 429
            SpeechError: On any other failure
        """
        if not self.is_configured:
            raise SpeechNotConfiguredError(
                f"ElevenLabs API key not configured. Set {self.config.api_key_env}."
            )

        voice = voice or self.config.voice_id
        url = f"{self.config.base_url.rstrip('/')}/text-to-speech/{voice}"

        try:
            response = self._http.post(
                url,
                headers=self._headers(accept="audio/mpeg"),
                json=self.build_payload(text, stability, clarity),
            )
        except httpx.HTTPError as e:
            raise SpeechError(f"Could not reach ElevenLabs: {e}") from e

        if response.status_code == 401:
            raise SpeechAuthError("Invalid ElevenLabs API key")
        if response.status_code == 429:
            raise SpeechRateLimitError("ElevenLabs API rate limit exceeded. Try again later.")
        if not response.is_success:
            raise SpeechError(f"ElevenLabs API error ({response.status_code}): {response.text[:200]}")

        logger.debug("speech.synthesized", voice=voice, chars=len(text), bytes=len(response.content))
        return response.content

    def list_voices(self) -> list[dict[str, str]]:
        """Available voices, or the built-in defaults on any failure."""
        if not self.is_configured:
            return list(DEFAULT_VOICES)

        try:
            response = self._http.get(
                f"{self.config.base_url.rstrip('/')}/voices", headers=self._headers()
            )
            response.raise_for_status()
            voices = [
                {"voice_id": v["voice_id"], "name": v["name"]}
                for v in response.json().get("voices", [])
            ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.warning("speech.voices_fallback", error=str(e))
            return list(DEFAULT_VOICES)

        return voices or list(DEFAULT_VOICES)


def get_speech_provider(config: AppConfig | None = None) -> SpeechProvider:
    """Build the provider named in the speech config."""
    if config is None:
        config = load_app_config()
    if config.speech.provider == "elevenlabs":
        return ElevenLabsSpeech(config.speech)
    return DisabledSpeech()


class NarrationService:
    """Cached narration on top of a speech provider."""

    def __init__(self, provider: SpeechProvider, cache_dir: Path):
        self.provider = provider
        self.cache_dir = Path(cache_dir)

    def cache_key(self, text: str, **settings: Any) -> str:
        payload = json.dumps({"text": text, "settings": settings}, sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def narrate(self, text: str, **settings: Any) -> Path | None:
        """Audio file for text, generated on first request.

        Returns:
            Path to the cached MPEG file, or None when the provider
            is unavailable or fails
        """
        if not text.strip():
            return None

        path = self.cache_dir / f"{self.cache_key(text, **settings)}.mp3"
        if path.exists():
            logger.debug("narration.cache_hit", path=str(path))
            return path

        try:
            audio = self.provider.synthesize(text, **settings)
        except SpeechError as e:
            logger.warning("narration.unavailable", error=str(e), error_type=type(e).__name__)
            return None

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        logger.info("narration.generated", path=str(path), chars=len(text))
        return path

    def narrate_section(self, section: ContentSection, **settings: Any) -> ContentSection:
        """Narrate a section and set its audio_url (None on failure)."""
        path = self.narrate(section_script(section), **settings)
        section.audio_url = str(path) if path else None
        return section

    def narrate_lesson(self, lesson: Lesson, **settings: Any) -> Path | None:
        return self.narrate(lesson_script(lesson), **settings)
