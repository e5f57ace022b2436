"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is missing. Values
missing from the file are filled from the defaults section by section.

Usage:
    from aeonwise.config.app_config import load_app_config, get_provider_config

    config = load_app_config()
    provider = get_provider_config("groq")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class ProviderConfig:
    """Configuration for a single chat-completion provider."""

    base_url: str | None
    default_model: str
    api_key_env: str | None = None

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class AssistantConfig:
    """Which assistant backs the AI features.

    mode is "llm" (chat-completion API, mock fallback on failure)
    or "mock" (canned content only).
    """

    mode: str = "llm"
    provider: str = "groq"
    temperature: float = 0.7


@dataclass
class SpeechConfig:
    """Text-to-speech settings."""

    provider: str = "elevenlabs"  # "elevenlabs" | "disabled"
    base_url: str = "https://api.elevenlabs.io/v1"
    api_key_env: str | None = "ELEVENLABS_API_KEY"
    voice_id: str = "EXAVITQu4vr4xnSDxMaL"
    model_id: str = "eleven_monolingual_v1"
    stability: float = 0.75
    clarity: float = 0.75
    max_chars: int = 5000
    timeout: float = 30.0

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class AppConfig:
    """Application-wide configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        return Path(self.paths.get("db_path", "db/aeonwise.db"))

    @property
    def audio_cache_dir(self) -> Path:
        return Path(self.paths.get("audio_cache_dir", "data/audio"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "providers": {
            "groq": {
                "base_url": "https://api.groq.com/openai/v1",
                "default_model": "llama3-8b-8192",
                "api_key_env": "GROQ_API_KEY",
            },
            "openai": {
                "base_url": None,
                "default_model": "gpt-4o-mini",
                "api_key_env": "OPENAI_API_KEY",
            },
            "lmstudio": {
                "base_url": "http://localhost:1234/v1",
                "default_model": "llama-3.2-3b-instruct",
                "api_key_env": None,
            },
        },
        "assistant": {
            "mode": "llm",
            "provider": "groq",
            "temperature": 0.7,
        },
        "speech": {
            "provider": "elevenlabs",
            "base_url": "https://api.elevenlabs.io/v1",
            "api_key_env": "ELEVENLABS_API_KEY",
            "voice_id": "EXAVITQu4vr4xnSDxMaL",
            "model_id": "eleven_monolingual_v1",
            "stability": 0.75,
            "clarity": 0.75,
            "max_chars": 5000,
            "timeout": 30.0,
        },
        "paths": {
            "db_path": "db/aeonwise.db",
            "audio_cache_dir": "data/audio",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    providers = {}
    for name, pconfig in (data.get("providers") or defaults["providers"]).items():
        providers[name] = ProviderConfig(
            base_url=pconfig.get("base_url"),
            default_model=pconfig.get("default_model", "default"),
            api_key_env=pconfig.get("api_key_env"),
        )

    assistant_data = {**defaults["assistant"], **(data.get("assistant") or {})}
    assistant = AssistantConfig(
        mode=assistant_data["mode"],
        provider=assistant_data["provider"],
        temperature=float(assistant_data["temperature"]),
    )

    speech_data = {**defaults["speech"], **(data.get("speech") or {})}
    speech = SpeechConfig(
        provider=speech_data["provider"],
        base_url=speech_data["base_url"],
        api_key_env=speech_data["api_key_env"],
        voice_id=speech_data["voice_id"],
        model_id=speech_data["model_id"],
        stability=float(speech_data["stability"]),
        clarity=float(speech_data["clarity"]),
        max_chars=int(speech_data["max_chars"]),
        timeout=float(speech_data["timeout"]),
    )

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(providers=providers, assistant=assistant, speech=speech, paths=paths)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_provider_config(provider: str) -> ProviderConfig | None:
    """Get configuration for a specific provider.

    Args:
        provider: Provider name (e.g., "groq", "openai")

    Returns:
        ProviderConfig or None if provider not found.
    """
    config = load_app_config()
    return config.providers.get(provider)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
