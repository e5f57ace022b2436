"""Configuration package for the AeonWise platform."""

from aeonwise.config.app_config import (
    AppConfig,
    AssistantConfig,
    ProviderConfig,
    SpeechConfig,
    clear_config_cache,
    get_provider_config,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AssistantConfig",
    "ProviderConfig",
    "SpeechConfig",
    "clear_config_cache",
    "get_provider_config",
    "load_app_config",
]
