"""LLM client for Groq / OpenAI / LM Studio.

Provides a unified interface for chat-completion calls over the
OpenAI-compatible API that all three providers expose.

Supported providers:
- groq: Groq cloud (default)
- openai: OpenAI API
- lmstudio: Local LM Studio server
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from openai import OpenAI

from aeonwise.config.app_config import AppConfig, load_app_config
from aeonwise.utils.text_utils import extract_json_object

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

Provider = Literal["groq", "openai", "lmstudio"]

# Provider-specific defaults, used when the config leaves a value out
PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "groq": {
        "base_url": "https://api.groq.com/openai/v1",
        "model": "llama3-8b-8192",
        "api_key_env": "GROQ_API_KEY",
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "model": "gpt-4o-mini",
        "api_key_env": "OPENAI_API_KEY",
    },
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "model": "default",
        "api_key": "lm-studio",  # LM Studio doesn't need a real key
    },
}

# Providers accepting response_format={"type": "json_object"}
PROVIDER_CAPABILITIES_DEFAULTS: dict[str, dict[str, bool]] = {
    "groq": {"supports_json_object": True},
    "openai": {"supports_json_object": True},
    "lmstudio": {"supports_json_object": False},
}

JSON_REPAIR_PROMPT = """Fix the following text and return ONLY valid JSON:
<<<
{invalid_output}
>>>

Reply with the corrected JSON only, no explanations and no markdown."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: Provider = "groq"
    base_url: str = "https://api.groq.com/openai/v1"
    model: str = "llama3-8b-8192"
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout: int = 60
    api_key: str | None = None
    requires_key: bool = True
    supports_json_object: bool | None = None

    @classmethod
    def from_app_config(
        cls, app_config: AppConfig | None = None, provider: str | None = None
    ) -> LLMConfig:
        """Build from the application config.

        Args:
            app_config: Loaded config (loads the default file if None)
            provider: Provider to use instead of assistant.provider
        """
        if app_config is None:
            app_config = load_app_config()

        provider = provider or app_config.assistant.provider
        if provider not in PROVIDER_DEFAULTS:
            raise LLMError(f"Unknown LLM provider: {provider}")

        defaults = PROVIDER_DEFAULTS[provider]
        pconfig = app_config.providers.get(provider)

        base_url = (pconfig.base_url if pconfig else None) or defaults["base_url"]
        model = (pconfig.default_model if pconfig else None) or defaults["model"]

        api_key_env = pconfig.api_key_env if pconfig else defaults.get("api_key_env")
        if api_key_env:
            api_key = os.environ.get(api_key_env)
            requires_key = True
        else:
            api_key = defaults.get("api_key")
            requires_key = False

        return cls(
            provider=provider,
            base_url=base_url,
            model=model,
            temperature=app_config.assistant.temperature,
            api_key=api_key,
            requires_key=requires_key,
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for API call."""
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Unified client for chat-completion providers."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        provider: Provider | None = None,
        model: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (built from app config if not provided)
            provider: Override provider from config
            model: Override model from config
        """
        if config is None:
            config = LLMConfig.from_app_config(provider=provider)
        elif provider is not None and provider != config.provider:
            config = LLMConfig.from_app_config(provider=provider)

        self.config = config

        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
        )

        logger.info(
            "llm.client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            base_url=self.config.base_url,
        )

    @property
    def is_configured(self) -> bool:
        """False when the provider needs an API key that is missing."""
        return bool(self.config.api_key) or not self.config.requires_key

    def _supports_json_object(self) -> bool:
        if self.config.supports_json_object is not None:
            return self.config.supports_json_object
        caps = PROVIDER_CAPABILITIES_DEFAULTS.get(self.config.provider, {})
        return caps.get("supports_json_object", False)

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send chat completion request.

        Args:
            messages: List of messages in conversation
            temperature: Override default temperature
            max_tokens: Override default max tokens
            json_mode: Request JSON response format (only if provider supports it)

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConnectionError: If cannot connect to server
            LLMResponseError: If response is invalid
        """
        if temperature is None:
            temperature = self.config.temperature
        if max_tokens is None:
            max_tokens = self.config.max_tokens

        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        if json_mode and self._supports_json_object():
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()

        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            error_msg = str(e)
            if "Connection" in error_msg or "connect" in error_msg.lower():
                raise LLMConnectionError(
                    f"Could not connect to {self.config.provider} at {self.config.base_url}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        content = response.choices[0].message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm.response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> dict[str, Any]:
        """Send chat request expecting a JSON object.

        Retries once with a repair prompt when the first reply does not parse.

        Raises:
            LLMResponseError: If response is not valid JSON after retries
        """
        response = self.chat(
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=True,
        )

        parsed = extract_json_object(response.content)
        if parsed is not None:
            return parsed

        if max_retries > 0:
            logger.warning(
                "llm.json_parse_failed_retrying",
                content=response.content[:100],
                provider=self.config.provider,
            )

            repair_prompt = JSON_REPAIR_PROMPT.format(
                invalid_output=response.content[:1000]
            )
            retry_messages = messages + [
                Message(role="assistant", content=response.content),
                Message(role="user", content=repair_prompt),
            ]

            retry_response = self.chat(
                retry_messages,
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=True,
            )

            parsed = extract_json_object(retry_response.content)
            if parsed is not None:
                logger.info("llm.json_parse_recovered_after_retry")
                return parsed

        raise LLMResponseError(f"Could not get valid JSON: {response.content[:200]}...")

    def simple_chat(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Single-turn chat with a system prompt and a user message."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        response = self.chat(messages=messages, temperature=temperature, max_tokens=max_tokens)
        return response.content

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Single-turn chat expecting a JSON object."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        return self.chat_json(messages=messages, temperature=temperature, max_tokens=max_tokens)

    def is_available(self) -> bool:
        """Check if the LLM server responds.

        Returns:
            True if server responds, False otherwise
        """
        try:
            self._client.models.list()
            return True
        except Exception:
            return False
