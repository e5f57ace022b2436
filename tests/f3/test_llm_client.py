"""Tests for LLM client module."""

from unittest.mock import MagicMock, patch

import pytest

from aeonwise.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponse,
    LLMResponseError,
    Message,
)


def make_completion(content, model="test-model"):
    """Build an object shaped like an OpenAI chat completion."""
    response = MagicMock()
    response.model = model
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(prompt_tokens=10, completion_tokens=5, total_tokens=15)
    return response


@pytest.fixture
def groq_config():
    return LLMConfig(provider="groq", api_key="test-key")


@pytest.fixture
def mock_openai():
    """Patch the OpenAI SDK class used by LLMClient."""
    with patch("aeonwise.llm.client.OpenAI") as MockOpenAI:
        yield MockOpenAI.return_value


class TestLLMConfig:
    """Tests for LLMConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = LLMConfig()

        assert config.provider == "groq"
        assert config.base_url == "https://api.groq.com/openai/v1"
        assert config.model == "llama3-8b-8192"
        assert config.temperature == 0.7
        assert config.max_tokens == 1024
        assert config.api_key is None

    def test_from_app_config_reads_key_from_env(self, app_config, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "secret")

        config = LLMConfig.from_app_config(app_config)

        assert config.provider == "groq"
        assert config.api_key == "secret"
        assert config.requires_key is True

    def test_from_app_config_provider_override(self, app_config, monkeypatch):
        """openai leaves base_url unset in config; the provider default fills it."""
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        config = LLMConfig.from_app_config(app_config, provider="openai")

        assert config.base_url == "https://api.openai.com/v1"
        assert config.model == "gpt-4o-mini"
        assert config.api_key is None

    def test_lmstudio_needs_no_key(self, app_config):
        config = LLMConfig.from_app_config(app_config, provider="lmstudio")

        assert config.requires_key is False
        assert config.api_key == "lm-studio"
        assert config.model == "llama-3.2-3b-instruct"

    def test_unknown_provider(self, app_config):
        with pytest.raises(LLMError):
            LLMConfig.from_app_config(app_config, provider="nope")


class TestMessage:
    """Tests for Message and LLMResponse."""

    def test_message_to_dict(self):
        msg = Message(role="user", content="Hello, world!")

        assert msg.to_dict() == {"role": "user", "content": "Hello, world!"}

    def test_total_tokens(self):
        response = LLMResponse(content="x", model="m", provider="groq", usage={"total_tokens": 7})

        assert response.total_tokens == 7
        assert LLMResponse(content="x", model="m", provider="groq").total_tokens == 0


class TestLLMClient:
    """Tests for LLMClient."""

    def test_is_configured(self, mock_openai):
        assert LLMClient(config=LLMConfig(api_key="k")).is_configured is True
        assert LLMClient(config=LLMConfig(api_key=None)).is_configured is False
        assert LLMClient(
            config=LLMConfig(provider="lmstudio", requires_key=False)
        ).is_configured is True

    def test_model_override(self, mock_openai, groq_config):
        client = LLMClient(config=groq_config, model="llama3-70b-8192")

        assert client.config.model == "llama3-70b-8192"

    def test_chat_returns_response(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.return_value = make_completion("Hello")

        response = LLMClient(config=groq_config).chat([Message(role="user", content="Hi")])

        assert response.content == "Hello"
        assert response.provider == "groq"
        assert response.usage["total_tokens"] == 15

    def test_chat_json_mode_for_supporting_provider(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.return_value = make_completion("{}")

        LLMClient(config=groq_config).chat([Message(role="user", content="Hi")], json_mode=True)

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_chat_json_mode_skipped_for_lmstudio(self, mock_openai):
        mock_openai.chat.completions.create.return_value = make_completion("{}")
        config = LLMConfig(provider="lmstudio", requires_key=False)

        LLMClient(config=config).chat([Message(role="user", content="Hi")], json_mode=True)

        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert "response_format" not in kwargs

    def test_connection_error(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.side_effect = Exception("Connection refused")

        with pytest.raises(LLMConnectionError):
            LLMClient(config=groq_config).chat([Message(role="user", content="Hi")])

    def test_other_error(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.side_effect = Exception("rate limited")

        with pytest.raises(LLMError):
            LLMClient(config=groq_config).chat([Message(role="user", content="Hi")])

    def test_empty_choices(self, mock_openai, groq_config):
        completion = make_completion("x")
        completion.choices = []
        mock_openai.chat.completions.create.return_value = completion

        with pytest.raises(LLMResponseError):
            LLMClient(config=groq_config).chat([Message(role="user", content="Hi")])

    def test_simple_chat(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.return_value = make_completion("Answer")

        assert LLMClient(config=groq_config).simple_chat("system", "question") == "Answer"

        messages = mock_openai.chat.completions.create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]


class TestChatJson:
    """Tests for chat_json and its repair retry."""

    def test_parses_first_reply(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.return_value = make_completion('{"ok": true}')

        result = LLMClient(config=groq_config).simple_json("system", "question")

        assert result == {"ok": True}
        assert mock_openai.chat.completions.create.call_count == 1

    def test_recovers_after_retry(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.side_effect = [
            make_completion("not json"),
            make_completion('{"ok": 1}'),
        ]

        result = LLMClient(config=groq_config).simple_json("system", "question")

        assert result == {"ok": 1}
        retry_messages = mock_openai.chat.completions.create.call_args.kwargs["messages"]
        assert retry_messages[-2] == {"role": "assistant", "content": "not json"}
        assert "not json" in retry_messages[-1]["content"]

    def test_fails_after_retry(self, mock_openai, groq_config):
        mock_openai.chat.completions.create.return_value = make_completion("still not json")

        with pytest.raises(LLMResponseError):
            LLMClient(config=groq_config).simple_json("system", "question")

        assert mock_openai.chat.completions.create.call_count == 2


class TestIsAvailable:
    """Tests for is_available."""

    def test_available(self, mock_openai, groq_config):
        mock_openai.models.list.return_value = MagicMock()

        assert LLMClient(config=groq_config).is_available() is True

    def test_unavailable(self, mock_openai, groq_config):
        mock_openai.models.list.side_effect = Exception("down")

        assert LLMClient(config=groq_config).is_available() is False
