"""Fixtures for F3 tests - LLM client and learning assistant."""

from unittest.mock import MagicMock

import pytest

from aeonwise.config.app_config import _get_defaults, _parse_config


@pytest.fixture
def app_config():
    """Built-in default configuration, without reading any file."""
    return _parse_config(_get_defaults())


@pytest.fixture
def mock_llm_client():
    """Mock LLM client for assistant tests."""
    client = MagicMock()
    client.config = MagicMock()
    client.config.provider = "groq"
    client.config.model = "test-model"
    client.is_configured = True
    return client


@pytest.fixture
def recommendations_payload():
    """Model reply for the recommendations prompt, in its camelCase shape."""
    return {
        "courses": [
            {
                "title": "Intro to Rust",
                "description": "Ownership and borrowing",
                "level": "beginner",
                "duration": 6,
                "modules": 5,
                "category": "Programming",
            }
        ],
        "mentors": [
            {
                "name": "Jo Park",
                "specialty": "Rust",
                "price": 80,
                "currency": "USD",
                "sessionLength": 45,
                "bio": "Systems engineer",
                "rating": 4.6,
            }
        ],
        "matches": [
            {
                "name": "Sam Lee",
                "skills": ["Rust", "Go"],
                "bio": "Likes compilers",
                "matchScore": 8,
            }
        ],
    }
