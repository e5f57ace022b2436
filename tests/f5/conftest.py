"""Fixtures for F5 tests - Web API, CLI and configuration."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from aeonwise.config.app_config import _get_defaults, _parse_config
from aeonwise.db.database import init_db
from aeonwise.services.assistant import MockAssistant
from aeonwise.services.speech import DisabledSpeech, NarrationService
from aeonwise.web.api import create_app


@pytest.fixture
def app_config(tmp_path):
    """Default configuration with every path under tmp_path."""
    data = _get_defaults()
    data["paths"] = {
        "db_path": str(tmp_path / "db" / "aeonwise.db"),
        "audio_cache_dir": str(tmp_path / "audio"),
    }
    return _parse_config(data)


@pytest.fixture
def db(app_config):
    return init_db(app_config.db_path)


@pytest.fixture
def speech_provider():
    """Speech provider that always returns a few bytes of audio."""
    provider = MagicMock()
    provider.is_configured = True
    provider.synthesize.return_value = b"audio"
    return provider


@pytest.fixture
def client(app_config, db):
    """Test client with mock assistant and speech disabled."""
    app = create_app(
        config=app_config,
        db=db,
        assistant=MockAssistant(),
        narration=NarrationService(DisabledSpeech(), app_config.audio_cache_dir),
    )
    return TestClient(app)


@pytest.fixture
def speaking_client(app_config, db, speech_provider):
    """Test client whose narration service produces audio."""
    app = create_app(
        config=app_config,
        db=db,
        assistant=MockAssistant(),
        narration=NarrationService(speech_provider, app_config.audio_cache_dir),
    )
    return TestClient(app)


@pytest.fixture
def registered(client):
    """A registered user; returns the register response body."""
    response = client.post(
        "/api/auth/register", json={"username": "ana_dev", "password": "secret123"}
    )
    assert response.status_code == 201
    return response.json()
