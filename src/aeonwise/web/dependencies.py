"""Request dependencies.

Everything a route needs is built once in create_app and stored on
app.state; these helpers read it back for use with Depends().
"""

from fastapi import Request

from aeonwise.config.app_config import AppConfig
from aeonwise.db.database import Database
from aeonwise.services.assistant import LearningAssistant
from aeonwise.services.speech import NarrationService


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_assistant(request: Request) -> LearningAssistant:
    return request.app.state.assistant


def get_narration(request: Request) -> NarrationService:
    return request.app.state.narration
