"""FastAPI application factory.

Main entry point for the AeonWise Web API. Run with:

    uvicorn aeonwise.web.api:create_app --factory
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from aeonwise.config.app_config import AppConfig, load_app_config
from aeonwise.core.catalog import list_courses
from aeonwise.db.database import Database, init_db
from aeonwise.services.assistant import LearningAssistant, get_assistant
from aeonwise.services.speech import NarrationService, get_speech_provider
from aeonwise.web.routes import (
    assistant_router,
    auth_router,
    community_router,
    courses_router,
    health_router,
    profiles_router,
    progress_router,
    ranking_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    courses = list_courses()
    logger.info(
        "api.startup",
        db_path=str(app.state.db.path),
        courses=[c.id for c in courses],
        assistant=type(app.state.assistant).__name__,
        speech=type(app.state.narration.provider).__name__,
    )
    yield


def create_app(
    config: AppConfig | None = None,
    db: Database | None = None,
    assistant: LearningAssistant | None = None,
    narration: NarrationService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application config (loaded from file if None)
        db: Database handle (initialized at config.db_path if None)
        assistant: Assistant strategy (selected from config if None)
        narration: Narration service (built from config if None)

    Returns:
        Configured FastAPI app instance
    """
    if config is None:
        config = load_app_config()

    app = FastAPI(
        title="AeonWise API",
        description="Courses, ranking, skill-swap and AI assistant for AeonWise",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.db = db or init_db(config.db_path)
    app.state.assistant = assistant or get_assistant(config)
    app.state.narration = narration or NarrationService(
        get_speech_provider(config), config.audio_cache_dir
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(profiles_router)
    app.include_router(ranking_router)
    app.include_router(courses_router)
    app.include_router(progress_router)
    app.include_router(assistant_router)
    app.include_router(community_router)

    return app
