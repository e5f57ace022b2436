"""Route handlers for Web API."""

from aeonwise.web.routes.health import router as health_router
from aeonwise.web.routes.auth import router as auth_router
from aeonwise.web.routes.profiles import router as profiles_router
from aeonwise.web.routes.ranking import router as ranking_router
from aeonwise.web.routes.courses import router as courses_router
from aeonwise.web.routes.progress import router as progress_router
from aeonwise.web.routes.assistant import router as assistant_router
from aeonwise.web.routes.community import router as community_router

__all__ = [
    "health_router",
    "auth_router",
    "profiles_router",
    "ranking_router",
    "courses_router",
    "progress_router",
    "assistant_router",
    "community_router",
]
