"""Route handlers for the admin API."""

from proacademics.web.routes.health import router as health_router
from proacademics.web.routes.subjects import router as subjects_router
from proacademics.web.routes.programs import router as programs_router
from proacademics.web.routes.homework import router as homework_router
from proacademics.web.routes.lessons import router as lessons_router
from proacademics.web.routes.pastpapers import router as pastpapers_router
from proacademics.web.routes.topic_vault import router as topic_vault_router

__all__ = [
    "health_router",
    "subjects_router",
    "programs_router",
    "homework_router",
    "lessons_router",
    "pastpapers_router",
    "topic_vault_router",
]
