"""FastAPI application factory.

Main entry point for the ProAcademics Admin API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from proacademics.config import load_app_config
from proacademics.db.database import current_db_path, init_db
from proacademics.web.responses import (
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from proacademics.web.routes import (
    health_router,
    homework_router,
    lessons_router,
    pastpapers_router,
    programs_router,
    subjects_router,
    topic_vault_router,
)
from proacademics.web.schemas import ErrorResponse

logger = structlog.get_logger(__name__)

# Documented error envelopes shared by every route
ERROR_RESPONSES = {
    code: {"model": ErrorResponse, "description": description}
    for code, description in (
        (400, "Bad request"),
        (404, "Not found"),
        (409, "Conflict"),
        (413, "Upload too large"),
        (422, "Validation error"),
        (500, "Internal server error"),
    )
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    init_db(current_db_path())
    logger.info("api_startup", db_path=str(current_db_path().absolute()))
    yield
    # Shutdown (nothing to do for now)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    config = load_app_config()

    app = FastAPI(
        title=config.api.title,
        description="Admin API for homework, lessons, past papers and the topic vault",
        version=config.api.version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every error leaves as {"success": false, "error": ...}
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    for router in (
        health_router,
        subjects_router,
        programs_router,
        homework_router,
        lessons_router,
        pastpapers_router,
        topic_vault_router,
    ):
        app.include_router(router, responses=ERROR_RESPONSES)

    return app


# Default app instance for uvicorn
app = create_app()
