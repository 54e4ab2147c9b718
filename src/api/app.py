"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api import ai_chat, auth, courses, functions, preferences, sessions
from src.api.config import get_api_config
from src.api.context import AppContext
from src.api.errors import CallableError, callable_error_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Builds the application context unless one was supplied to
    `create_app`, and closes the context it built on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    owned = getattr(app.state, "context", None) is None
    if owned:
        context = AppContext.create()
        await context.start()
        app.state.context = context
    logger.info("Starting LMS Tutor API...")
    yield
    logger.info("Shutting down LMS Tutor API...")
    if owned:
        await app.state.context.close()
        app.state.context = None


def create_app(context: AppContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Pre-built application context. When omitted, the
            lifespan builds one from the environment at startup.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="LMS Tutor API",
        description=(
            "Learning-management backend: accounts and roles, course creation, "
            "persisted AI tutor chat sessions, and callable functions that proxy "
            "prompts to an LLM provider."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.context = context

    cors_config = context.config if context else get_api_config()
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(CallableError, callable_error_handler)

    application.include_router(auth.router)
    application.include_router(functions.router)
    application.include_router(ai_chat.router)
    application.include_router(sessions.router)
    application.include_router(courses.router)
    application.include_router(preferences.router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "lms-tutor"}

    return application


app = create_app()
