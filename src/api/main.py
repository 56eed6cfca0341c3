"""
FastAPI application for EduAgent.

Provides REST API for:
- Roadmap creation, listing and deletion
- Just-in-time day content (lesson, quiz, flashcards)
- Day completion / unlock
- Manual agent ticks
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from src.agent.bootstrap import build_generator, build_orchestrator, build_roadmap_service
from src.core.exceptions import GenerationError, InvalidDayTransitionError, NotFoundError
from src.core.logging_setup import configure_logging
from src.core.types import utcnow
from src.db.database import dispose_engine, get_async_engine, get_session_factory, init_db

settings = get_settings()


async def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings.log_level, settings.log_file)
    logger.info("Starting EduAgent API...")
    await init_db()

    generator = None
    if settings.has_ai_configured():
        generator = build_generator(settings)
        session_factory = get_session_factory()
        app.state.roadmap_service = build_roadmap_service(generator, session_factory)
        app.state.orchestrator = build_orchestrator(generator, session_factory, settings)
    else:
        logger.warning("No API key for LLM provider '{}', generation endpoints disabled", settings.llm_provider)

    logger.info("Service started on {}:{}", settings.api_host, settings.api_port)

    yield

    # Shutdown
    logger.info("Shutting down EduAgent API...")
    if generator is not None:
        await generator.close()
    await dispose_engine()


app = FastAPI(
    title="EduAgent",
    description="""
    Adaptive content orchestration for personalized learning.

    ## Features

    - **Roadmaps**: Day-by-day curricula generated from a topic
    - **Just-in-time content**: Lesson, quiz and flashcards generated when a day is opened
    - **Progression**: locked -> available -> completed day state machine
    - **Agent**: Autonomous lesson/quiz generation for learners needing attention
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Error Mapping
# ========================================


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidDayTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidDayTransitionError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    logger.error("Generation failed for {}: {}", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "eduagent",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check with an actual database round trip."""
    db_status, db_error = await _check_database_health()

    result: dict[str, Any] = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": utcnow().isoformat(),
        "components": {
            "database": db_status,
            "ai": "configured" if settings.has_ai_configured() else "not_configured",
        },
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from src.api.routers import agent_router, roadmap_router  # noqa: E402

app.include_router(roadmap_router.router, tags=["Roadmaps"])
app.include_router(agent_router.router, tags=["Agent"])
