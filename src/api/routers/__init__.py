"""API routers for EduAgent."""

from src.api.routers import agent_router, roadmap_router

__all__ = [
    "agent_router",
    "roadmap_router",
]
