"""FastAPI dependencies for the services built in the app lifespan."""

from __future__ import annotations

from fastapi import HTTPException, Request

from src.agent.orchestrator import AgentOrchestrator
from src.roadmap.roadmap_service import RoadmapService


def get_roadmap_service(request: Request) -> RoadmapService:
    service = getattr(request.app.state, "roadmap_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Content generation is not configured")
    return service


def get_orchestrator(request: Request) -> AgentOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Content generation is not configured")
    return orchestrator
