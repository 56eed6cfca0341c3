"""
Agent router.

Manual trigger for one orchestrator cycle (the runner does this on a
timer).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.agent.orchestrator import AgentOrchestrator
from src.api.dependencies import get_orchestrator
from src.core.types import describe_decision

router = APIRouter()


class TickResponse(BaseModel):
    tick_id: str
    timestamp: str
    processed: int
    decisions: list[dict]
    errors: list[str]


@router.post("/agent/tick", response_model=TickResponse, summary="Run one agent cycle")
async def run_tick(orchestrator: AgentOrchestrator = Depends(get_orchestrator)) -> TickResponse:
    result = await orchestrator.step()
    return TickResponse(
        tick_id=result.tick_id,
        timestamp=result.timestamp.isoformat(),
        processed=result.processed,
        decisions=[describe_decision(d) for d in result.decisions],
        errors=result.errors,
    )
