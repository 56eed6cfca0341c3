"""
Agent Module - Autonomous sense/think/act/learn loop.

Components:
- decision_engine: rule-based decision policy
- orchestrator: one agent cycle over flagged learners
- runner: perpetual tick loop with backoff and graceful shutdown
- bootstrap: dependency wiring from settings
"""

from src.agent.decision_engine import DecisionEngine, DecisionThresholds
from src.agent.orchestrator import AgentOrchestrator
from src.agent.runner import AgentRunner, RunnerStatus, run_agent

__all__ = [
    "DecisionEngine",
    "DecisionThresholds",
    "AgentOrchestrator",
    "AgentRunner",
    "RunnerStatus",
    "run_agent",
]
