"""
Learner & Agent Models.

- LearnerLearningState: measured state the agent senses each tick
- LearnerActivity: append-only activity events
- AgentMemory: long-term per-learner memory (JSON documents)
- AgentLog: one row per decision taken (or failed) in a tick
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.types import utcnow

from .base import Base, new_id


class LearnerLearningState(Base):
    """Current mastery, topic and recent quiz scores for one learner."""

    __tablename__ = "learner_learning_state"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    learner_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    current_topic: Mapped[str] = mapped_column(Text, nullable=False)

    # 0-100 scale
    mastery_level: Mapped[float] = mapped_column(Float, default=0.0)
    recent_scores: Mapped[list[float]] = mapped_column(JSON, default=list)  # oldest first
    needs_attention: Mapped[bool] = mapped_column(Boolean, default=False)

    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("idx_learning_state_attention", "needs_attention"),)

    def __repr__(self) -> str:
        return f"<LearnerLearningState learner={self.learner_id} mastery={self.mastery_level}>"


class LearnerActivity(Base):
    __tablename__ = "learner_activity"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    learner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)  # 'lesson_generated', 'quiz_generated', ...
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class AgentMemory(Base):
    """
    Long-term agent memory for one learner.

    learning_patterns: {"bestTimeOfDay", "averageSessionLength", "preferredDifficulty"}
    historical_performance: [{"topic", "averageScore", "attempts"}]
    """

    __tablename__ = "agent_memory"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    learner_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    learning_patterns: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    historical_performance: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<AgentMemory learner={self.learner_id}>"


class AgentLog(Base):
    __tablename__ = "agent_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    tick_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    learner_id: Mapped[str | None] = mapped_column(String(64), index=True)
    decision_type: Mapped[str | None] = mapped_column(String(32))
    decision_data: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    error: Mapped[str | None] = mapped_column(Text)
    execution_time_ms: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
