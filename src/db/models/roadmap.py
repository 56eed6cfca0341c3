"""
Roadmap Models.

A roadmap owns its days; deleting a roadmap removes its days. Generated
content for a day lives in lessons/quizzes/flashcards and points back to
the day through a plain day_id column.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.types import utcnow

from .base import Base, new_id


class RoadmapModel(Base):
    __tablename__ = "roadmaps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active")  # active, completed, archived
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    daily_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    current_day: Mapped[int] = mapped_column(Integer, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    days: Mapped[list[RoadmapDayModel]] = relationship(
        back_populates="roadmap",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RoadmapDayModel.day_number",
    )

    def __repr__(self) -> str:
        return f"<Roadmap {self.id} topic={self.topic!r} day={self.current_day}/{self.total_days}>"


class RoadmapDayModel(Base):
    __tablename__ = "roadmap_days"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    roadmap_id: Mapped[str] = mapped_column(
        ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    objectives: Mapped[list[str]] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(16), default="locked")  # locked, available, completed

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    roadmap: Mapped[RoadmapModel] = relationship(back_populates="days")

    __table_args__ = (UniqueConstraint("roadmap_id", "day_number", name="uq_roadmap_day_number"),)

    def __repr__(self) -> str:
        return f"<RoadmapDay {self.day_number} status={self.status}>"
