"""
Roadmap Repository.

Roadmap and day rows. create_roadmap() writes the roadmap and all of its
days in a single transaction; status writes return affected row counts so
callers can tell a no-op (e.g. unlocking a day past the end) apart from a
real transition.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.types import DayStatus, Roadmap, RoadmapDay, RoadmapStatus, ensure_utc, utcnow
from src.db.database import async_session_scope
from src.db.models import RoadmapDayModel, RoadmapModel


class SqlRoadmapRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # ========================================
    # Roadmaps
    # ========================================

    async def create_roadmap(self, roadmap: Roadmap, days: list[RoadmapDay]) -> None:
        async with async_session_scope(self.session_factory) as session:
            session.add(
                RoadmapModel(
                    id=roadmap.id,
                    owner_id=roadmap.owner_id,
                    topic=roadmap.topic,
                    status=roadmap.status.value,
                    total_days=roadmap.total_days,
                    daily_minutes=roadmap.daily_minutes,
                    current_day=roadmap.current_day,
                    created_at=roadmap.created_at or utcnow(),
                )
            )
            # Parent row must exist before the days reference it
            await session.flush()
            session.add_all(
                RoadmapDayModel(
                    id=day.id,
                    roadmap_id=roadmap.id,
                    day_number=day.day_number,
                    topic=day.topic,
                    description=day.description,
                    objectives=list(day.objectives),
                    status=day.status.value,
                )
                for day in days
            )
        logger.info("🗺️  Created roadmap {} with {} days", roadmap.id, len(days))

    async def get_roadmap(self, roadmap_id: str) -> Roadmap | None:
        async with async_session_scope(self.session_factory) as session:
            row = await session.get(RoadmapModel, roadmap_id)
            return self._to_roadmap(row) if row else None

    async def list_roadmaps(self, owner_id: str) -> list[Roadmap]:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                select(RoadmapModel)
                .where(RoadmapModel.owner_id == owner_id)
                .order_by(RoadmapModel.created_at)
            )
            return [self._to_roadmap(row) for row in result.scalars()]

    async def set_current_day(self, roadmap_id: str, current_day: int) -> None:
        async with async_session_scope(self.session_factory) as session:
            await session.execute(
                update(RoadmapModel)
                .where(RoadmapModel.id == roadmap_id)
                .values(current_day=current_day, updated_at=utcnow())
            )

    async def set_status(self, roadmap_id: str, status: RoadmapStatus) -> None:
        async with async_session_scope(self.session_factory) as session:
            await session.execute(
                update(RoadmapModel)
                .where(RoadmapModel.id == roadmap_id)
                .values(status=status.value, updated_at=utcnow())
            )

    async def delete_roadmap(self, roadmap_id: str) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(delete(RoadmapModel).where(RoadmapModel.id == roadmap_id))
            return result.rowcount

    # ========================================
    # Days
    # ========================================

    async def get_days(self, roadmap_id: str) -> list[RoadmapDay]:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                select(RoadmapDayModel)
                .where(RoadmapDayModel.roadmap_id == roadmap_id)
                .order_by(RoadmapDayModel.day_number)
            )
            return [self._to_day(row) for row in result.scalars()]

    async def get_day(self, day_id: str) -> RoadmapDay | None:
        async with async_session_scope(self.session_factory) as session:
            row = await session.get(RoadmapDayModel, day_id)
            return self._to_day(row) if row else None

    async def set_day_status(
        self,
        roadmap_id: str,
        day_number: int,
        status: DayStatus,
        only_if: DayStatus | None = None,
    ) -> int:
        """Set a day's status; returns 0 when no such day (or guard not met)."""
        query = update(RoadmapDayModel).where(
            RoadmapDayModel.roadmap_id == roadmap_id,
            RoadmapDayModel.day_number == day_number,
        )
        if only_if is not None:
            query = query.where(RoadmapDayModel.status == only_if.value)
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(query.values(status=status.value))
            return result.rowcount

    async def delete_days(self, roadmap_id: str) -> int:
        async with async_session_scope(self.session_factory) as session:
            result = await session.execute(
                delete(RoadmapDayModel).where(RoadmapDayModel.roadmap_id == roadmap_id)
            )
            return result.rowcount

    # ========================================
    # Mapping
    # ========================================

    @staticmethod
    def _to_roadmap(row: RoadmapModel) -> Roadmap:
        return Roadmap(
            id=row.id,
            owner_id=row.owner_id,
            topic=row.topic,
            total_days=row.total_days,
            daily_minutes=row.daily_minutes,
            status=RoadmapStatus(row.status),
            current_day=row.current_day,
            created_at=ensure_utc(row.created_at) if row.created_at else None,
        )

    @staticmethod
    def _to_day(row: RoadmapDayModel) -> RoadmapDay:
        return RoadmapDay(
            id=row.id,
            roadmap_id=row.roadmap_id,
            day_number=row.day_number,
            topic=row.topic,
            status=DayStatus(row.status),
            description=row.description,
            objectives=list(row.objectives or []),
        )
