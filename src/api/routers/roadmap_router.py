"""
Roadmap router.

Endpoints for creating roadmaps, opening days (just-in-time content) and
completing days.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from loguru import logger
from pydantic import BaseModel, Field

from src.api.dependencies import get_roadmap_service
from src.core.exceptions import DayNotFoundError, RoadmapNotFoundError
from src.core.types import (
    DayBundle,
    FlashcardRecord,
    LessonRecord,
    QuizRecord,
    Roadmap,
    RoadmapDay,
)
from src.roadmap.roadmap_service import RoadmapService

router = APIRouter()

DEFAULT_OWNER = "user_default"


# ========================================
# Request/Response Models
# ========================================


class CreateRoadmapRequest(BaseModel):
    owner_id: str = DEFAULT_OWNER
    topic: str = Field(min_length=3, max_length=200)
    total_days: int = Field(ge=3, le=90)
    daily_minutes: int = Field(ge=30, le=240)


class CreateRoadmapResponse(BaseModel):
    roadmap_id: str


class RoadmapResponse(BaseModel):
    id: str
    owner_id: str
    topic: str
    status: str
    total_days: int
    daily_minutes: int
    current_day: int
    created_at: str | None = None

    @classmethod
    def from_roadmap(cls, roadmap: Roadmap) -> RoadmapResponse:
        return cls(
            id=roadmap.id,
            owner_id=roadmap.owner_id,
            topic=roadmap.topic,
            status=roadmap.status.value,
            total_days=roadmap.total_days,
            daily_minutes=roadmap.daily_minutes,
            current_day=roadmap.current_day,
            created_at=roadmap.created_at.isoformat() if roadmap.created_at else None,
        )


class RoadmapSummaryResponse(RoadmapResponse):
    completed_days: int
    progress: int


class DayResponse(BaseModel):
    id: str
    roadmap_id: str
    day_number: int
    topic: str
    status: str
    description: str | None = None
    objectives: list[str] = []

    @classmethod
    def from_day(cls, day: RoadmapDay) -> DayResponse:
        return cls(
            id=day.id,
            roadmap_id=day.roadmap_id,
            day_number=day.day_number,
            topic=day.topic,
            status=day.status.value,
            description=day.description,
            objectives=day.objectives,
        )


class RoadmapDetailsResponse(BaseModel):
    roadmap: RoadmapResponse
    days: list[DayResponse]


class LessonResponse(BaseModel):
    id: str
    topic: str
    title: str
    content: str
    key_points: list[str]
    difficulty: int
    estimated_minutes: int
    completed: bool

    @classmethod
    def from_record(cls, record: LessonRecord) -> LessonResponse:
        return cls(
            id=record.id,
            topic=record.topic,
            title=record.title,
            content=record.content,
            key_points=record.key_points,
            difficulty=record.difficulty,
            estimated_minutes=record.estimated_minutes,
            completed=record.completed,
        )


class QuizResponse(BaseModel):
    id: str
    title: str
    questions: list[dict]
    difficulty: int
    total_questions: int

    @classmethod
    def from_record(cls, record: QuizRecord) -> QuizResponse:
        return cls(
            id=record.id,
            title=record.title,
            questions=record.questions,
            difficulty=record.difficulty,
            total_questions=record.total_questions,
        )


class FlashcardResponse(BaseModel):
    id: str
    front: str
    back: str
    tags: list[str]

    @classmethod
    def from_record(cls, record: FlashcardRecord) -> FlashcardResponse:
        return cls(id=record.id, front=record.front, back=record.back, tags=record.tags)


class DayBundleResponse(BaseModel):
    day: DayResponse
    roadmap: RoadmapResponse
    lesson: LessonResponse | None = None
    quiz: QuizResponse | None = None
    flashcards: list[FlashcardResponse] = []

    @classmethod
    def from_bundle(cls, bundle: DayBundle) -> DayBundleResponse:
        return cls(
            day=DayResponse.from_day(bundle.day),
            roadmap=RoadmapResponse.from_roadmap(bundle.roadmap),
            lesson=LessonResponse.from_record(bundle.lesson) if bundle.lesson else None,
            quiz=QuizResponse.from_record(bundle.quiz) if bundle.quiz else None,
            flashcards=[FlashcardResponse.from_record(card) for card in bundle.flashcards],
        )


class GenerateLessonRequest(BaseModel):
    learner_id: str = DEFAULT_OWNER


class DayCompletionResponse(BaseModel):
    completed_day: int
    unlocked_day: int | None
    roadmap_completed: bool


# ========================================
# Roadmap Endpoints
# ========================================


@router.post("/roadmaps", response_model=CreateRoadmapResponse, status_code=201, summary="Create a roadmap")
async def create_roadmap(
    request: CreateRoadmapRequest,
    service: RoadmapService = Depends(get_roadmap_service),
) -> CreateRoadmapResponse:
    """Generate a day-by-day outline for a topic and store it."""
    logger.info("Creating roadmap '{}' for {}", request.topic, request.owner_id)
    roadmap_id = await service.create_roadmap(
        request.owner_id, request.topic, request.total_days, request.daily_minutes
    )
    return CreateRoadmapResponse(roadmap_id=roadmap_id)


@router.get("/roadmaps", response_model=list[RoadmapSummaryResponse], summary="List roadmaps")
async def list_roadmaps(
    owner_id: str = Query(DEFAULT_OWNER),
    service: RoadmapService = Depends(get_roadmap_service),
) -> list[RoadmapSummaryResponse]:
    summaries = await service.get_user_roadmaps(owner_id)
    return [
        RoadmapSummaryResponse(
            **RoadmapResponse.from_roadmap(s.roadmap).model_dump(),
            completed_days=s.completed_days,
            progress=s.progress,
        )
        for s in summaries
    ]


@router.get("/roadmaps/{roadmap_id}", response_model=RoadmapDetailsResponse, summary="Roadmap with days")
async def get_roadmap(
    roadmap_id: str,
    service: RoadmapService = Depends(get_roadmap_service),
) -> RoadmapDetailsResponse:
    details = await service.get_roadmap_details(roadmap_id)
    if details is None:
        raise RoadmapNotFoundError(roadmap_id)
    return RoadmapDetailsResponse(
        roadmap=RoadmapResponse.from_roadmap(details.roadmap),
        days=[DayResponse.from_day(day) for day in details.days],
    )


@router.delete("/roadmaps/{roadmap_id}", status_code=204, summary="Delete a roadmap")
async def delete_roadmap(
    roadmap_id: str,
    service: RoadmapService = Depends(get_roadmap_service),
) -> None:
    await service.delete_roadmap(roadmap_id)


# ========================================
# Day Endpoints
# ========================================


@router.get("/days/{day_id}", response_model=DayBundleResponse, summary="Day with its content")
async def get_day(
    day_id: str,
    learner_id: str | None = Query(None),
    service: RoadmapService = Depends(get_roadmap_service),
) -> DayBundleResponse:
    bundle = await service.get_day_with_lesson(day_id, learner_id)
    if bundle is None:
        raise DayNotFoundError(day_id)
    return DayBundleResponse.from_bundle(bundle)


@router.post("/days/{day_id}/lesson", response_model=LessonResponse, summary="Generate day content")
async def generate_day_lesson(
    day_id: str,
    request: GenerateLessonRequest,
    service: RoadmapService = Depends(get_roadmap_service),
) -> LessonResponse:
    """Generate (or return the existing) lesson, quiz and flashcards for a day."""
    record = await service.generate_day_lesson(day_id, request.learner_id)
    return LessonResponse.from_record(record)


@router.post(
    "/roadmaps/{roadmap_id}/days/{day_id}/complete",
    response_model=DayCompletionResponse,
    summary="Complete a day",
)
async def complete_day(
    roadmap_id: str,
    day_id: str,
    service: RoadmapService = Depends(get_roadmap_service),
) -> DayCompletionResponse:
    completion = await service.complete_day(roadmap_id, day_id)
    return DayCompletionResponse(
        completed_day=completion.completed_day,
        unlocked_day=completion.unlocked_day,
        roadmap_completed=completion.roadmap_completed,
    )
