"""
Roadmap Module - Day-by-day curriculum progression.

Components:
- progression: difficulty and content-size ramps by day number
- roadmap_service: create, generate day content, complete, delete
"""

from src.roadmap.progression import DayPlan, plan_for_day
from src.roadmap.roadmap_service import RoadmapService

__all__ = ["DayPlan", "plan_for_day", "RoadmapService"]
